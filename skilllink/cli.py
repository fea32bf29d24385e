# skilllink/cli.py
from __future__ import annotations

import argparse
import getpass
import logging
import sys
from typing import Optional

from skilllink.app import AppContext, create_context
from skilllink.core.errors import SkillLinkError
from skilllink.core.models import LoginCredentials, RegisterData, WorkerUser

LOGGER = logging.getLogger(__name__)


def _print_invalidated(reason: str) -> None:
    print(f"Session expired ({reason}). Please log in again: skilllink login")


def _require_user(ctx: AppContext):
    user = ctx.session.current_user
    if user is None:
        print("Not logged in. Run: skilllink login --email ... --role client|worker")
        return None
    return user


def cmd_login(ctx: AppContext, args) -> int:
    password = args.password or getpass.getpass("Password: ")
    ok = ctx.session.login(LoginCredentials(email=args.email, password=password, role=args.role))
    if not ok:
        print(f"Login failed: {ctx.session.last_error}")
        return 1
    ctx.remember_current_user()
    user = ctx.session.current_user
    print(f"Logged in as {user.name} ({user.role}, id={user.id})")
    return 0


def cmd_register(ctx: AppContext, args) -> int:
    password = args.password or getpass.getpass("Password: ")
    data = RegisterData(
        full_name=args.name,
        email=args.email,
        password=password,
        phone=args.phone or "",
        role=args.role,
        location=args.location or "",
        company=args.company,
        primary_category=args.category,
        skills=[s.strip() for s in (args.skills or "").split(",") if s.strip()],
    )
    if not ctx.session.register(data):
        print(f"Registration failed: {ctx.session.last_error}")
        return 1
    ctx.remember_current_user()
    user = ctx.session.current_user
    print(f"Registered {user.name} ({user.role}, id={user.id})")
    return 0


def cmd_logout(ctx: AppContext, args) -> int:
    ctx.session.logout()
    print("Logged out.")
    return 0


def cmd_whoami(ctx: AppContext, args) -> int:
    user = _require_user(ctx)
    if user is None:
        return 1
    print(f"{user.name} <{user.email}> role={user.role} id={user.id} location={user.location or '-'}")
    if isinstance(user, WorkerUser):
        print(f"  {user.category} | {user.experience}y | ${user.hourly_rate:g}/h | rating {user.rating:g} | {user.availability}")
    else:
        print(f"  jobs posted {user.jobs_posted} | total spent ${user.total_spent:g}")
    return 0


def cmd_workers(ctx: AppContext, args) -> int:
    for w in ctx.backend.get_workers():
        if args.category and getattr(w, "category", "").lower() != args.category.lower():
            continue
        print(f"{w.id:<6} {w.name:<20} {getattr(w, 'category', ''):<12} {w.location}")
    return 0


def cmd_jobs(ctx: AppContext, args) -> int:
    for j in ctx.backend.get_jobs():
        if args.status and j.status != args.status:
            continue
        print(f"{j.id:<6} {j.status:<12} ${j.budget:>8,.0f}  {j.title}")
    return 0


def cmd_send(ctx: AppContext, args) -> int:
    user = _require_user(ctx)
    if user is None:
        return 1
    message = ctx.conversations.send(user.id, args.to, " ".join(args.text), job_id=args.job)
    if message is None:
        print("Nothing sent.")
        return 1
    print(f"Sent {message.id} to {args.to}")
    return 0


def cmd_inbox(ctx: AppContext, args) -> int:
    user = _require_user(ctx)
    if user is None:
        return 1
    previews = ctx.conversations.load_previews(user.id)
    if not previews:
        print("No conversations yet.")
    for p in previews:
        unread = f" [{p.unread_count} unread]" if p.unread_count else ""
        print(f"{p.user.id:<16} {p.user.name:<20} {p.last_message.content[:50]}{unread}")
    return 0


def cmd_thread(ctx: AppContext, args) -> int:
    user = _require_user(ctx)
    if user is None:
        return 1
    for m in ctx.conversations.load_conversation(user.id, args.other):
        who = "me" if m.sender_id == user.id else m.sender_id
        print(f"{m.timestamp:%Y-%m-%d %H:%M} {who:>8}: {m.content}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="skilllink", description="SkillLink client")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("login", help="Log in and store the session")
    p.add_argument("--email", required=True)
    p.add_argument("--password", help="Prompted for when omitted")
    p.add_argument("--role", choices=["client", "worker"], required=True)
    p.set_defaults(func=cmd_login)

    p = sub.add_parser("register", help="Create an account and log in")
    p.add_argument("--name", required=True)
    p.add_argument("--email", required=True)
    p.add_argument("--password", help="Prompted for when omitted")
    p.add_argument("--role", choices=["client", "worker"], required=True)
    p.add_argument("--phone")
    p.add_argument("--location")
    p.add_argument("--company", help="Clients only")
    p.add_argument("--category", help="Workers only: primary category")
    p.add_argument("--skills", help="Workers only: comma-separated skills")
    p.set_defaults(func=cmd_register)

    sub.add_parser("logout", help="Clear the stored session").set_defaults(func=cmd_logout)
    sub.add_parser("whoami", help="Show the current user").set_defaults(func=cmd_whoami)

    p = sub.add_parser("workers", help="List workers")
    p.add_argument("--category")
    p.set_defaults(func=cmd_workers)

    p = sub.add_parser("jobs", help="List jobs")
    p.add_argument("--status", choices=["open", "in_progress", "completed", "cancelled"])
    p.set_defaults(func=cmd_jobs)

    p = sub.add_parser("send", help="Send a chat message")
    p.add_argument("to", help="Recipient user id")
    p.add_argument("text", nargs="+")
    p.add_argument("--job", help="Related job id")
    p.set_defaults(func=cmd_send)

    sub.add_parser("inbox", help="List conversations").set_defaults(func=cmd_inbox)

    p = sub.add_parser("thread", help="Show one conversation")
    p.add_argument("other", help="Other participant's user id")
    p.set_defaults(func=cmd_thread)
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx = create_context(on_invalidated=_print_invalidated)
    try:
        ctx.start()
        return args.func(ctx, args)
    except SkillLinkError as exc:
        LOGGER.debug("command failed", exc_info=True)
        print(f"Error: {exc}")
        return 2
    finally:
        ctx.close()


if __name__ == "__main__":
    # When executed as `python -m skilllink.cli ...`
    sys.exit(main())
