"""In-memory backend over the bundled dataset (demo mode).

Same contract as the REST backend, no network I/O. Tokens are JWT-shaped
with real ``exp`` claims so session checks behave exactly as in live mode.
"""
from __future__ import annotations

import logging
import threading
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from skilllink.auth.credentials import CredentialStore
from skilllink.backends import dataset
from skilllink.core.errors import ApiError, AuthenticationError, CredentialError
from skilllink.core.models import (
    Application,
    AuthResult,
    Category,
    ClientUser,
    Job,
    LoginCredentials,
    Message,
    RegisterData,
    User,
    WorkerUser,
    parse_user,
)
from skilllink.core.tokens import decode_claims, is_token_expired, mint_token

LOGGER = logging.getLogger(__name__)


class DemoBackend:
    name = "demo"

    def __init__(
        self,
        credentials: Optional[CredentialStore] = None,
        *,
        access_ttl: int = 3600,
        refresh_ttl: int = 7 * 24 * 3600,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.credentials = credentials
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self._clock = clock or time.time
        self._lock = threading.Lock()
        self._last_id_ms = 0
        # email (lower-case) -> (password, user) for accounts registered in this process
        self._registered: dict[str, tuple[str, User]] = {}

    @classmethod
    def from_deps(cls, *, settings: Any = None, credentials: Optional[CredentialStore] = None, **_: Any) -> "DemoBackend":
        if settings is None:
            return cls(credentials)
        return cls(credentials, access_ttl=settings.demo_access_ttl, refresh_ttl=settings.demo_refresh_ttl)

    # --- helpers ------------------------------------------------------------

    def _now_iso(self) -> str:
        return datetime.fromtimestamp(self._clock(), tz=timezone.utc).isoformat()

    def _next_id(self, prefix: str) -> str:
        """``<prefix>-<milliseconds>``, strictly increasing within the process."""
        with self._lock:
            now_ms = int(self._clock() * 1000)
            self._last_id_ms = max(now_ms, self._last_id_ms + 1)
            return f"{prefix}-{self._last_id_ms}"

    def _issue(self, user: User) -> AuthResult:
        now = int(self._clock())
        access = mint_token({"sub": user.id, "type": "access", "iat": now, "exp": now + self.access_ttl,
                             "jti": uuid.uuid4().hex}, signature="demo")
        refresh = mint_token({"sub": user.id, "type": "refresh", "iat": now, "exp": now + self.refresh_ttl,
                              "jti": uuid.uuid4().hex}, signature="demo")
        return AuthResult(user=user, access=access, refresh=refresh)

    def _lookup(self, email: str) -> Optional[tuple[str, User]]:
        key = (email or "").strip().lower()
        if key in self._registered:
            return self._registered[key]
        if key in dataset.DEMO_ACCOUNTS:
            user = dataset.find_user_by_email(key)
            if user is not None:
                return dataset.DEMO_ACCOUNTS[key], user
        return None

    def _stored_user(self) -> User:
        user = self.credentials.stored_user() if self.credentials is not None else None
        if user is None:
            raise ApiError("No user data found", 404)
        return user

    # --- auth ---------------------------------------------------------------

    def login(self, credentials: LoginCredentials) -> AuthResult:
        account = self._lookup(credentials.email)
        if account is None:
            raise CredentialError("Invalid credentials")
        password, user = account
        if password != credentials.password:
            raise CredentialError("Invalid credentials")
        if credentials.role is not None and credentials.role != user.role:
            raise CredentialError("Invalid credentials")
        LOGGER.info("demo login user=%s role=%s", user.id, user.role)
        return self._issue(user.model_copy(deep=True))

    def register(self, data: RegisterData) -> AuthResult:
        email = data.email.strip()
        if not email or not data.password:
            raise CredentialError("Email and password are required")
        if self._lookup(email) is not None or dataset.find_user_by_email(email) is not None:
            raise CredentialError("An account with this email already exists")

        common = dict(
            id=self._next_id(data.role),
            name=data.full_name,
            email=email,
            avatar=dataset.DEFAULT_AVATAR,
            phone=data.phone or None,
            location=data.location,
            created_at=self._now_iso(),
        )
        if data.role == "worker":
            user: User = WorkerUser(
                **common,
                skills=list(data.skills),
                category=data.primary_category or "General",
                experience=0,
                hourly_rate=data.hourly_rate or 0,
                rating=0,
                total_jobs=0,
                availability="available",
                bio="",
                certifications=[],
            )
        else:
            user = ClientUser(**common, company=data.company, jobs_posted=0, total_spent=0)

        with self._lock:
            self._registered[email.lower()] = (data.password, user)
        LOGGER.info("demo register user=%s role=%s", user.id, user.role)
        return self._issue(user.model_copy(deep=True))

    def logout(self, refresh_token: Optional[str]) -> None:
        LOGGER.debug("demo logout")

    def refresh_tokens(self, refresh_token: str) -> str:
        try:
            claims = decode_claims(refresh_token or "")
        except ValueError:
            raise AuthenticationError("Invalid refresh token") from None
        if claims.get("type") != "refresh" or is_token_expired(refresh_token, now=self._clock()):
            raise AuthenticationError("Invalid refresh token")
        now = int(self._clock())
        return mint_token({"sub": claims.get("sub"), "type": "access", "iat": now, "exp": now + self.access_ttl,
                           "jti": uuid.uuid4().hex}, signature="demo")

    def get_current_user(self) -> User:
        return self._stored_user()

    def update_profile(self, changes: dict) -> User:
        current = self._stored_user()
        merged = {**current.to_wire(), **changes}
        return parse_user(merged)

    # --- jobs ---------------------------------------------------------------

    def _find_job(self, job_id: str) -> Job:
        for job in dataset.JOBS:
            if job.id == job_id:
                return job
        raise ApiError("Job not found", 404)

    def get_jobs(self) -> list[Job]:
        return [job.model_copy(deep=True) for job in dataset.JOBS]

    def get_job(self, job_id: str) -> Job:
        return self._find_job(job_id).model_copy(deep=True)

    def create_job(self, fields: dict) -> Job:
        now = self._now_iso()
        return Job.model_validate({**fields, "id": self._next_id("demo-job"), "createdAt": now, "updatedAt": now})

    def update_job(self, job_id: str, changes: dict) -> Job:
        job = self._find_job(job_id)
        merged = {**job.to_wire(), **changes, "id": job.id, "updatedAt": self._now_iso()}
        return Job.model_validate(merged)

    def delete_job(self, job_id: str) -> None:
        self._find_job(job_id)

    # --- applications -------------------------------------------------------

    def get_applications(self, job_id: Optional[str] = None) -> list[Application]:
        return [
            app.model_copy(deep=True)
            for app in dataset.APPLICATIONS
            if job_id is None or app.job_id == job_id
        ]

    def create_application(self, fields: dict) -> Application:
        now = self._now_iso()
        return Application.model_validate({**fields, "id": self._next_id("demo-app"), "createdAt": now, "updatedAt": now})

    def update_application(self, application_id: str, changes: dict) -> Application:
        for app in dataset.APPLICATIONS:
            if app.id == application_id:
                merged = {**app.to_wire(), **changes, "id": app.id, "updatedAt": self._now_iso()}
                return Application.model_validate(merged)
        raise ApiError("Application not found", 404)

    # --- workers ------------------------------------------------------------

    def get_workers(self) -> list[User]:
        return [worker.model_copy(deep=True) for worker in dataset.WORKERS]

    def get_worker(self, worker_id: str) -> User:
        for worker in dataset.WORKERS:
            if worker.id == worker_id:
                return worker.model_copy(deep=True)
        raise ApiError("Worker not found", 404)

    # --- messages -----------------------------------------------------------

    def get_messages(self, recipient_id: str) -> list[Message]:
        me = self._stored_user().id
        now = self._clock()
        return [
            Message(id="msg1", sender_id=me, receiver_id=recipient_id,
                    content="Hi, I saw your job posting and I'm interested.",
                    timestamp=datetime.fromtimestamp(now - 3600, tz=timezone.utc), read=True),
            Message(id="msg2", sender_id=recipient_id, receiver_id=me,
                    content="Great! When are you available to start?",
                    timestamp=datetime.fromtimestamp(now - 1800, tz=timezone.utc), read=False),
        ]

    def send_message(self, recipient_id: str, content: str, job_id: Optional[str] = None) -> Message:
        return Message(
            id=self._next_id("demo-msg"),
            sender_id=self._stored_user().id,
            receiver_id=recipient_id,
            job_id=job_id,
            content=content,
            timestamp=datetime.fromtimestamp(self._clock(), tz=timezone.utc),
        )

    # --- misc ---------------------------------------------------------------

    def upload_file(self, path: str, kind: str) -> str:
        if kind not in dataset.UPLOAD_URLS:
            raise ValueError(f"upload kind must be one of {tuple(dataset.UPLOAD_URLS)}")
        return dataset.UPLOAD_URLS[kind]

    def get_categories(self) -> list[Category]:
        return [c.model_copy() for c in dataset.CATEGORIES]

    def get_skills_by_category(self, category_id: str) -> list[str]:
        return list(dataset.SKILLS_BY_CATEGORY.get(category_id, []))
