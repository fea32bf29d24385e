"""Shared fixtures for the test modules (in-memory storage, fake REST server)."""
from __future__ import annotations

import time
import uuid
from collections import Counter

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from skilllink.core.models import ClientUser, WorkerUser
from skilllink.core.tokens import mint_token
from skilllink.db.session import init_storage, make_engine, session_factory
from skilllink.db.store import KeyValueStore


def memory_store() -> KeyValueStore:
    engine = make_engine("sqlite://")
    init_storage(engine)
    return KeyValueStore(session_factory(engine))


def access_token(ttl: float = 3600, **claims) -> str:
    return mint_token({"sub": "u", "exp": time.time() + ttl, "jti": uuid.uuid4().hex, **claims})


def client_user(user_id: str = "c1", name: str = "Emily Rodriguez") -> ClientUser:
    return ClientUser(id=user_id, name=name, email=f"{user_id}@example.com", location="Austin, TX")


def worker_user(user_id: str = "w1", name: str = "Marcus Johnson") -> WorkerUser:
    return WorkerUser(id=user_id, name=name, email=f"{user_id}@example.com", category="Carpenter")


# --- fake REST server ---------------------------------------------------------

API_PREFIX = "/api"

SERVER_USER = {
    "id": "c9",
    "name": "Emily Rodriguez",
    "email": "emily@example.com",
    "type": "client",
    "location": "Austin, TX",
    "createdAt": "2024-01-10",
    "jobs_posted": 3,
    "total_spent": 1200,
}

SERVER_JOBS = [
    {
        "id": "j1",
        "title": "Kitchen Cabinet Installation",
        "category": "Carpenter",
        "budget": 2500,
        "clientId": "c9",
        "status": "open",
        "skills": ["Own tools"],
    },
]


class FakeApiState:
    """Knobs and counters for the fake server."""

    def __init__(self):
        self.calls: Counter = Counter()
        self.auth_headers: list[str | None] = []
        self.valid_access: set[str] = set()
        self.valid_refresh: set[str] = set()
        self.refresh_fails = False
        self.logout_fails = False
        self.jobs_status: int | None = None
        self.password = "secret"

    def issue(self) -> tuple[str, str]:
        access = access_token(sub=SERVER_USER["id"])
        refresh = mint_token({"sub": SERVER_USER["id"], "type": "refresh", "jti": uuid.uuid4().hex})
        self.valid_access.add(access)
        self.valid_refresh.add(refresh)
        return access, refresh

    def revoke_access(self) -> None:
        self.valid_access.clear()


def _ok(data) -> dict:
    return {"data": data, "success": True, "message": "Success"}


def _fail(status: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status, content={"data": None, "success": False, "message": message})


def build_fake_api(state: FakeApiState) -> FastAPI:
    app = FastAPI()

    @app.middleware("http")
    async def count_calls(request: Request, call_next):
        path = request.url.path[len(API_PREFIX):]
        state.calls[path] += 1
        if path == "/jobs/":
            state.auth_headers.append(request.headers.get("authorization"))
        return await call_next(request)

    def bearer_ok(request: Request) -> bool:
        header = request.headers.get("authorization") or ""
        return header.startswith("Bearer ") and header[len("Bearer "):] in state.valid_access

    @app.post(f"{API_PREFIX}/auth/login/")
    async def login(request: Request):
        body = await request.json()
        if body.get("email") != SERVER_USER["email"] or body.get("password") != state.password:
            return _fail(400, "Invalid credentials")
        access, refresh = state.issue()
        return _ok({"user": SERVER_USER, "access": access, "refresh": refresh})

    @app.post(f"{API_PREFIX}/auth/register/")
    async def register(request: Request):
        body = await request.json()
        user = {
            "id": "w42",
            "name": body["full_name"],
            "email": body["email"],
            "role": body["role"],
            "skills": body.get("skills", []),
            "rating": 0,
            "total_jobs": 0,
        }
        access, refresh = state.issue()
        return _ok({"user": user, "access": access, "refresh": refresh})

    @app.post(f"{API_PREFIX}/auth/refresh/")
    async def refresh(request: Request):
        body = await request.json()
        if state.refresh_fails or body.get("refresh") not in state.valid_refresh:
            return _fail(401, "Token is invalid or expired")
        access = access_token(sub=SERVER_USER["id"])
        state.valid_access.add(access)
        # simplejwt style: no envelope
        return {"access": access}

    @app.post(f"{API_PREFIX}/auth/logout/")
    async def logout(request: Request):
        if state.logout_fails:
            return _fail(500, "Server error")
        return _ok(None)

    @app.get(f"{API_PREFIX}/auth/user/")
    async def current_user(request: Request):
        if not bearer_ok(request):
            return _fail(401, "Authentication credentials were not provided.")
        return _ok(SERVER_USER)

    @app.get(f"{API_PREFIX}/jobs/")
    async def jobs(request: Request):
        if state.jobs_status is not None:
            return _fail(state.jobs_status, "Forced failure")
        if not bearer_ok(request):
            return _fail(401, "Token expired")
        return _ok(SERVER_JOBS)

    @app.get(f"{API_PREFIX}/workers/")
    async def workers(request: Request):
        return JSONResponse(status_code=200, content=["not", "an", "envelope"])

    return app
