"""Runtime configuration for the SkillLink client.

Everything is read from the environment. If a ``.env`` file exists (path
overridable via ``SKILLLINK_DOTENV``) it is loaded first so the CLI and any
embedding application agree on the backend and storage location.

SKILLLINK_API_URL          REST base URL (default http://127.0.0.1:8000/api)
SKILLLINK_USE_DEMO_API     "true" selects the in-memory demo backend
SKILLLINK_STORAGE_URL      SQLAlchemy URL for local storage (DATABASE_URL also honoured)
SKILLLINK_HTTP_TIMEOUT     seconds per HTTP request
SKILLLINK_DEMO_ACCESS_TTL  lifetime of demo access tokens, seconds
SKILLLINK_DEMO_REFRESH_TTL lifetime of demo refresh tokens, seconds
"""
from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

_ = load_dotenv(dotenv_path=os.getenv("SKILLLINK_DOTENV", ".env"))

DEFAULT_API_URL = "http://127.0.0.1:8000/api"
DEFAULT_STORAGE_URL = "sqlite:///./skilllink.db"


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def storage_url() -> str:
    return (
        os.getenv("SKILLLINK_STORAGE_URL")
        or os.getenv("DATABASE_URL")
        or DEFAULT_STORAGE_URL
    )


@dataclass(frozen=True)
class Settings:
    api_url: str = DEFAULT_API_URL
    use_demo_api: bool = True
    storage_url: str = DEFAULT_STORAGE_URL
    http_timeout: float = 15.0
    demo_access_ttl: int = 3600
    demo_refresh_ttl: int = 7 * 24 * 3600

    @property
    def backend_name(self) -> str:
        return "demo" if self.use_demo_api else "rest"


def load_settings() -> Settings:
    return Settings(
        api_url=os.getenv("SKILLLINK_API_URL", DEFAULT_API_URL).rstrip("/"),
        use_demo_api=_flag("SKILLLINK_USE_DEMO_API", "true"),
        storage_url=storage_url(),
        http_timeout=float(os.getenv("SKILLLINK_HTTP_TIMEOUT", "15")),
        demo_access_ttl=int(os.getenv("SKILLLINK_DEMO_ACCESS_TTL", "3600")),
        demo_refresh_ttl=int(os.getenv("SKILLLINK_DEMO_REFRESH_TTL", str(7 * 24 * 3600))),
    )
