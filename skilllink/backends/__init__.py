from __future__ import annotations

from typing import Any, Callable, Dict, Optional, Protocol

from skilllink.core.models import (
    Application,
    AuthResult,
    Category,
    Job,
    LoginCredentials,
    Message,
    RegisterData,
    User,
)


class Backend(Protocol):
    """Capability set shared by the REST and demo backends."""

    name: str

    def login(self, credentials: LoginCredentials) -> AuthResult: ...
    def register(self, data: RegisterData) -> AuthResult: ...
    def logout(self, refresh_token: Optional[str]) -> None: ...
    def refresh_tokens(self, refresh_token: str) -> str: ...
    def get_current_user(self) -> User: ...
    def update_profile(self, changes: dict) -> User: ...

    def get_jobs(self) -> list[Job]: ...
    def get_job(self, job_id: str) -> Job: ...
    def create_job(self, fields: dict) -> Job: ...
    def update_job(self, job_id: str, changes: dict) -> Job: ...
    def delete_job(self, job_id: str) -> None: ...

    def get_applications(self, job_id: Optional[str] = None) -> list[Application]: ...
    def create_application(self, fields: dict) -> Application: ...
    def update_application(self, application_id: str, changes: dict) -> Application: ...

    def get_workers(self) -> list[User]: ...
    def get_worker(self, worker_id: str) -> User: ...

    def get_messages(self, recipient_id: str) -> list[Message]: ...
    def send_message(self, recipient_id: str, content: str, job_id: Optional[str] = None) -> Message: ...

    def upload_file(self, path: str, kind: str) -> str: ...

    def get_categories(self) -> list[Category]: ...
    def get_skills_by_category(self, category_id: str) -> list[str]: ...


# Factories take (settings, credentials, client) and return a Backend.
BackendFactory = Callable[..., Backend]

REGISTRY: Dict[str, BackendFactory] = {}


def register(name: str, factory: BackendFactory) -> None:
    REGISTRY[name] = factory


def get(name: str) -> BackendFactory:
    try:
        return REGISTRY[name]
    except KeyError:
        raise KeyError(f"unknown backend {name!r}; known: {', '.join(sorted(REGISTRY))}") from None


def create(name: str, **deps: Any) -> Backend:
    return get(name)(**deps)


from .demo import DemoBackend  # noqa: E402
from .rest import RestBackend  # noqa: E402

register(DemoBackend.name, DemoBackend.from_deps)
register(RestBackend.name, RestBackend.from_deps)
