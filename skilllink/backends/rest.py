from __future__ import annotations

import logging
import os
from typing import Any, Optional

from pydantic import ValidationError

from skilllink.backends.http import ApiClient
from skilllink.core.errors import ApiError, CredentialError, ResponseDecodeError, SessionInvalidatedError
from skilllink.core.models import (
    Application,
    AuthResult,
    Category,
    Job,
    LoginCredentials,
    Message,
    RegisterData,
    User,
    parse_user,
)

LOGGER = logging.getLogger(__name__)

UPLOAD_KINDS = ("profile", "job", "document")


def _parse(model, data: Any):
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise ResponseDecodeError(f"Unexpected {model.__name__} payload") from exc


def _parse_list(model, data: Any) -> list:
    if not isinstance(data, list):
        raise ResponseDecodeError(f"Expected a list of {model.__name__}")
    return [_parse(model, item) for item in data]


def _parse_user(data: Any) -> User:
    try:
        return parse_user(data)
    except ValidationError as exc:
        raise ResponseDecodeError("Unexpected user payload") from exc


def _parse_auth(data: Any) -> AuthResult:
    if not isinstance(data, dict):
        raise ResponseDecodeError("Unexpected auth payload")
    access, refresh = data.get("access"), data.get("refresh")
    if not access or not refresh:
        raise ResponseDecodeError("Auth payload is missing tokens")
    return AuthResult(user=_parse_user(data.get("user")), access=access, refresh=refresh)


class RestBackend:
    """Backend talking to the SkillLink REST API."""

    name = "rest"

    def __init__(self, client: ApiClient):
        self.client = client

    @classmethod
    def from_deps(cls, *, client: ApiClient, **_: Any) -> "RestBackend":
        return cls(client)

    # --- auth ---------------------------------------------------------------

    def _auth_call(self, endpoint: str, payload: dict, failure: str) -> AuthResult:
        try:
            data = self.client.request("POST", endpoint, payload, authenticated=False)
        except ApiError as exc:
            # 4xx here means the server rejected what the user typed
            if exc.status_code is not None and 400 <= exc.status_code < 500:
                raise CredentialError(exc.message or failure) from exc
            raise
        return _parse_auth(data)

    def login(self, credentials: LoginCredentials) -> AuthResult:
        return self._auth_call("/auth/login/", credentials.model_dump(exclude_none=True), "Login failed")

    def register(self, data: RegisterData) -> AuthResult:
        return self._auth_call("/auth/register/", data.model_dump(exclude_none=True), "Registration failed")

    def logout(self, refresh_token: Optional[str]) -> None:
        if not refresh_token:
            LOGGER.debug("logout skipped remote call; no refresh token")
            return
        self.client.request("POST", "/auth/logout/", {"refresh": refresh_token}, retry_on_401=False)

    def refresh_tokens(self, refresh_token: str) -> str:
        body = self.client.request(
            "POST",
            "/auth/refresh/",
            {"refresh": refresh_token},
            authenticated=False,
            envelope=False,
        )
        if not isinstance(body, dict):
            raise ResponseDecodeError("Unexpected refresh payload")
        payload = body["data"] if isinstance(body.get("data"), dict) else body
        access = payload.get("access")
        if not isinstance(access, str) or not access:
            raise SessionInvalidatedError("Refresh response carried no access token")
        return access

    def get_current_user(self) -> User:
        return _parse_user(self.client.request("GET", "/auth/user/"))

    def update_profile(self, changes: dict) -> User:
        return _parse_user(self.client.request("PATCH", "/auth/user/", changes))

    # --- jobs ---------------------------------------------------------------

    def get_jobs(self) -> list[Job]:
        return _parse_list(Job, self.client.request("GET", "/jobs/"))

    def get_job(self, job_id: str) -> Job:
        return _parse(Job, self.client.request("GET", f"/jobs/{job_id}/"))

    def create_job(self, fields: dict) -> Job:
        return _parse(Job, self.client.request("POST", "/jobs/", fields))

    def update_job(self, job_id: str, changes: dict) -> Job:
        return _parse(Job, self.client.request("PATCH", f"/jobs/{job_id}/", changes))

    def delete_job(self, job_id: str) -> None:
        self.client.request("DELETE", f"/jobs/{job_id}/")

    # --- applications -------------------------------------------------------

    def get_applications(self, job_id: Optional[str] = None) -> list[Application]:
        params = {"job": job_id} if job_id else None
        return _parse_list(Application, self.client.request("GET", "/applications/", params=params))

    def create_application(self, fields: dict) -> Application:
        return _parse(Application, self.client.request("POST", "/applications/", fields))

    def update_application(self, application_id: str, changes: dict) -> Application:
        return _parse(Application, self.client.request("PATCH", f"/applications/{application_id}/", changes))

    # --- workers ------------------------------------------------------------

    def get_workers(self) -> list[User]:
        data = self.client.request("GET", "/workers/")
        if not isinstance(data, list):
            raise ResponseDecodeError("Expected a list of workers")
        return [_parse_user(item) for item in data]

    def get_worker(self, worker_id: str) -> User:
        return _parse_user(self.client.request("GET", f"/workers/{worker_id}/"))

    # --- messages -----------------------------------------------------------

    def get_messages(self, recipient_id: str) -> list[Message]:
        return _parse_list(Message, self.client.request("GET", "/messages/", params={"recipient": recipient_id}))

    def send_message(self, recipient_id: str, content: str, job_id: Optional[str] = None) -> Message:
        payload = {"recipientId": recipient_id, "content": content, "type": "text"}
        if job_id:
            payload["jobId"] = job_id
        return _parse(Message, self.client.request("POST", "/messages/", payload))

    # --- misc ---------------------------------------------------------------

    def upload_file(self, path: str, kind: str) -> str:
        if kind not in UPLOAD_KINDS:
            raise ValueError(f"upload kind must be one of {UPLOAD_KINDS}")
        # retries resend call.files as is
        with open(path, "rb") as fh:
            content = fh.read()
        data = self.client.request(
            "POST",
            "/upload/",
            files={"file": (os.path.basename(path), content)},
            data={"type": kind},
        )
        if not isinstance(data, dict) or not data.get("url"):
            raise ResponseDecodeError("Upload response carried no url")
        LOGGER.info("upload done kind=%s file=%s", kind, os.path.basename(path))
        return data["url"]

    def get_categories(self) -> list[Category]:
        return _parse_list(Category, self.client.request("GET", "/categories/", authenticated=False))

    def get_skills_by_category(self, category_id: str) -> list[str]:
        data = self.client.request("GET", f"/categories/{category_id}/skills/", authenticated=False)
        if not isinstance(data, list):
            raise ResponseDecodeError("Expected a list of skills")
        return [str(s) for s in data]
