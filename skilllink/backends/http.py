"""HTTP pipeline for the REST backend.

    ApiClient.request
      -> RefreshOnUnauthorized   (authenticated calls only)
           -> ApiClient._send    (bearer header, transport errors)
      -> ApiClient._unwrap       (status + envelope checks)

The refresh stage receives its retry budget as an argument and spends it on
the recursive call, so an original request is retransmitted at most once.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Protocol

import requests
from pydantic import ValidationError

from skilllink.core.errors import (
    ApiError,
    AuthenticationError,
    ResponseDecodeError,
    SessionInvalidatedError,
    SkillLinkError,
    TransportError,
)
from skilllink.core.models import Envelope

LOGGER = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 15.0


class SessionHooks(Protocol):
    """What the pipeline needs from the session manager."""

    def access_token(self) -> Optional[str]: ...

    def refresh(self) -> str: ...

    def invalidate(self, reason: str) -> None: ...


@dataclass
class ApiCall:
    method: str
    endpoint: str
    payload: Any = None
    authenticated: bool = True
    params: Optional[dict] = None
    files: Optional[dict] = None
    data: Optional[dict] = None
    headers: dict = field(default_factory=dict)


Sender = Callable[[ApiCall], Any]


class RefreshOnUnauthorized:
    """Refresh the access token once on 401 and resend the original call."""

    def __init__(self, send: Sender, hooks: SessionHooks):
        self.send = send
        self.hooks = hooks

    def __call__(self, call: ApiCall, retries_left: int = 1):
        response = self.send(call)
        if response.status_code != 401 or retries_left < 1:
            return response

        LOGGER.info("auth refresh-on-401 method=%s endpoint=%s", call.method, call.endpoint)
        try:
            self.hooks.refresh()
        except SkillLinkError as exc:
            LOGGER.warning("auth refresh failed endpoint=%s error=%s", call.endpoint, exc)
            self.hooks.invalidate(f"refresh failed: {exc.message}")
            raise SessionInvalidatedError("Authentication failed") from exc
        _rewind_files(call)
        return self(call, retries_left - 1)


def _rewind_files(call: ApiCall) -> None:
    """Seek file handles in a multipart call back to the start before resending."""
    for value in (call.files or {}).values():
        handle = value[1] if isinstance(value, tuple) and len(value) > 1 else value
        seek = getattr(handle, "seek", None)
        if callable(seek):
            seek(0)


class ApiClient:
    def __init__(
        self,
        base_url: str,
        *,
        http: Any = None,
        timeout: float = DEFAULT_TIMEOUT,
        hooks: Optional[SessionHooks] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.http = http if http is not None else requests.Session()
        self.timeout = timeout
        self.hooks = hooks

    def attach_session(self, hooks: SessionHooks) -> None:
        self.hooks = hooks

    def url_for(self, endpoint: str) -> str:
        return f"{self.base_url}{endpoint}"

    def request(
        self,
        method: str,
        endpoint: str,
        payload: Any = None,
        *,
        authenticated: bool = True,
        retry_on_401: bool = True,
        params: Optional[dict] = None,
        files: Optional[dict] = None,
        data: Optional[dict] = None,
        envelope: bool = True,
    ) -> Any:
        """Send one call through the pipeline and return the envelope's data.

        With ``envelope=False`` the decoded JSON body is returned as is.
        """
        call = ApiCall(
            method=method.upper(),
            endpoint=endpoint,
            payload=payload,
            authenticated=authenticated,
            params=params,
            files=files,
            data=data,
        )
        if authenticated and retry_on_401 and self.hooks is not None:
            response = RefreshOnUnauthorized(self._send, self.hooks)(call)
        else:
            response = self._send(call)
        return self._unwrap(call, response, envelope)

    def _headers(self, call: ApiCall) -> dict:
        headers = {"Accept": "application/json", **call.headers}
        if call.authenticated and self.hooks is not None:
            token = self.hooks.access_token()
            if token:
                headers["Authorization"] = f"Bearer {token}"
        return headers

    def _send(self, call: ApiCall):
        kwargs: dict[str, Any] = {
            "headers": self._headers(call),
            "timeout": self.timeout,
        }
        if call.payload is not None:
            kwargs["json"] = call.payload
        if call.params:
            kwargs["params"] = call.params
        if call.files:
            kwargs["files"] = call.files
        if call.data:
            kwargs["data"] = call.data
        try:
            return self.http.request(call.method, self.url_for(call.endpoint), **kwargs)
        except requests.RequestException as exc:
            LOGGER.warning("api transport error method=%s endpoint=%s error=%s", call.method, call.endpoint, exc)
            raise TransportError(f"Network error: {exc}") from exc

    def _unwrap(self, call: ApiCall, response, envelope: bool) -> Any:
        status = response.status_code
        try:
            body = response.json()
        except ValueError:
            body = None

        if not 200 <= status < 300:
            message = _error_message(body) or f"Request failed ({status})"
            LOGGER.info("api error method=%s endpoint=%s status=%s message=%s", call.method, call.endpoint, status, message)
            if status == 401:
                raise AuthenticationError(message, status)
            raise ApiError(message, status)

        if not envelope:
            if isinstance(body, dict) and body.get("success") is False:
                raise ApiError(body.get("message") or "Request failed", status)
            return body

        if status == 204 or (body is None and not response.content):
            return None
        if not isinstance(body, dict):
            raise ResponseDecodeError("Malformed response body", status)
        try:
            wrapped = Envelope.model_validate(body)
        except ValidationError as exc:
            raise ResponseDecodeError("Malformed response envelope", status) from exc
        if not wrapped.success:
            raise ApiError(wrapped.message or "Request failed", status)
        return wrapped.data


def _error_message(body: Any) -> Optional[str]:
    if isinstance(body, dict):
        for key in ("message", "detail", "error"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return None
