from __future__ import annotations

from typing import Optional


class SkillLinkError(Exception):
    """Base class for every error raised by the client core."""

    def __init__(self, message: str = "An unexpected error occurred"):
        super().__init__(message)
        self.message = message


class CredentialError(SkillLinkError):
    """Login or registration rejected (unknown email, wrong password/role)."""


class TransportError(SkillLinkError):
    """The request never produced an HTTP response (DNS, refused, timeout)."""


class ApiError(SkillLinkError):
    """Non-2xx status or a non-success envelope."""

    def __init__(self, message: str = "Request failed", status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"{self.message} (status={self.status_code})"


class ResponseDecodeError(ApiError):
    """Body was not JSON or not a valid envelope/record."""


class AuthenticationError(ApiError):
    """401 on an authenticated request."""

    def __init__(self, message: str = "Authentication failed", status_code: Optional[int] = 401):
        super().__init__(message, status_code)


class SessionInvalidatedError(AuthenticationError):
    """Access token unusable and refresh failed; full re-authentication required."""


__all__ = [
    "SkillLinkError",
    "CredentialError",
    "TransportError",
    "ApiError",
    "ResponseDecodeError",
    "AuthenticationError",
    "SessionInvalidatedError",
]
