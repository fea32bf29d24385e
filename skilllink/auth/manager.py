"""Session manager: identity transitions, persisted credentials, token refresh.

States::

    initializing --initialize()--> authenticated | unauthenticated
    unauthenticated/auth_error --login()/register()--> authenticated | auth_error
    any --logout()/invalidate()--> unauthenticated

Every state-changing operation takes a generation number when it starts.
Its results are applied only if no newer operation has started in the
meantime and the manager has not been closed; otherwise they are dropped.
"""
from __future__ import annotations

import enum
import logging
import threading
from typing import Callable, Optional

from skilllink.auth.credentials import CredentialStore
from skilllink.backends import Backend
from skilllink.core.errors import SessionInvalidatedError, SkillLinkError
from skilllink.core.models import AuthResult, LoginCredentials, RegisterData, User

LOGGER = logging.getLogger(__name__)


class SessionState(str, enum.Enum):
    INITIALIZING = "initializing"
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"
    AUTH_ERROR = "auth_error"


class SessionManager:
    def __init__(
        self,
        backend: Backend,
        credentials: CredentialStore,
        *,
        on_invalidated: Optional[Callable[[str], None]] = None,
    ):
        self.backend = backend
        self.credentials = credentials
        self.on_invalidated = on_invalidated
        self._state = SessionState.INITIALIZING
        self._user: Optional[User] = None
        self._last_error: Optional[str] = None
        self._generation = 0
        self._closed = False
        self._lock = threading.RLock()

    # --- read side ------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def current_user(self) -> Optional[User]:
        return self._user

    @property
    def last_error(self) -> Optional[str]:
        return self._last_error

    @property
    def closed(self) -> bool:
        return self._closed

    def is_authenticated(self) -> bool:
        return self._user is not None and self.credentials.has_valid_access_token()

    def access_token(self) -> Optional[str]:
        return self.credentials.access_token()

    # --- generation guard -----------------------------------------------------

    def _begin(self) -> int:
        with self._lock:
            self._generation += 1
            return self._generation

    def _is_current(self, generation: int) -> bool:
        return not self._closed and generation == self._generation

    def _discard(self, op: str, generation: int) -> None:
        LOGGER.info(
            "session stale-result op=%s generation=%s current=%s closed=%s",
            op, generation, self._generation, self._closed,
        )

    # --- transitions ----------------------------------------------------------

    def initialize(self) -> SessionState:
        """Restore a session from stored credentials (run once at start-up)."""
        generation = self._begin()
        user: Optional[User] = None
        fetched = failed = False
        if self.credentials.has_valid_access_token():
            try:
                user = self.backend.get_current_user()
                fetched = True
            except SessionInvalidatedError as exc:
                LOGGER.info("session init invalidated error=%s", exc)
            except SkillLinkError as exc:
                failed = True
                user = self.credentials.stored_user()
                LOGGER.warning("session init fetch failed error=%s stale_fallback=%s", exc, user is not None)

        with self._lock:
            if not self._is_current(generation):
                self._discard("initialize", generation)
                return self._state
            if fetched:
                self.credentials.store_user(user)
            elif failed and user is None:
                # tokens are never kept without their user record
                self.credentials.clear()
            self._user = user
            self._state = SessionState.AUTHENTICATED if user is not None else SessionState.UNAUTHENTICATED
        if user is not None:
            LOGGER.info("session restored user=%s role=%s fresh=%s", user.id, user.role, fetched)
        return self._state

    def login(self, credentials: LoginCredentials) -> bool:
        return self._authenticate("login", lambda: self.backend.login(credentials), "Login failed")

    def register(self, data: RegisterData) -> bool:
        return self._authenticate("register", lambda: self.backend.register(data), "Registration failed")

    def _authenticate(self, op: str, call: Callable[[], AuthResult], fallback: str) -> bool:
        generation = self._begin()
        try:
            result = call()
        except SkillLinkError as exc:
            with self._lock:
                if not self._is_current(generation):
                    self._discard(op, generation)
                    return False
                self._last_error = exc.message or fallback
                if self._state is not SessionState.AUTHENTICATED:
                    self._state = SessionState.AUTH_ERROR
            LOGGER.info("session %s failed error=%s", op, exc)
            return False

        with self._lock:
            if not self._is_current(generation):
                self._discard(op, generation)
                return False
            self.credentials.save_session(result.access, result.refresh, result.user)
            self._user = result.user
            self._last_error = None
            self._state = SessionState.AUTHENTICATED
        LOGGER.info("session %s ok user=%s role=%s", op, result.user.id, result.user.role)
        return True

    def logout(self) -> None:
        """Best-effort remote logout; local credentials are always cleared."""
        generation = self._begin()
        refresh_token = self.credentials.refresh_token()
        try:
            self.backend.logout(refresh_token)
        except SkillLinkError as exc:
            LOGGER.warning("session remote logout failed error=%s", exc)
        finally:
            with self._lock:
                self.credentials.clear()
                self._user = None
                self._last_error = None
                self._state = SessionState.UNAUTHENTICATED
            LOGGER.info("session logout generation=%s", generation)

    def refresh(self) -> str:
        """Exchange the refresh token for a new access token and store it."""
        with self._lock:
            generation = self._generation
        refresh_token = self.credentials.refresh_token()
        if not refresh_token:
            raise SessionInvalidatedError("No refresh token available")

        access = self.backend.refresh_tokens(refresh_token)

        with self._lock:
            if not self._is_current(generation):
                self._discard("refresh", generation)
                # a newer login/logout owns the credentials now
                current = self.credentials.access_token()
                if current:
                    return current
                raise SessionInvalidatedError("Session ended during refresh")
            self.credentials.replace_access_token(access)
        LOGGER.info("session access token refreshed")
        return access

    def invalidate(self, reason: str = "session invalidated") -> None:
        """Purge every credential and send the user back to the login entry point."""
        self._begin()
        with self._lock:
            self.credentials.clear()
            self._user = None
            self._state = SessionState.UNAUTHENTICATED
            self._last_error = reason
        LOGGER.warning("session invalidated reason=%s", reason)
        if self.on_invalidated is not None and not self._closed:
            self.on_invalidated(reason)

    def update_profile(self, changes: dict) -> User:
        if self._user is None:
            raise SessionInvalidatedError("Not logged in")
        if "role" in changes and changes["role"] != self._user.role:
            raise ValueError("role cannot be changed")
        changes = {k: v for k, v in changes.items() if k not in ("id", "role", "type")}

        generation = self._begin()
        user = self.backend.update_profile(changes)
        if user.role != self._user.role:
            raise SkillLinkError("Profile update returned a different role")
        with self._lock:
            if not self._is_current(generation):
                self._discard("update_profile", generation)
                return user
            self.credentials.store_user(user)
            self._user = user
        return user

    def close(self) -> None:
        with self._lock:
            self._closed = True
        LOGGER.debug("session manager closed")
