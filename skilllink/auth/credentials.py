"""Persisted session credentials: the token pair and the mirrored user record.

Only the session manager writes through this class. The three values are
saved and cleared in a single storage transaction so they are never partially
present.
"""
from __future__ import annotations

import json
import logging
from typing import Optional

from pydantic import ValidationError

from skilllink.core.models import User, parse_user
from skilllink.core.tokens import is_token_expired
from skilllink.db.store import KeyValueStore

LOGGER = logging.getLogger(__name__)

ACCESS_TOKEN_KEY = "access_token"
REFRESH_TOKEN_KEY = "refresh_token"
USER_KEY = "skilllink_user"


class CredentialStore:
    def __init__(self, store: KeyValueStore):
        self._store = store

    def access_token(self) -> Optional[str]:
        return self._store.get(ACCESS_TOKEN_KEY)

    def refresh_token(self) -> Optional[str]:
        return self._store.get(REFRESH_TOKEN_KEY)

    def has_valid_access_token(self) -> bool:
        token = self.access_token()
        return token is not None and not is_token_expired(token)

    def stored_user(self) -> Optional[User]:
        raw = self._store.get(USER_KEY)
        if not raw:
            return None
        try:
            return parse_user(json.loads(raw))
        except (ValueError, ValidationError) as exc:
            LOGGER.warning("credentials mirrored user unreadable error=%s", exc)
            return None

    def save_session(self, access: str, refresh: str, user: User) -> None:
        self._store.set_many({
            ACCESS_TOKEN_KEY: access,
            REFRESH_TOKEN_KEY: refresh,
            USER_KEY: json.dumps(user.to_wire()),
        })

    def replace_access_token(self, access: str) -> None:
        self._store.set(ACCESS_TOKEN_KEY, access)

    def store_user(self, user: User) -> None:
        self._store.set(USER_KEY, json.dumps(user.to_wire()))

    def clear(self) -> None:
        self._store.remove(ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY, USER_KEY)
