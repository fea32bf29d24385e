from __future__ import annotations

import threading
from typing import Iterable, Optional

from skilllink.core.models import User


class StaticDirectory:
    """User lookup over a fixed set of users plus any added at runtime."""

    def __init__(self, users: Iterable[User] = ()):
        self._lock = threading.Lock()
        self._users: dict[str, User] = {u.id: u for u in users}

    def get_user(self, user_id: str) -> Optional[User]:
        return self._users.get(user_id)

    def add(self, user: User) -> None:
        with self._lock:
            self._users[user.id] = user

    def __len__(self) -> int:
        return len(self._users)
