"""Synchronous key-value storage backed by the `storage_entries` table.

This is the client's equivalent of browser local storage: string keys,
string values, no expiry. Multi-key writes happen in one transaction.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, Mapping

from sqlalchemy.orm import Session, sessionmaker

from skilllink.db.crud import delete_entries, get_entry, list_keys, upsert_entry

LOGGER = logging.getLogger(__name__)


class KeyValueStore:
    def __init__(self, factory: sessionmaker):
        self._factory = factory

    @contextmanager
    def _session(self) -> Iterator[Session]:
        session: Session = self._factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def get(self, key: str) -> str | None:
        with self._session() as session:
            entry = get_entry(session, key)
            return entry.value if entry is not None else None

    def set(self, key: str, value: str) -> None:
        self.set_many({key: value})

    def set_many(self, values: Mapping[str, str]) -> None:
        with self._session() as session:
            for key, value in values.items():
                upsert_entry(session, key, value)
        LOGGER.debug("storage write keys=%s", ",".join(values))

    def remove(self, *keys: str) -> None:
        with self._session() as session:
            removed = delete_entries(session, keys)
        LOGGER.debug("storage remove keys=%s removed=%s", ",".join(keys), removed)

    def keys(self, prefix: str = "") -> list[str]:
        with self._session() as session:
            return list_keys(session, prefix)
