from typing import Iterable, Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from skilllink.db.models import StorageEntry


def get_entry(session: Session, key: str) -> Optional[StorageEntry]:
    return session.get(StorageEntry, key)


def upsert_entry(session: Session, key: str, value: str) -> StorageEntry:
    """
    Insert or replace the value stored under `key`.
    Does not commit; callers group several writes into one transaction.
    """
    entry = get_entry(session, key)
    if entry is None:
        entry = StorageEntry(key=key, value=value)
        session.add(entry)
    else:
        entry.value = value
    return entry


def delete_entries(session: Session, keys: Iterable[str]) -> int:
    keys = [k for k in keys if k]
    if not keys:
        return 0
    result = session.execute(delete(StorageEntry).where(StorageEntry.key.in_(keys)))
    return result.rowcount or 0


def list_keys(session: Session, prefix: str = "") -> list[str]:
    stmt = select(StorageEntry.key).order_by(StorageEntry.key)
    if prefix:
        stmt = stmt.where(StorageEntry.key.startswith(prefix, autoescape=True))
    return list(session.execute(stmt).scalars())
