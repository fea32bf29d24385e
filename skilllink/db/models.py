from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import String, DateTime, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


# --- SQLAlchemy base ---------------------------------------------------------

class Base(DeclarativeBase):
    """Declarative base for all models."""
    pass


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# --- Models ------------------------------------------------------------------

class StorageEntry(Base):
    """One key of the client's local key-value storage.

    Values are opaque strings (tokens, or JSON documents such as the mirrored
    user record and the per-user message ledgers).
    """

    __tablename__ = "storage_entries"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False
    )

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<StorageEntry key={self.key!r} len={len(self.value or '')}>"


__all__ = [
    "Base",
    "StorageEntry",
]
