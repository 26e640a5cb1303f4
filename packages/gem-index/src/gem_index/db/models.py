# SPDX-License-Identifier: MIT
"""SQLAlchemy database models for the metadata store."""

from datetime import UTC, datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


def _utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(UTC)


class KVEntry(Base):
    """A single key-value pair.

    The metadata store is a flat key space; structure lives in the keys
    (``record:<name>:<version>:<platform>``) so prefix scans can list one gem or all.
    """

    __tablename__ = "kv_entries"

    key: Mapped[str] = mapped_column(String(512), primary_key=True)
    value: Mapped[str] = mapped_column(Text)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now, onupdate=_utc_now)

    def __repr__(self) -> str:
        return f"<KVEntry(key={self.key!r})>"
