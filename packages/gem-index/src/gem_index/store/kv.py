# SPDX-License-Identifier: MIT
"""Durable key-value store used for package metadata.

The store is deliberately small: point reads, point writes and ordered
prefix scans. Backend failures surface as StoreUnavailableError so callers
never mistake an outage for an empty result.
"""

from __future__ import annotations

from typing import Protocol

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..db.models import KVEntry
from ..middleware.errors import StoreUnavailableError


class KeyValueStore(Protocol):
    """Async key-value contract consumed by the metadata store."""

    async def get(self, key: str) -> str | None: ...

    async def put(self, key: str, value: str) -> None: ...

    async def list_prefix(self, prefix: str) -> list[tuple[str, str]]: ...


class SqlKeyValueStore:
    """Key-value store over the ``kv_entries`` table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get(self, key: str) -> str | None:
        try:
            async with self._session_factory() as session:
                entry = await session.get(KVEntry, key)
                return entry.value if entry is not None else None
        except SQLAlchemyError as e:
            raise StoreUnavailableError("metadata", str(e)) from e

    async def put(self, key: str, value: str) -> None:
        """Insert or overwrite a key. Concurrent writers race; the last commit wins."""
        try:
            async with self._session_factory() as session:
                entry = await session.get(KVEntry, key)
                if entry is not None:
                    entry.value = value
                    await session.commit()
                    return

                session.add(KVEntry(key=key, value=value))
                try:
                    await session.commit()
                except IntegrityError:
                    # Another writer inserted the key first
                    await session.rollback()
                    await session.execute(
                        update(KVEntry).where(KVEntry.key == key).values(value=value)
                    )
                    await session.commit()
        except SQLAlchemyError as e:
            raise StoreUnavailableError("metadata", str(e)) from e

    async def list_prefix(self, prefix: str) -> list[tuple[str, str]]:
        """Return all ``(key, value)`` pairs whose key starts with prefix, ordered by key."""
        query = (
            select(KVEntry.key, KVEntry.value)
            .where(KVEntry.key.startswith(prefix, autoescape=True))
            .order_by(KVEntry.key)
        )
        try:
            async with self._session_factory() as session:
                result = await session.execute(query)
                rows = [(row.key, row.value) for row in result]
        except SQLAlchemyError as e:
            raise StoreUnavailableError("metadata", str(e)) from e

        # LIKE is case-insensitive on SQLite; keys are not
        return [(key, value) for key, value in rows if key.startswith(prefix)]
