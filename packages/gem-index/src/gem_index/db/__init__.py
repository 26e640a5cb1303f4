# SPDX-License-Identifier: MIT
"""Database module backing the metadata key-value store."""

from typing import TYPE_CHECKING

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

if TYPE_CHECKING:
    from ..config import DatabaseConfig

__all__ = [
    "async_url",
    "init_db",
    "close_db",
]

# Database engine and session factory are initialized at startup
_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def async_url(url: str) -> str:
    """Convert a sync database URL to its async driver form."""
    if url.startswith("sqlite:///"):
        return url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


async def init_db(config: "DatabaseConfig") -> async_sessionmaker[AsyncSession]:
    """Initialize database connection and create tables.

    Args:
        config: Database configuration

    Returns:
        The session factory bound to the new engine
    """
    global _engine, _session_factory

    from sqlalchemy.ext.asyncio import create_async_engine

    url = async_url(config.url)

    # SQLite picks its own pool; sizing arguments are rejected there
    engine_kwargs = {}
    if "sqlite" not in url:
        engine_kwargs = {"pool_size": config.pool_size, "max_overflow": config.max_overflow}

    _engine = create_async_engine(url, echo=config.echo, **engine_kwargs)

    _session_factory = async_sessionmaker(
        _engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    # Create tables
    from .models import Base

    async with _engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    return _session_factory


async def close_db() -> None:
    """Close database connection."""
    global _engine, _session_factory

    if _engine:
        await _engine.dispose()
        _engine = None
        _session_factory = None

