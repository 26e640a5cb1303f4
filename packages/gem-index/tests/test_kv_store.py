# SPDX-License-Identifier: MIT
"""Tests for the SQL key-value store."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from gem_index.middleware.errors import StoreUnavailableError
from gem_index.store import SqlKeyValueStore


@pytest.mark.asyncio
class TestSqlKeyValueStore:
    """Tests for point reads, writes and prefix scans."""

    async def test_get_missing_returns_none(self, kv_store: SqlKeyValueStore):
        assert await kv_store.get("nope") is None

    async def test_put_then_get(self, kv_store: SqlKeyValueStore):
        await kv_store.put("a", "1")
        assert await kv_store.get("a") == "1"

    async def test_put_overwrites(self, kv_store: SqlKeyValueStore):
        await kv_store.put("a", "1")
        await kv_store.put("a", "2")
        assert await kv_store.get("a") == "2"
        assert await kv_store.list_prefix("a") == [("a", "2")]

    async def test_list_prefix_ordered_by_key(self, kv_store: SqlKeyValueStore):
        for key in ["record:b:1", "record:a:2", "record:a:1", "other"]:
            await kv_store.put(key, key.upper())

        keys = [key for key, _ in await kv_store.list_prefix("record:")]
        assert keys == ["record:a:1", "record:a:2", "record:b:1"]

    async def test_list_prefix_treats_wildcards_literally(self, kv_store: SqlKeyValueStore):
        await kv_store.put("record:a_b:1", "x")
        await kv_store.put("record:aXb:1", "y")
        await kv_store.put("record:a%:1", "z")

        assert [k for k, _ in await kv_store.list_prefix("record:a_b:")] == ["record:a_b:1"]
        assert [k for k, _ in await kv_store.list_prefix("record:a%")] == ["record:a%:1"]

    async def test_list_prefix_is_case_sensitive(self, kv_store: SqlKeyValueStore):
        await kv_store.put("record:Rails:1", "x")
        await kv_store.put("record:rails:1", "y")

        assert await kv_store.list_prefix("record:rails:") == [("record:rails:1", "y")]


@pytest.mark.asyncio
async def test_backend_failure_maps_to_store_unavailable():
    """A missing table surfaces as StoreUnavailableError, not an empty result."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    store = SqlKeyValueStore(async_sessionmaker(engine, class_=AsyncSession))
    try:
        with pytest.raises(StoreUnavailableError) as exc_info:
            await store.list_prefix("record:")
        assert exc_info.value.store == "metadata"
        assert exc_info.value.status_code == 503

        with pytest.raises(StoreUnavailableError):
            await store.get("record:foo:1.0")
    finally:
        await engine.dispose()
