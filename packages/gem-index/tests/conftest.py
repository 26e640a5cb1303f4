# SPDX-License-Identifier: MIT
"""Pytest fixtures for gem index tests."""

from collections.abc import AsyncGenerator, Callable

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from gem_index import APIConfig, create_app
from gem_index.db.models import Base
from gem_index.deps import get_blob_store, get_metadata_store
from gem_index.index.publisher import IndexPublisher
from gem_index.middleware.errors import StoreUnavailableError
from gem_index.models.record import Dependency, PackageRecord
from gem_index.store import MemoryBlobStore, MetadataStore, SqlKeyValueStore


class FailingBlobStore(MemoryBlobStore):
    """Memory blob store whose writes fail for selected keys."""

    def __init__(self, fail_keys: set[str] | None = None, fail_all: bool = False) -> None:
        super().__init__()
        self.fail_keys = set(fail_keys or ())
        self.fail_all = fail_all

    async def put(self, key: str, data: bytes) -> None:
        if self.fail_all or key in self.fail_keys:
            raise StoreUnavailableError("blob", f"refusing to write {key}")
        await super().put(key, data)

    async def put_if_absent(self, key: str, data: bytes) -> bool:
        if self.fail_all or key in self.fail_keys:
            raise StoreUnavailableError("blob", f"refusing to write {key}")
        return await super().put_if_absent(key, data)


@pytest.fixture
def test_config() -> APIConfig:
    """Create test configuration with in-memory stores."""
    config = APIConfig()
    config.database.url = "sqlite+aiosqlite:///:memory:"
    config.database.echo = False
    config.storage.backend = "memory"
    config.index.compact_max_age = 60
    return config


@pytest_asyncio.fixture
async def test_engine(test_config: APIConfig):
    """Create test database engine."""
    engine = create_async_engine(
        test_config.database.url,
        echo=test_config.database.echo,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test engine."""
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest_asyncio.fixture
async def kv_store(session_factory) -> SqlKeyValueStore:
    """Key-value store over the test database."""
    return SqlKeyValueStore(session_factory)


@pytest_asyncio.fixture
async def metadata_store(kv_store: SqlKeyValueStore) -> MetadataStore:
    """Metadata store over the test database."""
    return MetadataStore(kv_store)


@pytest.fixture
def blob_store() -> MemoryBlobStore:
    """Empty in-memory blob store."""
    return MemoryBlobStore()


@pytest.fixture
def failing_blobs() -> type[FailingBlobStore]:
    """Blob store class whose writes can be made to fail."""
    return FailingBlobStore


@pytest.fixture
def publisher(metadata_store: MetadataStore, blob_store: MemoryBlobStore) -> IndexPublisher:
    """Publisher over the test stores."""
    return IndexPublisher(metadata_store, blob_store)


@pytest.fixture
def make_record() -> Callable[..., PackageRecord]:
    """Factory for package records with sensible defaults."""

    def factory(
        name: str = "foo",
        version: str = "1.0.0",
        platform: str = "ruby",
        dependencies: list[tuple[str, str]] | None = None,
        **fields,
    ) -> PackageRecord:
        fields.setdefault("sha256", f"{name}-{version}-{platform}-sha")
        return PackageRecord(
            name=name,
            version=version,
            platform=platform,
            dependencies=[
                Dependency(name=dep, requirements=req) for dep, req in (dependencies or [])
            ],
            **fields,
        )

    return factory


@pytest_asyncio.fixture
async def app(test_config: APIConfig, metadata_store: MetadataStore, blob_store: MemoryBlobStore):
    """Create test FastAPI application."""
    app = create_app(test_config)

    # Override store dependencies
    app.dependency_overrides[get_metadata_store] = lambda: metadata_store
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    return app


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Create test HTTP client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
