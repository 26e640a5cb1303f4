# SPDX-License-Identifier: MIT
"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .config import APIConfig

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    """Set the level of the ``gem_index`` logger hierarchy."""
    logging.getLogger("gem_index").setLevel(level.upper())


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    config: APIConfig = app.state.config

    # Initialize database connection
    from .db import close_db, init_db
    from .store import MetadataStore, SqlKeyValueStore, create_blob_store

    session_factory = await init_db(config.database)
    app.state.metadata_store = MetadataStore(SqlKeyValueStore(session_factory))
    app.state.blob_store = create_blob_store(config.storage)
    logger.info("Stores ready (blob backend: %s)", config.storage.backend)

    yield

    # Shutdown: cleanup resources
    await close_db()


def create_app(config: APIConfig | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: API configuration. If None, loads from environment.

    Returns:
        Configured FastAPI application instance.
    """
    if config is None:
        config = APIConfig.from_env()

    configure_logging(config.log_level)

    app = FastAPI(
        title=config.title,
        description=config.description,
        version=config.version,
        docs_url=config.docs_url,
        openapi_url=config.openapi_url,
        lifespan=lifespan,
    )

    # Store config in app state
    app.state.config = config

    # Add error handling middleware
    from .middleware.errors import add_error_handlers

    add_error_handlers(app, catch_all=not config.debug)

    # Register API routes
    from .routes import admin, download, gems, index

    app.include_router(index.router, tags=["index"])
    app.include_router(index.api_router, prefix=config.api_prefix, tags=["index"])
    app.include_router(gems.router, prefix=config.api_prefix, tags=["gems"])
    app.include_router(download.router, tags=["download"])
    app.include_router(admin.router, prefix="/admin", tags=["admin"])

    # Health check endpoint
    @app.get("/health")
    async def health_check() -> dict:
        """Health check endpoint."""
        return {"status": "healthy", "version": config.version}

    return app


# Default app instance for uvicorn
app = create_app()
