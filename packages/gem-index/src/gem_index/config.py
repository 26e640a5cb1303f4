# SPDX-License-Identifier: MIT
"""API server configuration."""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class DatabaseConfig:
    """Metadata store connection configuration."""

    url: str = "sqlite:///./gem_index.db"
    echo: bool = False
    pool_size: int = 5
    max_overflow: int = 10


@dataclass
class StorageConfig:
    """Blob storage configuration for archives and index artifacts."""

    backend: str = "local"  # "local" or "memory"
    local_path: str = "./blobs"


@dataclass
class IndexConfig:
    """Index generation and serving configuration."""

    compact_max_age: int = 60
    archive_extension: str = "gem"
    publish_on_upload: bool = True


@dataclass
class APIConfig:
    """Main API server configuration."""

    # Server settings
    title: str = "Gem Index"
    description: str = "Private gem registry serving legacy and compact package indexes"
    version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # Sub-configurations
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    index: IndexConfig = field(default_factory=IndexConfig)

    # API settings
    api_prefix: str = "/api/v1"
    docs_url: Optional[str] = "/docs"
    openapi_url: Optional[str] = "/openapi.json"

    @classmethod
    def from_env(cls) -> "APIConfig":
        """Create configuration from environment variables."""
        import os

        config = cls()

        # Database
        if db_url := os.getenv("GEMINDEX_DATABASE_URL"):
            config.database.url = db_url
        config.database.echo = os.getenv("GEMINDEX_DATABASE_ECHO", "").lower() == "true"

        # Storage
        if storage_backend := os.getenv("GEMINDEX_STORAGE_BACKEND"):
            config.storage.backend = storage_backend
        if local_path := os.getenv("GEMINDEX_STORAGE_LOCAL_PATH"):
            config.storage.local_path = local_path

        # Index
        if max_age := os.getenv("GEMINDEX_COMPACT_MAX_AGE"):
            config.index.compact_max_age = int(max_age)
        config.index.publish_on_upload = (
            os.getenv("GEMINDEX_PUBLISH_ON_UPLOAD", "true").lower() == "true"
        )

        # Logging
        if log_level := os.getenv("GEMINDEX_LOG_LEVEL"):
            config.log_level = log_level.upper()

        # Debug
        config.debug = os.getenv("GEMINDEX_DEBUG", "").lower() == "true"

        return config
