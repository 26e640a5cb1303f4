# SPDX-License-Identifier: MIT
"""Private gem registry index: legacy Marshal specs, compact index and dependency API."""

__version__ = "0.1.0"

from .app import create_app
from .checksum import compute_sha256
from .config import APIConfig, DatabaseConfig, IndexConfig, StorageConfig
from .index.publisher import IndexPublisher, PublishPartialFailure, PublishResult
from .middleware.errors import (
    APIError,
    ErrorCode,
    InvalidRequestError,
    PackageNotFoundError,
    StoreUnavailableError,
    VersionNotFoundError,
)
from .models.record import Dependency, PackageRecord, RecordSubmission
from .registry import IngestResult, fetch_archive, ingest_package, parse_archive_filename
from .store.records import MetadataStore

__all__ = [
    # App factory
    "create_app",
    # Configuration
    "APIConfig",
    "DatabaseConfig",
    "IndexConfig",
    "StorageConfig",
    # Checksum utilities
    "compute_sha256",
    # Records and stores
    "Dependency",
    "MetadataStore",
    "PackageRecord",
    "RecordSubmission",
    # Publishing and ingest
    "IndexPublisher",
    "IngestResult",
    "PublishPartialFailure",
    "PublishResult",
    "fetch_archive",
    "ingest_package",
    "parse_archive_filename",
    # Errors
    "APIError",
    "ErrorCode",
    "InvalidRequestError",
    "PackageNotFoundError",
    "StoreUnavailableError",
    "VersionNotFoundError",
]
