# SPDX-License-Identifier: MIT
"""Storage adapters: metadata key-value store and blob store."""

from .blobs import (
    BlobStore,
    InvalidBlobKeyError,
    LocalBlobStore,
    MemoryBlobStore,
    create_blob_store,
)
from .kv import KeyValueStore, SqlKeyValueStore
from .records import MetadataStore, record_key, sort_records

__all__ = [
    "BlobStore",
    "InvalidBlobKeyError",
    "KeyValueStore",
    "LocalBlobStore",
    "MemoryBlobStore",
    "MetadataStore",
    "SqlKeyValueStore",
    "create_blob_store",
    "record_key",
    "sort_records",
]
