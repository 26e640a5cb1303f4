# SPDX-License-Identifier: MIT
"""FastAPI dependencies resolving the stores placed on ``app.state``."""

from typing import Annotated

from fastapi import Depends, Request

from .config import APIConfig
from .index.publisher import IndexPublisher
from .middleware.errors import StoreUnavailableError
from .store.blobs import BlobStore
from .store.records import MetadataStore


def get_config(request: Request) -> APIConfig:
    """Return the configuration the app was created with."""
    return request.app.state.config


def get_metadata_store(request: Request) -> MetadataStore:
    """Return the metadata store opened at startup."""
    store = getattr(request.app.state, "metadata_store", None)
    if store is None:
        raise StoreUnavailableError("metadata", "not initialized")
    return store


def get_blob_store(request: Request) -> BlobStore:
    """Return the blob store opened at startup."""
    blobs = getattr(request.app.state, "blob_store", None)
    if blobs is None:
        raise StoreUnavailableError("blob", "not initialized")
    return blobs


def get_publisher(
    store: Annotated[MetadataStore, Depends(get_metadata_store)],
    blobs: Annotated[BlobStore, Depends(get_blob_store)],
) -> IndexPublisher:
    """Return a publisher over the request's stores."""
    return IndexPublisher(store, blobs)
