# SPDX-License-Identifier: MIT
"""Gem archive download endpoint."""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from ..checksum import compute_sha256
from ..config import APIConfig
from ..deps import get_blob_store, get_config, get_metadata_store
from ..registry import fetch_archive
from ..store.blobs import BlobStore
from ..store.records import MetadataStore

router = APIRouter()


@router.get("/gems/{filename}")
async def download_gem(
    filename: str,
    store: Annotated[MetadataStore, Depends(get_metadata_store)],
    blobs: Annotated[BlobStore, Depends(get_blob_store)],
    config: Annotated[APIConfig, Depends(get_config)],
) -> Response:
    """Download a gem archive.

    Returns the file with SHA256 checksum in X-Checksum-SHA256 header.
    The download count is incremented for each successful download.
    """
    data = await fetch_archive(store, blobs, filename, config.index.archive_extension)
    return Response(
        content=data,
        media_type="application/octet-stream",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "X-Checksum-SHA256": compute_sha256(data),
        },
    )
