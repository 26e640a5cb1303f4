# SPDX-License-Identifier: MIT
"""Index endpoints read by gem clients.

Legacy files come from the published artifacts (generated empty on first
request). Compact index text is rendered from the live record set on every
request.
"""

import itertools
import time
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from ..config import APIConfig
from ..deps import get_config, get_metadata_store, get_publisher
from ..index import compact
from ..index.dependencies import build_dependencies, parse_requested_names
from ..index.publisher import (
    LATEST_SPECS_KEY,
    PRERELEASE_SPECS_KEY,
    SPECS_KEY,
    IndexPublisher,
)
from ..store.records import MetadataStore

router = APIRouter()
api_router = APIRouter()

_etag_counter = itertools.count()

BINARY_MEDIA_TYPE = "application/octet-stream"


def _text_response(body: str, config: APIConfig) -> Response:
    """Plain-text compact index response with a short cache lifetime."""
    return Response(
        content=body.encode("utf-8"),
        media_type="text/plain",
        headers={
            "Cache-Control": f"max-age={config.index.compact_max_age}",
            # Changes on every response; clients always revalidate
            "ETag": f'W/"{time.time_ns():x}-{next(_etag_counter):x}"',
        },
    )


async def _legacy_artifact(publisher: IndexPublisher, key: str) -> Response:
    data = await publisher.get_or_generate(key)
    return Response(content=data, media_type=BINARY_MEDIA_TYPE)


@router.get("/specs.4.8.gz")
async def get_specs(publisher: Annotated[IndexPublisher, Depends(get_publisher)]) -> Response:
    """Full legacy index."""
    return await _legacy_artifact(publisher, SPECS_KEY)


@router.get("/latest_specs.4.8.gz")
async def get_latest_specs(
    publisher: Annotated[IndexPublisher, Depends(get_publisher)],
) -> Response:
    """Latest-versions legacy index."""
    return await _legacy_artifact(publisher, LATEST_SPECS_KEY)


@router.get("/prerelease_specs.4.8.gz")
async def get_prerelease_specs(
    publisher: Annotated[IndexPublisher, Depends(get_publisher)],
) -> Response:
    """Prerelease legacy index."""
    return await _legacy_artifact(publisher, PRERELEASE_SPECS_KEY)


@router.get("/names")
async def get_names(
    store: Annotated[MetadataStore, Depends(get_metadata_store)],
    config: Annotated[APIConfig, Depends(get_config)],
) -> Response:
    """Compact index list of gem names."""
    return _text_response(compact.build_names(await store.list_all()), config)


@router.get("/versions")
async def get_versions(
    store: Annotated[MetadataStore, Depends(get_metadata_store)],
    config: Annotated[APIConfig, Depends(get_config)],
) -> Response:
    """Compact index list of versions per gem."""
    return _text_response(compact.build_versions(await store.list_all()), config)


@router.get("/info")
async def get_info_root(config: Annotated[APIConfig, Depends(get_config)]) -> Response:
    """Bare info endpoint; always empty."""
    return _text_response("", config)


@router.get("/info/{name}")
async def get_info(
    name: str,
    store: Annotated[MetadataStore, Depends(get_metadata_store)],
    config: Annotated[APIConfig, Depends(get_config)],
) -> Response:
    """Compact index info lines for one gem; empty for unknown names."""
    records = await store.list_versions(name)
    return _text_response(compact.build_info(records, name), config)


@api_router.get("/dependencies")
async def get_dependencies(
    store: Annotated[MetadataStore, Depends(get_metadata_store)],
    gems: Annotated[str | None, Query(description="Comma-separated gem names")] = None,
) -> Response:
    """Dependency API: Marshal array of release hashes for the named gems."""
    names = parse_requested_names(gems)
    records = await store.list_all() if names else []
    return Response(content=build_dependencies(records, names), media_type=BINARY_MEDIA_TYPE)
