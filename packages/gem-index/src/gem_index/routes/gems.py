# SPDX-License-Identifier: MIT
"""Gem metadata and upload endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Form, Query, UploadFile
from pydantic import ValidationError

from ..checksum import compute_sha256
from ..config import APIConfig
from ..deps import get_blob_store, get_config, get_metadata_store
from ..middleware.errors import ErrorDetail, InvalidRequestError
from ..models.record import DEFAULT_PLATFORM, PackageRecord, RecordSubmission
from ..models.responses import UploadResponse
from ..registry import ingest_package
from ..store.blobs import BlobStore
from ..store.records import MetadataStore

router = APIRouter()


def parse_submission(raw: str) -> RecordSubmission:
    """Validate the ``metadata`` form field.

    Raises:
        InvalidRequestError: With one detail per validation problem
    """
    try:
        return RecordSubmission.model_validate_json(raw)
    except ValidationError as e:
        details = [
            ErrorDetail(
                field=".".join(str(part) for part in err["loc"]) or "metadata",
                error=err["msg"],
            )
            for err in e.errors()
        ]
        raise InvalidRequestError("Invalid gem metadata", details=details) from e


@router.get("/gems", response_model=list[PackageRecord])
async def list_gems(
    store: Annotated[MetadataStore, Depends(get_metadata_store)],
) -> list[PackageRecord]:
    """List every release, by name then newest version first."""
    return await store.list_all()


@router.get("/gems/{name}", response_model=PackageRecord)
async def get_gem(
    name: str,
    store: Annotated[MetadataStore, Depends(get_metadata_store)],
) -> PackageRecord:
    """Get the latest release of a gem."""
    return await store.get_latest(name)


@router.get("/gems/{name}/versions", response_model=list[PackageRecord])
async def list_gem_versions(
    name: str,
    store: Annotated[MetadataStore, Depends(get_metadata_store)],
) -> list[PackageRecord]:
    """List all releases of a gem, newest first.

    An unknown gem gives an empty list.
    """
    return await store.list_versions(name)


@router.get("/gems/{name}/{version}", response_model=PackageRecord)
async def get_gem_version(
    name: str,
    version: str,
    store: Annotated[MetadataStore, Depends(get_metadata_store)],
    platform: str = Query(DEFAULT_PLATFORM, description="Release platform"),
) -> PackageRecord:
    """Get one release of a gem."""
    return await store.get_exact(name, version, platform)


@router.post("/gems", response_model=UploadResponse)
async def upload_gem(
    file: UploadFile,
    metadata: Annotated[str, Form(description="Release metadata as JSON")],
    store: Annotated[MetadataStore, Depends(get_metadata_store)],
    blobs: Annotated[BlobStore, Depends(get_blob_store)],
    config: Annotated[APIConfig, Depends(get_config)],
    sha256_digest: Annotated[str | None, Query(alias="sha256")] = None,
) -> UploadResponse:
    """Upload a gem archive with its extracted metadata.

    The upload succeeds once the archive and record are stored. Index
    republish problems are reported in ``index_warnings``.
    """
    submission = parse_submission(metadata)

    content = await file.read()
    if not content:
        raise InvalidRequestError(
            "Empty archive",
            details=[ErrorDetail(field="file", error="Uploaded file has no content")],
        )

    # Verify checksum if provided
    if sha256_digest and sha256_digest.lower() != compute_sha256(content):
        raise InvalidRequestError(
            "Checksum mismatch",
            details=[
                ErrorDetail(
                    field="sha256",
                    error="Provided checksum does not match file content",
                )
            ],
        )

    result = await ingest_package(
        store,
        blobs,
        submission,
        content,
        extension=config.index.archive_extension,
        publish=config.index.publish_on_upload,
    )
    record = result.record

    return UploadResponse(
        name=record.name,
        version=record.version,
        platform=record.platform,
        sha256=record.sha256,
        message=f"Gem {record.name} ({record.version}) uploaded successfully",
        index_warnings=result.warnings,
    )
