# SPDX-License-Identifier: MIT
"""Upload and download flows around the index.

An upload is successful once its archive and metadata record are stored.
Republishing the index afterwards is best-effort: failures are logged and
reported back as warnings, never raised.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from .checksum import compute_sha256
from .index.publisher import IndexPublisher, PublishPartialFailure, PublishResult
from .middleware.errors import (
    InvalidRequestError,
    PackageNotFoundError,
    StoreUnavailableError,
)
from .models.record import DEFAULT_PLATFORM, PackageRecord, RecordSubmission
from .store.blobs import BlobStore
from .store.records import MetadataStore

logger = logging.getLogger(__name__)

# Versions start with a digit, which separates them from dashed gem names
_ARCHIVE_NAME = re.compile(r"^(?P<name>.+?)-(?P<version>\d[^-]*)(?:-(?P<platform>.+))?$")


@dataclass
class IngestResult:
    """Outcome of storing an uploaded gem."""

    record: PackageRecord
    publish: PublishResult | None = None
    warnings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ArchiveName:
    """Release identity parsed from an archive filename."""

    name: str
    version: str
    platform: str = DEFAULT_PLATFORM


def parse_archive_filename(filename: str, extension: str = "gem") -> ArchiveName:
    """Parse ``<name>-<version>[-<platform>].<ext>``.

    Raises:
        InvalidRequestError: If the filename does not have that shape
    """
    suffix = f".{extension}"
    if not filename.endswith(suffix) or "/" in filename:
        raise InvalidRequestError(f"Not a .{extension} archive: {filename}")

    match = _ARCHIVE_NAME.match(filename[: -len(suffix)])
    if match is None:
        raise InvalidRequestError(f"Cannot parse archive filename: {filename}")
    return ArchiveName(
        name=match.group("name"),
        version=match.group("version"),
        platform=match.group("platform") or DEFAULT_PLATFORM,
    )


async def republish(publisher: IndexPublisher) -> tuple[PublishResult | None, list[str]]:
    """Run a publish, converting failures into warning messages."""
    try:
        return await publisher.publish_all(), []
    except PublishPartialFailure as e:
        logger.warning("Index republish incomplete: %s", e)
        return None, [str(e)]
    except StoreUnavailableError as e:
        logger.warning("Index republish skipped: %s", e.message)
        return None, [e.message]


async def ingest_package(
    store: MetadataStore,
    blobs: BlobStore,
    submission: RecordSubmission,
    archive: bytes,
    extension: str = "gem",
    publish: bool = True,
) -> IngestResult:
    """Store an uploaded archive and its metadata, then refresh the index.

    Raises:
        StoreUnavailableError: If the archive or the record cannot be stored
    """
    record = PackageRecord(
        **submission.model_dump(),
        sha256=compute_sha256(archive),
        size=len(archive),
    )

    await blobs.put(record.archive_key(extension), archive)
    record = await store.upsert(record)
    logger.info("Stored %s (%s)", record.full_name, record.sha256)

    if not publish:
        return IngestResult(record=record)

    result, warnings = await republish(IndexPublisher(store, blobs))
    return IngestResult(record=record, publish=result, warnings=warnings)


async def fetch_archive(
    store: MetadataStore,
    blobs: BlobStore,
    filename: str,
    extension: str = "gem",
) -> bytes:
    """Return archive bytes for a download and count it.

    Raises:
        InvalidRequestError: If the filename is not an archive name
        PackageNotFoundError: If no such archive is stored
    """
    parsed = parse_archive_filename(filename, extension)
    data = await blobs.get(f"gems/{filename}")
    if data is None:
        raise PackageNotFoundError(filename[: -len(extension) - 1])

    await store.increment_download(parsed.name, parsed.version, parsed.platform)
    return data
