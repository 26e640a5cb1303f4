# SPDX-License-Identifier: MIT
"""Regenerate and persist every derived index artifact.

A publish reads the record set once, builds all artifacts from that one
snapshot and writes them to the blob store under fixed keys. Nothing is
patched incrementally. Writes are independent: there is no cross-key
atomicity and concurrent publishes race per key with the last writer
winning, which the next publish repairs.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from ..middleware.errors import InvalidRequestError
from ..models.record import PackageRecord
from ..store.blobs import BlobStore
from ..store.records import MetadataStore
from . import compact, legacy

logger = logging.getLogger(__name__)

SPECS_KEY = "specs"
LATEST_SPECS_KEY = "latest_specs"
PRERELEASE_SPECS_KEY = "prerelease_specs"
NAMES_KEY = "names"
VERSIONS_KEY = "versions"
INFO_PREFIX = "info/"

LEGACY_KEYS = (SPECS_KEY, LATEST_SPECS_KEY, PRERELEASE_SPECS_KEY)
COMPACT_KEYS = (NAMES_KEY, VERSIONS_KEY)


def info_key(name: str) -> str:
    """Blob key of the compact info artifact for one gem."""
    return f"{INFO_PREFIX}{name}"


class PublishPartialFailure(Exception):
    """One or more artifacts could not be written.

    Keys already written stay written.

    Attributes:
        failed: Artifact key to the exception its write raised
        written: Keys that were written successfully
    """

    def __init__(self, failed: dict[str, BaseException], written: Sequence[str] = ()):
        self.failed = dict(failed)
        self.written = list(written)
        keys = ", ".join(sorted(self.failed))
        super().__init__(f"Failed to write {len(self.failed)} index artifact(s): {keys}")


@dataclass
class PublishResult:
    """Outcome of a successful publish."""

    record_count: int
    keys: list[str] = field(default_factory=list)


def build_legacy_artifacts(records: Sequence[PackageRecord]) -> dict[str, bytes]:
    """The three legacy gzip artifacts."""
    return {
        SPECS_KEY: legacy.build_specs(records),
        LATEST_SPECS_KEY: legacy.build_latest_specs(records),
        PRERELEASE_SPECS_KEY: legacy.build_prerelease_specs(records),
    }


def build_compact_artifacts(records: Sequence[PackageRecord]) -> dict[str, bytes]:
    """Names, versions and one info artifact per gem."""
    artifacts = {
        NAMES_KEY: compact.build_names(records).encode("utf-8"),
        VERSIONS_KEY: compact.build_versions(records).encode("utf-8"),
    }
    for name, body in compact.build_all_info(records).items():
        artifacts[info_key(name)] = body.encode("utf-8")
    return artifacts


def compute_artifacts(records: Sequence[PackageRecord]) -> dict[str, bytes]:
    """Every artifact for a record snapshot, keyed by blob key."""
    artifacts = build_legacy_artifacts(records)
    artifacts.update(build_compact_artifacts(records))
    return artifacts


def empty_artifact(key: str) -> bytes:
    """Default content for an artifact that was never published.

    Raises:
        InvalidRequestError: If the key is not an index artifact key
    """
    if key in LEGACY_KEYS:
        return legacy.build_empty_specs()
    if key in COMPACT_KEYS or (key.startswith(INFO_PREFIX) and len(key) > len(INFO_PREFIX)):
        return b""
    raise InvalidRequestError(f"Unknown index artifact '{key}'")


class IndexPublisher:
    """Builds index artifacts from the metadata store into the blob store.

    Args:
        store: Source of package records
        blobs: Destination for artifacts
    """

    def __init__(self, store: MetadataStore, blobs: BlobStore):
        self.store = store
        self.blobs = blobs

    async def _write(self, key: str, data: bytes) -> None:
        try:
            await self.blobs.put(key, data)
        except Exception:
            logger.exception("Failed to write index artifact %s", key)
            raise

    async def publish_all(self) -> PublishResult:
        """Rebuild and write every artifact from one snapshot of the store.

        Raises:
            StoreUnavailableError: If the record snapshot cannot be read
            PublishPartialFailure: After all writes were attempted, if any failed
        """
        records = await self.store.list_all()

        legacy_artifacts, compact_artifacts = await asyncio.gather(
            asyncio.to_thread(build_legacy_artifacts, records),
            asyncio.to_thread(build_compact_artifacts, records),
        )
        artifacts = {**legacy_artifacts, **compact_artifacts}

        keys = list(artifacts)
        results = await asyncio.gather(
            *(self._write(key, artifacts[key]) for key in keys),
            return_exceptions=True,
        )

        failed: dict[str, BaseException] = {}
        written: list[str] = []
        for key, result in zip(keys, results):
            if isinstance(result, BaseException):
                failed[key] = result
            else:
                written.append(key)

        if failed:
            raise PublishPartialFailure(failed, written)

        logger.info("Published %d index artifacts for %d records", len(keys), len(records))
        return PublishResult(record_count=len(records), keys=keys)

    async def get_or_generate(self, key: str) -> bytes:
        """Return a stored artifact, creating and storing the empty default if absent.

        Raises:
            InvalidRequestError: If the key is not an index artifact key
            StoreUnavailableError: If the blob store cannot be read or written
        """
        default = empty_artifact(key)
        data = await self.blobs.get(key)
        if data is not None:
            return data

        # A publish may land between the read and this write; never overwrite it
        if await self.blobs.put_if_absent(key, default):
            logger.info("Index artifact %s missing; stored empty default", key)
            return default
        data = await self.blobs.get(key)
        return default if data is None else data
