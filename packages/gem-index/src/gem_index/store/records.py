# SPDX-License-Identifier: MIT
"""Metadata store adapter: package records over the key-value store.

Key layout::

    record:<name>:<version>:<platform>

Names, versions and platforms cannot contain ``:``, so ``record:<name>:``
lists exactly one gem and ``record:`` lists everything. Nothing is cached
between calls; every read goes to the backing store. A stored record that
fails validation makes the read fail rather than being left out.
"""

from __future__ import annotations

import logging
from itertools import groupby

from gem_version import sort_versions
from pydantic import ValidationError

from ..middleware.errors import (
    PackageNotFoundError,
    StoreUnavailableError,
    VersionNotFoundError,
)
from ..models.record import DEFAULT_PLATFORM, PackageRecord
from .kv import KeyValueStore

logger = logging.getLogger(__name__)

RECORD_PREFIX = "record:"


def record_key(name: str, version: str, platform: str = DEFAULT_PLATFORM) -> str:
    """Return the store key for a release."""
    return f"{RECORD_PREFIX}{name}:{version}:{platform}"


def sort_records(records: list[PackageRecord]) -> list[PackageRecord]:
    """Order records by name ascending, then version descending."""
    by_name = sorted(records, key=lambda r: r.name)
    ordered: list[PackageRecord] = []
    for _, group in groupby(by_name, key=lambda r: r.name):
        ordered.extend(sort_versions(group, key=lambda r: r.version, reverse=True))
    return ordered


class MetadataStore:
    """Read and write package records.

    Args:
        kv: Backing key-value store
    """

    def __init__(self, kv: KeyValueStore):
        self.kv = kv

    def _decode(self, key: str, raw: str) -> PackageRecord:
        try:
            return PackageRecord.model_validate_json(raw)
        except ValidationError as e:
            logger.error("Unreadable record %s: %d validation errors", key, e.error_count())
            raise StoreUnavailableError("metadata", f"unreadable record {key}") from e

    async def _scan(self, prefix: str) -> list[PackageRecord]:
        return [self._decode(key, raw) for key, raw in await self.kv.list_prefix(prefix)]

    async def list_all(self) -> list[PackageRecord]:
        """Return every record, sorted by name ascending then version descending.

        Raises:
            StoreUnavailableError: If the backing store cannot be read
                or holds a record that fails validation
        """
        return sort_records(await self._scan(RECORD_PREFIX))

    async def list_versions(self, name: str) -> list[PackageRecord]:
        """Return all records of one gem, newest first; empty if the name is unknown."""
        records = await self._scan(f"{RECORD_PREFIX}{name}:")
        records = [r for r in records if r.name == name]
        return sort_versions(records, key=lambda r: r.version, reverse=True)

    async def list_names(self) -> list[str]:
        """Return the distinct gem names in the store, sorted."""
        return sorted({record.name for record in await self._scan(RECORD_PREFIX)})

    async def get_latest(self, name: str) -> PackageRecord:
        """Return the greatest version of a gem.

        Raises:
            PackageNotFoundError: If the gem has no records
        """
        versions = await self.list_versions(name)
        if not versions:
            raise PackageNotFoundError(name)
        return versions[0]

    async def get_exact(
        self, name: str, version: str, platform: str = DEFAULT_PLATFORM
    ) -> PackageRecord:
        """Return one release.

        Raises:
            PackageNotFoundError: If the gem has no records at all
            VersionNotFoundError: If the gem exists but not this version/platform
        """
        key = record_key(name, version, platform)
        raw = await self.kv.get(key)
        if raw is not None:
            return self._decode(key, raw)

        if not await self.kv.list_prefix(f"{RECORD_PREFIX}{name}:"):
            raise PackageNotFoundError(name)
        raise VersionNotFoundError(name, version)

    async def upsert(self, record: PackageRecord) -> PackageRecord:
        """Store a record, replacing any release with the same name, version and platform.

        The original ``created_at`` and download count of a replaced release
        are kept. Returns the record as stored.
        """
        key = record_key(record.name, record.version, record.platform)
        raw = await self.kv.get(key)
        existing = self._decode(key, raw) if raw is not None else None
        if existing is not None:
            record = record.model_copy(
                update={"created_at": existing.created_at, "downloads": existing.downloads}
            )

        await self.kv.put(key, record.model_dump_json())
        return record

    async def increment_download(
        self, name: str, version: str, platform: str = DEFAULT_PLATFORM
    ) -> bool:
        """Bump the download counter of a release, best-effort.

        Failures are logged and swallowed: the counter is informational and
        must never fail a download. Concurrent bumps may lose increments.

        Returns:
            True if the counter was written
        """
        try:
            record = await self.get_exact(name, version, platform)
            record.downloads += 1
            await self.kv.put(record_key(name, version, platform), record.model_dump_json())
        except (PackageNotFoundError, VersionNotFoundError):
            logger.debug("No record to count download of %s %s %s", name, version, platform)
            return False
        except StoreUnavailableError as e:
            logger.warning("Could not count download of %s %s: %s", name, version, e)
            return False
        return True
