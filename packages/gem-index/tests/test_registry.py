# SPDX-License-Identifier: MIT
"""Tests for the upload and download flows."""

import pytest

from gem_index.checksum import compute_sha256
from gem_index.index.marshal import loads_gzip
from gem_index.middleware.errors import (
    InvalidRequestError,
    PackageNotFoundError,
    StoreUnavailableError,
)
from gem_index.models.record import Dependency, RecordSubmission
from gem_index.registry import (
    ArchiveName,
    fetch_archive,
    ingest_package,
    parse_archive_filename,
)
from gem_index.store import MemoryBlobStore, MetadataStore


class TestParseArchiveFilename:
    """Tests for parse_archive_filename function."""

    @pytest.mark.parametrize(
        "filename,expected",
        [
            ("foo-1.0.0.gem", ArchiveName("foo", "1.0.0")),
            ("net-http-0.4.1.gem", ArchiveName("net-http", "0.4.1")),
            ("nokogiri-1.16.0-x86_64-linux.gem", ArchiveName("nokogiri", "1.16.0", "x86_64-linux")),
            ("jruby-launcher-1.1.2-java.gem", ArchiveName("jruby-launcher", "1.1.2", "java")),
            ("rails-7.1.0.rc1.gem", ArchiveName("rails", "7.1.0.rc1")),
            ("foo-1.0-beta.gem", ArchiveName("foo", "1.0", "beta")),
        ],
    )
    def test_valid(self, filename: str, expected: ArchiveName):
        assert parse_archive_filename(filename) == expected

    @pytest.mark.parametrize("filename", ["foo.gem", "foo-1.0.tar", "foo-bar.gem", "../x-1.0.gem"])
    def test_invalid(self, filename: str):
        with pytest.raises(InvalidRequestError):
            parse_archive_filename(filename)


def _submission(name: str = "foo", version: str = "1.0.0", **fields) -> RecordSubmission:
    return RecordSubmission(name=name, version=version, **fields)


@pytest.mark.asyncio
class TestIngestPackage:
    """Tests for ingest_package function."""

    async def test_stores_archive_record_and_index(
        self, metadata_store: MetadataStore, blob_store: MemoryBlobStore
    ):
        submission = _submission(dependencies=[Dependency(name="bar")])
        result = await ingest_package(metadata_store, blob_store, submission, b"archive")

        assert result.warnings == []
        assert result.record.sha256 == compute_sha256(b"archive")
        assert result.record.size == len(b"archive")
        assert await blob_store.get("gems/foo-1.0.0.gem") == b"archive"
        assert (await metadata_store.get_exact("foo", "1.0.0")).sha256 == result.record.sha256
        assert loads_gzip(await blob_store.get("specs")) == [["foo", "1.0.0", "ruby"]]
        expected_info = f"1.0.0,{result.record.sha256},ruby,bar:>= 0\n".encode()
        assert await blob_store.get("info/foo") == expected_info

    async def test_publish_can_be_skipped(
        self, metadata_store: MetadataStore, blob_store: MemoryBlobStore
    ):
        result = await ingest_package(
            metadata_store, blob_store, _submission(), b"archive", publish=False
        )

        assert result.publish is None
        assert await blob_store.get("specs") is None

    async def test_publish_failure_does_not_fail_upload(
        self, metadata_store: MetadataStore, failing_blobs, caplog
    ):
        blobs = failing_blobs(fail_keys={"specs", "names"})

        result = await ingest_package(metadata_store, blobs, _submission(), b"archive")

        assert result.publish is None
        assert len(result.warnings) == 1
        assert "names" in result.warnings[0] and "specs" in result.warnings[0]
        assert (await metadata_store.get_exact("foo", "1.0.0")).size == 7
        assert "republish incomplete" in caplog.text

    async def test_archive_write_failure_aborts(
        self, metadata_store: MetadataStore, failing_blobs
    ):
        blobs = failing_blobs(fail_all=True)

        with pytest.raises(StoreUnavailableError):
            await ingest_package(metadata_store, blobs, _submission(), b"archive")
        assert await metadata_store.list_all() == []

    async def test_reupload_replaces_release(
        self, metadata_store: MetadataStore, blob_store: MemoryBlobStore
    ):
        await ingest_package(metadata_store, blob_store, _submission(), b"first")
        await ingest_package(metadata_store, blob_store, _submission(), b"second")

        records = await metadata_store.list_all()
        assert len(records) == 1
        assert records[0].sha256 == compute_sha256(b"second")


@pytest.mark.asyncio
class TestFetchArchive:
    """Tests for fetch_archive function."""

    async def test_returns_bytes_and_counts(
        self, metadata_store: MetadataStore, blob_store: MemoryBlobStore
    ):
        await ingest_package(metadata_store, blob_store, _submission(), b"archive")

        data = await fetch_archive(metadata_store, blob_store, "foo-1.0.0.gem")

        assert data == b"archive"
        assert (await metadata_store.get_exact("foo", "1.0.0")).downloads == 1

    async def test_platform_archive(self, metadata_store: MetadataStore, blob_store: MemoryBlobStore):
        submission = _submission(platform="java")
        await ingest_package(metadata_store, blob_store, submission, b"jar")

        assert await fetch_archive(metadata_store, blob_store, "foo-1.0.0-java.gem") == b"jar"
        assert (await metadata_store.get_exact("foo", "1.0.0", "java")).downloads == 1

    async def test_missing_archive(self, metadata_store: MetadataStore, blob_store: MemoryBlobStore):
        with pytest.raises(PackageNotFoundError):
            await fetch_archive(metadata_store, blob_store, "foo-1.0.0.gem")

    async def test_archive_without_record_still_served(
        self, metadata_store: MetadataStore, blob_store: MemoryBlobStore
    ):
        await blob_store.put("gems/orphan-1.0.gem", b"data")
        assert await fetch_archive(metadata_store, blob_store, "orphan-1.0.gem") == b"data"

    async def test_counts_the_platform_named_in_filename(
        self, metadata_store: MetadataStore, blob_store: MemoryBlobStore
    ):
        await ingest_package(metadata_store, blob_store, _submission(version="1.0"), b"ruby")
        await ingest_package(
            metadata_store, blob_store, _submission(version="1.0", platform="java"), b"jar"
        )

        assert await fetch_archive(metadata_store, blob_store, "foo-1.0-java.gem") == b"jar"
        assert await fetch_archive(metadata_store, blob_store, "foo-1.0.gem") == b"ruby"
        assert (await metadata_store.get_exact("foo", "1.0")).downloads == 1
        assert (await metadata_store.get_exact("foo", "1.0", "java")).downloads == 1
