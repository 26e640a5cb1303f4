# SPDX-License-Identifier: MIT
"""Tests for the gem-index command line tool."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest
from click.testing import CliRunner

from gem_index.cli import cli, open_stores
from gem_index.config import APIConfig
from gem_index.models.record import PackageRecord


@pytest.fixture
def cli_runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def store_args(tmp_path: Path) -> list[str]:
    """Global options pointing the CLI at throwaway stores."""
    return [
        "--database-url",
        f"sqlite:///{tmp_path / 'index.db'}",
        "--storage-path",
        str(tmp_path / "blobs"),
    ]


def seed(tmp_path: Path, *records: PackageRecord) -> None:
    """Write records into the stores the CLI will open."""
    config = APIConfig()
    config.database.url = f"sqlite:///{tmp_path / 'index.db'}"
    config.storage.local_path = str(tmp_path / "blobs")

    async def run() -> None:
        async with open_stores(config) as (store, _):
            for record in records:
                await store.upsert(record)

    asyncio.run(run())


class TestPublishCommand:
    """Tests for gem-index publish."""

    def test_publish_writes_artifacts(
        self, cli_runner: CliRunner, store_args: list[str], tmp_path: Path
    ) -> None:
        seed(tmp_path, PackageRecord(name="foo", version="1.0.0", sha256="abc"))

        result = cli_runner.invoke(cli, [*store_args, "publish"])

        assert result.exit_code == 0, result.output
        assert "for 1 gems" in result.output
        assert (tmp_path / "blobs" / "specs").exists()
        assert (tmp_path / "blobs" / "info" / "foo").read_text() == "1.0.0,abc,ruby\n"

    def test_publish_empty_store(self, cli_runner: CliRunner, store_args: list[str]) -> None:
        result = cli_runner.invoke(cli, [*store_args, "publish"])

        assert result.exit_code == 0, result.output
        assert "for 0 gems" in result.output


class TestShowIndexCommand:
    """Tests for gem-index show-index."""

    def test_show_published_index(
        self, cli_runner: CliRunner, store_args: list[str], tmp_path: Path
    ) -> None:
        seed(
            tmp_path,
            PackageRecord(name="foo", version="1.0.0"),
            PackageRecord(name="bar", version="2.0", platform="java"),
        )
        assert cli_runner.invoke(cli, [*store_args, "publish"]).exit_code == 0

        result = cli_runner.invoke(cli, [*store_args, "show-index"])

        assert result.exit_code == 0, result.output
        assert "bar 2.0 java" in result.output
        assert "foo 1.0.0 ruby" in result.output

    def test_show_unpublished_index(self, cli_runner: CliRunner, store_args: list[str]) -> None:
        result = cli_runner.invoke(cli, [*store_args, "show-index", "--kind", "latest_specs"])

        assert result.exit_code == 1
        assert "not been published" in result.output

    def test_show_index_rejects_unknown_kind(
        self, cli_runner: CliRunner, store_args: list[str]
    ) -> None:
        result = cli_runner.invoke(cli, [*store_args, "show-index", "--kind", "names"])
        assert result.exit_code == 2


class TestNamesCommand:
    """Tests for gem-index names."""

    def test_names(self, cli_runner: CliRunner, store_args: list[str], tmp_path: Path) -> None:
        seed(
            tmp_path,
            PackageRecord(name="foo", version="1.0"),
            PackageRecord(name="bar", version="1.0"),
            PackageRecord(name="foo", version="2.0"),
        )

        result = cli_runner.invoke(cli, [*store_args, "names"])

        assert result.exit_code == 0, result.output
        assert result.output.splitlines() == ["bar", "foo"]
