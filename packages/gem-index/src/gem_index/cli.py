# SPDX-License-Identifier: MIT
"""CLI entry point for the gem-index command."""

from __future__ import annotations

import asyncio
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Optional

import click

from .app import configure_logging
from .config import APIConfig
from .db import close_db, init_db
from .index.marshal import EncodingFailure, loads_gzip
from .index.publisher import (
    LEGACY_KEYS,
    SPECS_KEY,
    IndexPublisher,
    PublishPartialFailure,
)
from .middleware.errors import StoreUnavailableError
from .store import MetadataStore, SqlKeyValueStore, create_blob_store
from .store.blobs import BlobStore


class Context:
    """CLI context object passed to commands."""

    def __init__(self) -> None:
        self.config: APIConfig = APIConfig()
        self.verbose: bool = False


pass_context = click.make_pass_decorator(Context, ensure=True)


def echo_error(message: str) -> None:
    """Print an error message to stderr."""
    click.secho(f"Error: {message}", fg="red", err=True)


def echo_success(message: str) -> None:
    """Print a success message."""
    click.secho(message, fg="green")


def echo_warning(message: str) -> None:
    """Print a warning message."""
    click.secho(f"Warning: {message}", fg="yellow", err=True)


@asynccontextmanager
async def open_stores(config: APIConfig) -> AsyncIterator[tuple[MetadataStore, BlobStore]]:
    """Open the configured metadata and blob stores for one command."""
    session_factory = await init_db(config.database)
    try:
        yield MetadataStore(SqlKeyValueStore(session_factory)), create_blob_store(config.storage)
    finally:
        await close_db()


@click.group()
@click.version_option(package_name="gem-index")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output.")
@click.option("--database-url", help="Metadata database URL (overrides GEMINDEX_DATABASE_URL).")
@click.option(
    "--storage-path",
    type=click.Path(file_okay=False),
    help="Blob storage directory (overrides GEMINDEX_STORAGE_LOCAL_PATH).",
)
@pass_context
def cli(
    ctx: Context,
    verbose: bool,
    database_url: Optional[str],
    storage_path: Optional[str],
) -> None:
    """Gem index maintenance tool.

    \b
    Examples:
        gem-index publish
        gem-index show-index --kind latest_specs
        gem-index names
    """
    config = APIConfig.from_env()
    if database_url:
        config.database.url = database_url
    if storage_path:
        config.storage.backend = "local"
        config.storage.local_path = storage_path

    ctx.config = config
    ctx.verbose = verbose
    configure_logging("DEBUG" if verbose else config.log_level)


@cli.command()
@pass_context
def publish(ctx: Context) -> None:
    """Regenerate every index artifact from the metadata store."""

    async def run() -> None:
        async with open_stores(ctx.config) as (store, blobs):
            result = await IndexPublisher(store, blobs).publish_all()
        echo_success(
            f"Published {len(result.keys)} index artifacts for {result.record_count} gems"
        )

    try:
        asyncio.run(run())
    except PublishPartialFailure as e:
        echo_error(str(e))
        for key, exc in sorted(e.failed.items()):
            click.echo(f"  {key}: {exc}", err=True)
        sys.exit(1)


@cli.command("show-index")
@click.option(
    "--kind",
    type=click.Choice(LEGACY_KEYS),
    default=SPECS_KEY,
    show_default=True,
    help="Which legacy index file to show.",
)
@pass_context
def show_index(ctx: Context, kind: str) -> None:
    """Print the entries of a published legacy index file."""

    async def run() -> bytes | None:
        async with open_stores(ctx.config) as (_, blobs):
            return await blobs.get(kind)

    data = asyncio.run(run())
    if data is None:
        echo_warning(f"{kind} has not been published yet")
        sys.exit(1)

    try:
        entries = loads_gzip(data)
    except EncodingFailure as e:
        echo_error(f"{kind} is not a valid index file: {e}")
        sys.exit(1)

    for name, version, platform in entries:
        click.echo(f"{name} {version} {platform}")
    if ctx.verbose:
        click.echo(f"{len(entries)} entries", err=True)


@cli.command()
@pass_context
def names(ctx: Context) -> None:
    """Print the distinct gem names, one per line."""

    async def run() -> list[str]:
        async with open_stores(ctx.config) as (store, _):
            return await store.list_names()

    for name in asyncio.run(run()):
        click.echo(name)


def main() -> None:
    """Main entry point for the CLI."""
    try:
        cli()
    except StoreUnavailableError as e:
        echo_error(e.message)
        sys.exit(1)
    except Exception as e:
        echo_error(f"Unexpected error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
