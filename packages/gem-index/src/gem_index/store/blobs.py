# SPDX-License-Identifier: MIT
"""Blob storage for package archives and derived index artifacts.

Blobs are opaque byte strings under flat, slash-separated keys such as
``specs``, ``info/rails`` or ``gems/rails-7.1.0.gem``. Reads support a
half-open byte range so large archives can be served in parts.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

import aiofiles
import aiofiles.os
import aiofiles.tempfile

from ..config import StorageConfig
from ..middleware.errors import StoreUnavailableError


class BlobStore(Protocol):
    """Async byte-blob contract.

    ``put_if_absent`` writes only when nothing is stored under the key and
    returns whether it wrote.
    """

    async def get(self, key: str, start: int = 0, end: int | None = None) -> bytes | None: ...

    async def put(self, key: str, data: bytes) -> None: ...

    async def put_if_absent(self, key: str, data: bytes) -> bool: ...


class InvalidBlobKeyError(ValueError):
    """Blob key is empty or would escape the storage root."""


def validate_blob_key(key: str) -> str:
    """Check that a key is a relative path made of plain components.

    Returns:
        The key unchanged

    Raises:
        InvalidBlobKeyError: For empty keys, absolute keys, or ``.``/``..`` components
    """
    if not key or key.startswith("/") or "\\" in key or "\x00" in key:
        raise InvalidBlobKeyError(f"Invalid blob key: {key!r}")
    for part in key.split("/"):
        if part in ("", ".", ".."):
            raise InvalidBlobKeyError(f"Invalid blob key: {key!r}")
    return key


def _slice(data: bytes, start: int, end: int | None) -> bytes:
    if start < 0 or (end is not None and end < start):
        raise ValueError(f"Invalid byte range: {start}-{end}")
    return data[start:end]


class MemoryBlobStore:
    """Blob store held in a dict, for tests and throwaway instances."""

    def __init__(self) -> None:
        self._blobs: dict[str, bytes] = {}

    async def get(self, key: str, start: int = 0, end: int | None = None) -> bytes | None:
        data = self._blobs.get(validate_blob_key(key))
        if data is None:
            return None
        return _slice(data, start, end)

    async def put(self, key: str, data: bytes) -> None:
        self._blobs[validate_blob_key(key)] = bytes(data)

    async def put_if_absent(self, key: str, data: bytes) -> bool:
        key = validate_blob_key(key)
        if key in self._blobs:
            return False
        self._blobs[key] = bytes(data)
        return True

    def keys(self) -> list[str]:
        """Return all stored keys, sorted."""
        return sorted(self._blobs)


class LocalBlobStore:
    """Blob store backed by files under a root directory.

    Writes land in a temporary file that is renamed (or, for a conditional
    write, hard-linked) onto the target, so a concurrent reader sees either
    the old blob or the new one in full.
    """

    def __init__(self, root: str | Path):
        self.root = Path(root)

    def _path(self, key: str) -> Path:
        return self.root.joinpath(*validate_blob_key(key).split("/"))

    async def _write_temp(self, path: Path, data: bytes) -> str:
        await aiofiles.os.makedirs(path.parent, exist_ok=True)
        async with aiofiles.tempfile.NamedTemporaryFile(
            mode="wb", dir=path.parent, prefix=f".{path.name}.", delete=False
        ) as f:
            tmp_name = f.name
            try:
                await f.write(data)
            except OSError:
                await _discard(tmp_name)
                raise
        return tmp_name

    async def get(self, key: str, start: int = 0, end: int | None = None) -> bytes | None:
        path = self._path(key)
        if start < 0 or (end is not None and end < start):
            raise ValueError(f"Invalid byte range: {start}-{end}")
        try:
            async with aiofiles.open(path, "rb") as f:
                await f.seek(start)
                if end is None:
                    return await f.read()
                return await f.read(end - start)
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StoreUnavailableError("blob", f"reading {key}: {e}") from e

    async def put(self, key: str, data: bytes) -> None:
        path = self._path(key)
        try:
            tmp_name = await self._write_temp(path, bytes(data))
            try:
                await aiofiles.os.replace(tmp_name, path)
            except OSError:
                await _discard(tmp_name)
                raise
        except OSError as e:
            raise StoreUnavailableError("blob", f"writing {key}: {e}") from e

    async def put_if_absent(self, key: str, data: bytes) -> bool:
        path = self._path(key)
        try:
            tmp_name = await self._write_temp(path, bytes(data))
            try:
                await aiofiles.os.link(tmp_name, path)
            except FileExistsError:
                return False
            finally:
                await _discard(tmp_name)
        except OSError as e:
            raise StoreUnavailableError("blob", f"writing {key}: {e}") from e
        return True


async def _discard(path: str) -> None:
    try:
        await aiofiles.os.remove(path)
    except FileNotFoundError:
        pass


def create_blob_store(config: StorageConfig) -> BlobStore:
    """Create the blob store selected by configuration."""
    if config.backend == "memory":
        return MemoryBlobStore()
    if config.backend == "local":
        return LocalBlobStore(config.local_path)
    raise ValueError(f"Unknown storage backend: {config.backend!r}")
