# SPDX-License-Identifier: MIT
"""Legacy bulk index files (``specs.4.8.gz`` and friends).

Each file is a gzipped Marshal array of ``[name, version, platform]``
string triples. Three variants are produced:

- full: every known release
- latest: currently the same content as full; no per-name filtering is
  applied, so clients see every release in both files
- prerelease: always empty, since versions are never classified as
  prereleases here

Generation never fails: if encoding raises, the empty array is served
instead so clients always receive a parseable file.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from ..models.record import PackageRecord
from .marshal import EncodingFailure, dumps_gzip

logger = logging.getLogger(__name__)


def build_empty_specs() -> bytes:
    """Return the gzipped Marshal encoding of an empty array."""
    return dumps_gzip([])


def encode_specs(entries: Sequence[Sequence[object]]) -> bytes:
    """Marshal and gzip a list of spec tuples, falling back to the empty array."""
    try:
        return dumps_gzip([list(entry) for entry in entries])
    except EncodingFailure:
        logger.exception("Could not encode %d spec entries; serving empty index", len(entries))
        return build_empty_specs()


def spec_tuples(records: Iterable[PackageRecord]) -> list[list[str]]:
    """Return ``[name, version, platform]`` for each record, in order."""
    return [record.legacy_tuple() for record in records]


def build_specs(records: Iterable[PackageRecord]) -> bytes:
    """Full index of every release."""
    return encode_specs(spec_tuples(records))


def build_latest_specs(records: Iterable[PackageRecord]) -> bytes:
    """Latest index. Identical to the full index; see the module docstring."""
    return build_specs(records)


def build_prerelease_specs(records: Iterable[PackageRecord] = ()) -> bytes:
    """Prerelease index, always empty."""
    return build_empty_specs()
