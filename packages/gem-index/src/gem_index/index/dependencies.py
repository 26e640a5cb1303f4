# SPDX-License-Identifier: MIT
"""Dependency API responses for resolving clients.

The response is a Marshal array of hashes, one per release of each
requested gem::

    [{:name => "foo", :number => "1.0.0", :platform => "ruby",
      :dependencies => [["bar", ">= 0"]]}, ...]

``:number`` carries the version string; that is the key name Bundler reads.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from ..models.record import PackageRecord
from .marshal import EncodingFailure, Symbol, dumps

logger = logging.getLogger(__name__)

EMPTY_RESPONSE = dumps([])


def parse_requested_names(raw: str | None) -> list[str]:
    """Split a comma-separated ``gems`` parameter, dropping blanks."""
    if not raw:
        return []
    return [name.strip() for name in raw.split(",") if name.strip()]


def dependency_entry(record: PackageRecord) -> dict[Symbol, object]:
    """Marshal-ready hash describing one release."""
    return {
        Symbol("name"): record.name,
        Symbol("number"): record.version,
        Symbol("platform"): record.platform,
        Symbol("dependencies"): [[dep.name, dep.requirements] for dep in record.dependencies],
    }


def build_dependencies(records: Iterable[PackageRecord], requested_names: Iterable[str]) -> bytes:
    """Encode the dependency entries of every record whose name was requested.

    Names match exactly and case-sensitively. No names or no matches give
    the empty array; so does an encoding failure.
    """
    wanted = set(requested_names)
    if not wanted:
        return EMPTY_RESPONSE

    entries = [dependency_entry(record) for record in records if record.name in wanted]
    try:
        return dumps(entries)
    except EncodingFailure:
        logger.exception("Could not encode dependency response for %s", sorted(wanted))
        return EMPTY_RESPONSE
