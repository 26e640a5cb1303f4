# SPDX-License-Identifier: MIT
"""Compact index text formats.

Three plain-text artifacts, ``\\n``-terminated lines, UTF-8:

``names``
    Every distinct gem name, sorted, one per line.
``versions``
    ``<name> <v1>,<v2>,...`` per gem, versions ascending and unique.
``info/<name>``
    ``<version>,<sha256>,<platform>[,<dep>:<requirement>...]`` per release
    of one gem, ascending by version.

An empty record set (or an unknown name for ``info``) gives an empty body.
"""

from __future__ import annotations

from collections.abc import Iterable

from gem_version import sort_versions

from ..models.record import PackageRecord


def _lines(lines: list[str]) -> str:
    return "".join(f"{line}\n" for line in lines)


def build_names(records: Iterable[PackageRecord]) -> str:
    """Sorted, de-duplicated gem names."""
    return _lines(sorted({record.name for record in records}))


def build_versions(records: Iterable[PackageRecord]) -> str:
    """One line per gem listing each of its versions once, ascending."""
    versions_by_name: dict[str, list[str]] = {}
    for record in records:
        versions = versions_by_name.setdefault(record.name, [])
        if record.version not in versions:
            versions.append(record.version)

    lines = []
    for name in sorted(versions_by_name):
        ordered = sort_versions(versions_by_name[name])
        lines.append(f"{name} {','.join(ordered)}")
    return _lines(lines)


def info_line(record: PackageRecord) -> str:
    """Render one release as an info line (without the newline)."""
    fields = [record.version, record.sha256, record.platform]
    fields.extend(f"{dep.name}:{dep.requirements}" for dep in record.dependencies)
    return ",".join(fields)


def build_info(records: Iterable[PackageRecord], name: str) -> str:
    """Info lines for every release of one gem, ascending by version."""
    releases = [record for record in records if record.name == name]
    return _lines([info_line(record) for record in sort_versions(releases, key=lambda r: r.version)])


def build_all_info(records: Iterable[PackageRecord]) -> dict[str, str]:
    """Info bodies for every gem, keyed by name."""
    by_name: dict[str, list[PackageRecord]] = {}
    for record in records:
        by_name.setdefault(record.name, []).append(record)
    return {name: build_info(releases, name) for name, releases in by_name.items()}
