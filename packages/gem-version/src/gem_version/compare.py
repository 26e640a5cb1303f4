# SPDX-License-Identifier: MIT
"""Version comparison using mixed numeric/lexicographic segment rules.

Each pair of segments is compared numerically if both are digits, else as
plain strings. When every shared segment is equal the version with more
segments is the greater one, so ``1.0 < 1.0.0``.
"""

from __future__ import annotations

from collections.abc import Iterable
from functools import cmp_to_key
from typing import Callable, TypeVar

from .segments import is_numeric_segment, split_version

T = TypeVar("T")


def compare_segments(segment1: str, segment2: str) -> int:
    """Compare two single version segments.

    Returns:
        -1, 0 or 1
    """
    if is_numeric_segment(segment1) and is_numeric_segment(segment2):
        n1, n2 = int(segment1), int(segment2)
        if n1 != n2:
            return -1 if n1 < n2 else 1
        return 0

    if segment1 != segment2:
        return -1 if segment1 < segment2 else 1
    return 0


def compare_versions(version1: str, version2: str) -> int:
    """Compare two version strings.

    Args:
        version1: First version string
        version2: Second version string

    Returns:
        -1 if version1 < version2
        0 if version1 == version2
        1 if version1 > version2

    Raises:
        InvalidVersionError: If either version string is blank

    Examples:
        >>> compare_versions("1.2.0", "1.10.0")
        -1
        >>> compare_versions("2.0.0", "2.0.0")
        0
        >>> compare_versions("1.0.0.rc1", "1.0.0")
        1
    """
    parts1 = split_version(version1)
    parts2 = split_version(version2)

    for p1, p2 in zip(parts1, parts2):
        result = compare_segments(p1, p2)
        if result:
            return result

    if len(parts1) != len(parts2):
        return -1 if len(parts1) < len(parts2) else 1

    return 0


_cmp_key = cmp_to_key(compare_versions)


def version_key(version: str):
    """Return a sort key for a version string.

    Examples:
        >>> sorted(["1.2.0", "1.10.0", "1.3.0"], key=version_key)
        ['1.2.0', '1.3.0', '1.10.0']
    """
    return _cmp_key(version)


def sort_versions(
    items: Iterable[T],
    key: Callable[[T], str] | None = None,
    reverse: bool = False,
) -> list[T]:
    """Sort items by version, ascending unless ``reverse`` is set.

    The ascending order is a stable sort. The descending order is its exact
    reverse, so the first item of a descending sort is always the last item
    of the ascending one, including among equal versions.

    Args:
        items: Version strings, or objects carrying one
        key: Extracts the version string from each item (identity if None)
        reverse: Return newest first

    Returns:
        A new sorted list
    """
    if key is None:
        ordered = sorted(items, key=version_key)  # type: ignore[arg-type]
    else:
        ordered = sorted(items, key=lambda item: version_key(key(item)))
    if reverse:
        ordered.reverse()
    return ordered


def latest_version(versions: Iterable[str]) -> str | None:
    """Return the greatest version, or None for an empty iterable.

    Among versions that compare equal, the last one encountered wins.
    """
    ordered = sort_versions(versions)
    return ordered[-1] if ordered else None
