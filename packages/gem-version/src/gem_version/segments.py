# SPDX-License-Identifier: MIT
"""Splitting gem version strings into comparable segments.

Gem versions are free-form: ``1.0.0``, ``2.1``, ``1.0.0.rc1`` and
``3.0.0.beta.2`` are all valid. No structure beyond the dot separator is
assumed.
"""

from __future__ import annotations


class InvalidVersionError(Exception):
    """Raised when a version string cannot be ordered."""

    def __init__(self, version: object, message: str = ""):
        self.version = version
        self.message = message or f"Invalid version: {version!r}"
        super().__init__(self.message)


def is_numeric_segment(segment: str) -> bool:
    """Return True if the segment consists only of ASCII digits."""
    return segment.isascii() and segment.isdigit()


def split_version(version: str) -> tuple[str, ...]:
    """Split a version string into its dot-separated segments.

    Args:
        version: Version string such as ``"1.10.0"`` or ``"2.0.0.rc1"``

    Returns:
        Tuple of segment strings, in order

    Raises:
        InvalidVersionError: If the version is not a string or is blank

    Examples:
        >>> split_version("1.10.0")
        ('1', '10', '0')
        >>> split_version("2.0.0.rc1")
        ('2', '0', '0', 'rc1')
    """
    if not isinstance(version, str):
        raise InvalidVersionError(
            version, f"Version must be a string, got {type(version).__name__}"
        )

    stripped = version.strip()
    if not stripped:
        raise InvalidVersionError(version, "Version string cannot be empty")

    return tuple(stripped.split("."))
