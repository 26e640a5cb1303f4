# SPDX-License-Identifier: MIT
"""Version ordering for gem package releases.

Gem version strings are compared segment by segment: dot-separated
segments are compared numerically when both sides are digits, otherwise
lexicographically. This ordering decides which release is "latest" and how
versions are listed everywhere in the index.

Example:
    >>> from gem_version import compare_versions, version_key, latest_version
    >>>
    >>> compare_versions("1.2.0", "1.10.0")
    -1
    >>>
    >>> sorted(["1.2.0", "1.10.0", "1.3.0"], key=version_key)
    ['1.2.0', '1.3.0', '1.10.0']
    >>>
    >>> latest_version(["0.9", "1.0.0", "1.0.0.rc1"])
    '1.0.0.rc1'
"""

__version__ = "0.1.0"

from .segments import (
    InvalidVersionError,
    is_numeric_segment,
    split_version,
)
from .compare import (
    compare_segments,
    compare_versions,
    latest_version,
    sort_versions,
    version_key,
)

__all__ = [
    # Segment parsing
    "InvalidVersionError",
    "is_numeric_segment",
    "split_version",
    # Version comparison
    "compare_segments",
    "compare_versions",
    "latest_version",
    "sort_versions",
    "version_key",
]
