# SPDX-License-Identifier: MIT
"""Index generation: legacy Marshal files, compact index text, dependency API."""

from .compact import build_info, build_names, build_versions
from .dependencies import build_dependencies, parse_requested_names
from .legacy import (
    build_empty_specs,
    build_latest_specs,
    build_prerelease_specs,
    build_specs,
)
from .marshal import EncodingFailure, Symbol, UserMarshal, dumps, dumps_gzip, loads, loads_gzip
from .publisher import (
    LATEST_SPECS_KEY,
    NAMES_KEY,
    PRERELEASE_SPECS_KEY,
    SPECS_KEY,
    VERSIONS_KEY,
    IndexPublisher,
    PublishPartialFailure,
    PublishResult,
    compute_artifacts,
    empty_artifact,
    info_key,
)

__all__ = [
    # Compact index
    "build_info",
    "build_names",
    "build_versions",
    # Dependency API
    "build_dependencies",
    "parse_requested_names",
    # Legacy index
    "build_empty_specs",
    "build_latest_specs",
    "build_prerelease_specs",
    "build_specs",
    # Marshal codec
    "EncodingFailure",
    "Symbol",
    "UserMarshal",
    "dumps",
    "dumps_gzip",
    "loads",
    "loads_gzip",
    # Publishing
    "LATEST_SPECS_KEY",
    "NAMES_KEY",
    "PRERELEASE_SPECS_KEY",
    "SPECS_KEY",
    "VERSIONS_KEY",
    "IndexPublisher",
    "PublishPartialFailure",
    "PublishResult",
    "compute_artifacts",
    "empty_artifact",
    "info_key",
]
