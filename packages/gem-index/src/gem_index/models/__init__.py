# SPDX-License-Identifier: MIT
"""Pydantic models for records and API responses."""

from .record import DEFAULT_PLATFORM, Dependency, PackageRecord, RecordSubmission
from .responses import PublishResponse, UploadResponse

__all__ = [
    "DEFAULT_PLATFORM",
    "Dependency",
    "PackageRecord",
    "PublishResponse",
    "RecordSubmission",
    "UploadResponse",
]
