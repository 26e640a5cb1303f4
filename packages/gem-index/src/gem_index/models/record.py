# SPDX-License-Identifier: MIT
"""Pydantic models for gem release metadata."""

import re
from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_PLATFORM = "ruby"

NAME_PATTERN = re.compile(r"^[A-Za-z0-9._-]+$")
# Versions and platforms end up inside store keys and archive filenames
TOKEN_PATTERN = re.compile(r"^[^\s:/\\]+$")
# A dash would make the version/platform split of an archive filename ambiguous
VERSION_PATTERN = re.compile(r"^[^\s:/\\-]+$")


def _utc_now() -> datetime:
    return datetime.now(UTC)


class Dependency(BaseModel):
    """A runtime dependency declared by a release."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    requirements: str = Field(default=">= 0", description="Free-form version constraint")


class RecordSubmission(BaseModel):
    """Release metadata as supplied by the uploader.

    Archive extraction happens before the index sees anything; this is the
    validated result of it.
    """

    name: str = Field(min_length=1, max_length=200)
    version: str = Field(min_length=1, max_length=100)
    platform: str = DEFAULT_PLATFORM
    authors: list[str] = Field(default_factory=list)
    summary: str = ""
    info: str = ""
    dependencies: list[Dependency] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        if not NAME_PATTERN.match(value):
            raise ValueError("name may only contain letters, digits, '.', '_' and '-'")
        if not any(char.isalnum() for char in value):
            raise ValueError("name must contain a letter or digit")
        return value

    @field_validator("version")
    @classmethod
    def _check_version(cls, value: str) -> str:
        if not VERSION_PATTERN.match(value):
            raise ValueError("version must not contain whitespace, ':', '-' or slashes")
        return value

    @field_validator("platform", mode="before")
    @classmethod
    def _default_platform(cls, value: object) -> object:
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_PLATFORM
        return value

    @field_validator("platform")
    @classmethod
    def _check_platform(cls, value: str) -> str:
        if not TOKEN_PATTERN.match(value):
            raise ValueError("platform must not contain whitespace, ':' or slashes")
        return value


class PackageRecord(RecordSubmission):
    """One concrete (name, version, platform) release as stored."""

    sha256: str = ""
    size: int = 0
    created_at: datetime = Field(default_factory=_utc_now)
    downloads: int = 0

    @property
    def full_name(self) -> str:
        """Release identifier, ``name-version`` plus ``-platform`` when not pure Ruby."""
        if self.platform == DEFAULT_PLATFORM:
            return f"{self.name}-{self.version}"
        return f"{self.name}-{self.version}-{self.platform}"

    def archive_key(self, extension: str = "gem") -> str:
        """Blob key of the uploaded archive."""
        return f"gems/{self.full_name}.{extension}"

    def legacy_tuple(self) -> list[str]:
        """Entry of the legacy specs index: ``[name, version, platform]``."""
        return [self.name, self.version, self.platform]
