# SPDX-License-Identifier: MIT
"""API response models."""

from pydantic import BaseModel, Field


class UploadResponse(BaseModel):
    """Response for a successful upload."""

    success: bool = True
    name: str
    version: str
    platform: str
    sha256: str
    message: str
    index_warnings: list[str] = Field(
        default_factory=list,
        description="Index republish problems; the upload itself succeeded",
    )


class PublishResponse(BaseModel):
    """Response for a manual index republish."""

    success: bool
    message: str
    gems_count: int = 0
    artifacts: list[str] = Field(default_factory=list)
    failed: list[str] = Field(default_factory=list)
