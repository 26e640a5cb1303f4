# SPDX-License-Identifier: MIT
"""Error handling middleware and exception classes."""

import logging
from dataclasses import dataclass, field

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ErrorCode:
    """Standard API error codes."""

    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"
    GEM_NOT_FOUND = "GEM_NOT_FOUND"
    VERSION_NOT_FOUND = "VERSION_NOT_FOUND"
    INVALID_REQUEST = "INVALID_REQUEST"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# HTTP status codes for each error
ERROR_STATUS_CODES = {
    ErrorCode.STORE_UNAVAILABLE: 503,
    ErrorCode.GEM_NOT_FOUND: 404,
    ErrorCode.VERSION_NOT_FOUND: 404,
    ErrorCode.INVALID_REQUEST: 400,
    ErrorCode.INTERNAL_ERROR: 500,
}


@dataclass
class ErrorDetail:
    """Detailed error information for a specific field or issue."""

    field: str
    error: str


@dataclass
class APIError(Exception):
    """Base API exception with structured error response.

    Attributes:
        code: Error code from ErrorCode class
        message: Human-readable error message
        details: List of detailed error information
    """

    code: str
    message: str
    details: list[ErrorDetail] = field(default_factory=list)

    def __str__(self) -> str:
        return self.message

    @property
    def status_code(self) -> int:
        """Get HTTP status code for this error."""
        return ERROR_STATUS_CODES.get(self.code, 500)

    def to_response(self) -> dict:
        """Convert to API response format."""
        response = {
            "error": {
                "code": self.code,
                "message": self.message,
            }
        }
        if self.details:
            response["error"]["details"] = [
                {"field": d.field, "error": d.error} for d in self.details
            ]
        return response


class StoreUnavailableError(APIError):
    """Metadata or blob store could not be reached."""

    def __init__(self, store: str, reason: str = ""):
        message = f"{store} store unavailable"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(
            code=ErrorCode.STORE_UNAVAILABLE,
            message=message,
        )
        self.store = store


class PackageNotFoundError(APIError):
    """Gem has no records."""

    def __init__(self, package_name: str):
        super().__init__(
            code=ErrorCode.GEM_NOT_FOUND,
            message=f"Gem '{package_name}' not found",
        )
        self.package_name = package_name


class VersionNotFoundError(APIError):
    """Gem exists but the requested version does not."""

    def __init__(self, package_name: str, version: str):
        super().__init__(
            code=ErrorCode.VERSION_NOT_FOUND,
            message=f"Version '{version}' of gem '{package_name}' not found",
        )
        self.package_name = package_name
        self.version = version


class InvalidRequestError(APIError):
    """Request could not be processed as given."""

    def __init__(self, message: str, details: list[ErrorDetail] | None = None):
        super().__init__(
            code=ErrorCode.INVALID_REQUEST,
            message=message,
            details=details or [],
        )


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Handle APIError exceptions."""
    if isinstance(exc, StoreUnavailableError):
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response(),
    )


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": ErrorCode.INTERNAL_ERROR,
                "message": "An unexpected error occurred",
            }
        },
    )


def add_error_handlers(app: FastAPI, catch_all: bool = True) -> None:
    """Register error handlers with the FastAPI application."""
    app.add_exception_handler(APIError, api_error_handler)
    if catch_all:
        app.add_exception_handler(Exception, generic_error_handler)
