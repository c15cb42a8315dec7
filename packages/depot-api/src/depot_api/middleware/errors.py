# SPDX-License-Identifier: MIT
"""Error handling middleware and exception classes."""

import logging
from dataclasses import dataclass

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..models.responses import ErrorResponse

logger = logging.getLogger(__name__)


class ErrorCode:
    """Standard API error codes."""

    INVALID_PACKAGE = "INVALID_PACKAGE"
    PACKAGE_EXISTS = "PACKAGE_EXISTS"
    PACKAGE_NOT_FOUND = "PACKAGE_NOT_FOUND"
    VERSION_NOT_FOUND = "VERSION_NOT_FOUND"
    UNAUTHORIZED = "UNAUTHORIZED"
    PACKAGE_TOO_LARGE = "PACKAGE_TOO_LARGE"
    INVALID_REQUEST = "INVALID_REQUEST"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# HTTP status codes for each error
ERROR_STATUS_CODES = {
    ErrorCode.INVALID_PACKAGE: 400,
    ErrorCode.INVALID_REQUEST: 400,
    ErrorCode.PACKAGE_EXISTS: 409,
    ErrorCode.PACKAGE_NOT_FOUND: 404,
    ErrorCode.VERSION_NOT_FOUND: 404,
    ErrorCode.UNAUTHORIZED: 401,
    ErrorCode.PACKAGE_TOO_LARGE: 413,
    ErrorCode.INTERNAL_ERROR: 500,
}


@dataclass
class APIError(Exception):
    """Base API exception with structured error response.

    Attributes:
        code: Error code from ErrorCode class
        message: Human-readable error message
    """

    code: str
    message: str

    @property
    def status_code(self) -> int:
        """Get HTTP status code for this error."""
        return ERROR_STATUS_CODES.get(self.code, 500)

    def to_response(self) -> dict:
        """Convert to API response format."""
        return ErrorResponse.create(self.code, self.message).model_dump()


class PackageNotFoundError(APIError):
    """Package does not exist."""

    def __init__(self, package_id: str):
        super().__init__(
            code=ErrorCode.PACKAGE_NOT_FOUND,
            message=f"Package '{package_id}' not found",
        )


class VersionNotFoundError(APIError):
    """Version does not exist."""

    def __init__(self, package_id: str, version: str):
        super().__init__(
            code=ErrorCode.VERSION_NOT_FOUND,
            message=f"Version '{version}' of package '{package_id}' not found",
        )


class PackageExistsError(APIError):
    """Version already exists and may not be overwritten."""

    def __init__(self, message: str = "The package already exists"):
        super().__init__(code=ErrorCode.PACKAGE_EXISTS, message=message)


class InvalidPackageUploadError(APIError):
    """Uploaded content is not a readable package."""

    def __init__(self, message: str = "The uploaded package is invalid"):
        super().__init__(code=ErrorCode.INVALID_PACKAGE, message=message)


class InvalidRequestError(APIError):
    """Request is missing required input."""

    def __init__(self, message: str):
        super().__init__(code=ErrorCode.INVALID_REQUEST, message=message)


class PackageTooLargeError(APIError):
    """Uploaded package exceeds the configured size limit."""

    def __init__(self, limit_mib: int):
        super().__init__(
            code=ErrorCode.PACKAGE_TOO_LARGE,
            message=f"Package exceeds the maximum size of {limit_mib} MiB",
        )


class UnauthorizedError(APIError):
    """Authentication required."""

    def __init__(self, message: str = "Authentication required", *, basic_realm: bool = False):
        super().__init__(
            code=ErrorCode.UNAUTHORIZED,
            message=message,
        )
        self.basic_realm = basic_realm


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Handle APIError exceptions."""
    headers = {}
    if isinstance(exc, UnauthorizedError) and exc.basic_realm:
        headers["WWW-Authenticate"] = 'Basic realm="Depot"'

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response(),
        headers=headers,
    )


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.exception("Unhandled error processing %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse.create(
            ErrorCode.INTERNAL_ERROR, "An unexpected error occurred"
        ).model_dump(),
    )


def add_error_handlers(app: FastAPI) -> None:
    """Register error handlers with the FastAPI application."""
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(Exception, generic_error_handler)
