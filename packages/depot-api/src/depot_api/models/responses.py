# SPDX-License-Identifier: MIT
"""Pydantic models for the service index and other small responses."""

from typing import Any, Optional

from pydantic import BaseModel, Field

from .base import ProtocolModel


class ErrorResponse(BaseModel):
    """Standard error response format."""

    error: dict = Field(description="Error object containing code and message")

    @classmethod
    def create(cls, code: str, message: str) -> "ErrorResponse":
        """Create an error response."""
        error_obj: dict[str, Any] = {"code": code, "message": message}
        return cls(error=error_obj)


class ServiceIndexResource(ProtocolModel):
    """One resource advertised by the service index."""

    url: str = Field(alias="@id")
    type: str = Field(alias="@type")
    comment: Optional[str] = None


class ServiceIndexResponse(ProtocolModel):
    """Entry point listing every resource the registry serves."""

    version: str = "3.0.0"
    resources: list[ServiceIndexResource]


class PackageVersionsResponse(ProtocolModel):
    """Lower-cased normalized versions of a package, ascending."""

    versions: list[str]


class HealthResponse(BaseModel):
    status: str
    version: str
