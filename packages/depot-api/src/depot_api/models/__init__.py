# SPDX-License-Identifier: MIT
"""Pydantic models for API responses."""

from .registration import (
    DependencyGroupItem,
    DependencyItem,
    PackageMetadata,
    PackageTypeItem,
    RegistrationIndexPage,
    RegistrationIndexPageItem,
    RegistrationIndexResponse,
    RegistrationLeafResponse,
)
from .responses import (
    ErrorResponse,
    HealthResponse,
    PackageVersionsResponse,
    ServiceIndexResource,
    ServiceIndexResponse,
)
from .search import (
    AutocompleteResponse,
    DependentResult,
    DependentsResponse,
    SearchResponse,
    SearchResult,
    SearchResultVersion,
)

__all__ = [
    # Registration models
    "DependencyGroupItem",
    "DependencyItem",
    "PackageMetadata",
    "PackageTypeItem",
    "RegistrationIndexPage",
    "RegistrationIndexPageItem",
    "RegistrationIndexResponse",
    "RegistrationLeafResponse",
    # Search models
    "AutocompleteResponse",
    "DependentResult",
    "DependentsResponse",
    "SearchResponse",
    "SearchResult",
    "SearchResultVersion",
    # Response models
    "ErrorResponse",
    "HealthResponse",
    "PackageVersionsResponse",
    "ServiceIndexResource",
    "ServiceIndexResponse",
]
