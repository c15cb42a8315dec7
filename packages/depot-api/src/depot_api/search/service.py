# SPDX-License-Identifier: MIT
"""Search service interface and request types."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from ..models.search import AutocompleteResponse, DependentsResponse, SearchResponse


@dataclass
class SearchRequest:
    """Parameters of a package search."""

    query: Optional[str] = None
    include_prerelease: bool = False
    include_semver2: bool = False
    package_type: Optional[str] = None
    framework: Optional[str] = None
    skip: int = 0
    take: int = 20


@dataclass
class AutocompleteRequest:
    """Parameters of a package id autocomplete."""

    query: Optional[str] = None
    include_prerelease: bool = False
    include_semver2: bool = False
    package_type: Optional[str] = None
    skip: int = 0
    take: int = 20


@dataclass
class VersionsRequest:
    """Parameters of a version listing for one package id."""

    package_id: str
    include_prerelease: bool = False
    include_semver2: bool = False


class SearchService(ABC):
    """Answers search, autocomplete and dependents queries."""

    @abstractmethod
    async def search(self, request: SearchRequest) -> SearchResponse:
        ...

    @abstractmethod
    async def autocomplete(self, request: AutocompleteRequest) -> AutocompleteResponse:
        ...

    @abstractmethod
    async def list_package_versions(self, request: VersionsRequest) -> AutocompleteResponse:
        ...

    @abstractmethod
    async def find_dependents(self, package_id: str) -> DependentsResponse:
        ...


class NullSearchService(SearchService):
    """Search service for deployments with search disabled."""

    async def search(self, request: SearchRequest) -> SearchResponse:
        return SearchResponse(total_hits=0, data=[])

    async def autocomplete(self, request: AutocompleteRequest) -> AutocompleteResponse:
        return AutocompleteResponse(total_hits=0, data=[])

    async def list_package_versions(self, request: VersionsRequest) -> AutocompleteResponse:
        return AutocompleteResponse(total_hits=0, data=[])

    async def find_dependents(self, package_id: str) -> DependentsResponse:
        return DependentsResponse(total_hits=0, data=[])
