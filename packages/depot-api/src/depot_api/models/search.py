# SPDX-License-Identifier: MIT
"""Pydantic models for the search, autocomplete and dependents resources."""

from typing import Optional

from pydantic import Field

from .base import ProtocolModel
from .registration import PackageTypeItem

SEARCH_CONTEXT = {
    "@vocab": "http://schema.nuget.org/schema#",
    "@base": "http://schema.nuget.org/schema#",
}


class SearchContext(ProtocolModel):
    vocab: str = Field(alias="@vocab", default=SEARCH_CONTEXT["@vocab"])
    base: str = Field(alias="@base", default=SEARCH_CONTEXT["@base"])


class SearchResultVersion(ProtocolModel):
    """One version of a search result."""

    registration_leaf_url: str = Field(alias="@id")
    version: str
    downloads: int


class SearchResult(ProtocolModel):
    """A package matching a search, summarized by its latest version."""

    id: str
    version: str
    description: Optional[str] = None
    authors: list[str] = Field(default_factory=list)
    icon_url: Optional[str] = None
    license_url: Optional[str] = None
    project_url: Optional[str] = None
    registration_index_url: str = Field(alias="registration")
    summary: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    title: Optional[str] = None
    total_downloads: int
    package_types: list[PackageTypeItem] = Field(default_factory=list)
    versions: list[SearchResultVersion] = Field(default_factory=list)


class SearchResponse(ProtocolModel):
    context: SearchContext = Field(alias="@context", default_factory=SearchContext)
    total_hits: int
    data: list[SearchResult]


class AutocompleteResponse(ProtocolModel):
    context: SearchContext = Field(alias="@context", default_factory=SearchContext)
    total_hits: int
    data: list[str]


class DependentResult(ProtocolModel):
    """A package that depends on the requested package."""

    id: str
    description: Optional[str] = None
    total_downloads: int


class DependentsResponse(ProtocolModel):
    total_hits: int
    data: list[DependentResult]
