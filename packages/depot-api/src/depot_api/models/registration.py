# SPDX-License-Identifier: MIT
"""Pydantic models for the package metadata (registration) resource."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import ProtocolModel

REGISTRATION_INDEX_TYPES = [
    "catalog:CatalogRoot",
    "PackageRegistration",
    "catalog:Permalink",
]
REGISTRATION_LEAF_TYPES = ["Package", "http://schema.nuget.org/catalog#Permalink"]


class DependencyItem(ProtocolModel):
    """One dependency of a dependency group."""

    id: str
    range: str


class DependencyGroupItem(ProtocolModel):
    """Dependencies declared for one target framework."""

    target_framework: Optional[str] = None
    dependencies: list[DependencyItem] = Field(default_factory=list)


class PackageTypeItem(ProtocolModel):
    name: str


class PackageMetadata(ProtocolModel):
    """Catalog entry describing one package version."""

    url: str = Field(alias="@id")
    id: str
    version: str
    authors: str = ""
    dependency_groups: list[DependencyGroupItem] = Field(default_factory=list)
    description: Optional[str] = None
    downloads: int = 0
    has_readme: bool = False
    icon_url: Optional[str] = None
    language: Optional[str] = None
    license_url: Optional[str] = None
    listed: bool = True
    min_client_version: Optional[str] = None
    package_content: str
    package_types: list[PackageTypeItem] = Field(default_factory=list)
    project_url: Optional[str] = None
    repository_url: Optional[str] = None
    repository_type: Optional[str] = None
    published: datetime
    release_notes: Optional[str] = None
    require_license_acceptance: bool = False
    summary: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    title: Optional[str] = None


class RegistrationIndexPageItem(ProtocolModel):
    """One package version within a registration page."""

    url: str = Field(alias="@id")
    package_content: str
    catalog_entry: PackageMetadata


class RegistrationIndexPage(ProtocolModel):
    """A page of package versions.

    ``items`` is omitted when the page must be fetched separately.
    """

    url: str = Field(alias="@id")
    count: int
    lower: str
    upper: str
    items: Optional[list[RegistrationIndexPageItem]] = None


class RegistrationIndexResponse(ProtocolModel):
    """Root of a package's registration: every version, grouped into pages."""

    url: str = Field(alias="@id")
    type: list[str] = Field(alias="@type", default_factory=lambda: list(REGISTRATION_INDEX_TYPES))
    count: int
    total_downloads: int
    items: list[RegistrationIndexPage]


class RegistrationLeafResponse(ProtocolModel):
    """Registration of a single package version."""

    url: str = Field(alias="@id")
    type: list[str] = Field(alias="@type", default_factory=lambda: list(REGISTRATION_LEAF_TYPES))
    listed: bool
    package_content: str
    published: datetime
    registration_index_url: str = Field(alias="registration")
