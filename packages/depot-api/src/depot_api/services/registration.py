# SPDX-License-Identifier: MIT
"""Registration (package metadata) documents built from package versions."""

from dataclasses import dataclass
from typing import Optional, Sequence

from depot_version import Version

from ..db.models import Package
from ..models.base import as_utc
from ..models.registration import (
    DependencyGroupItem,
    DependencyItem,
    PackageMetadata,
    PackageTypeItem,
    RegistrationIndexPage,
    RegistrationIndexPageItem,
    RegistrationIndexResponse,
    RegistrationLeafResponse,
)
from .urls import UrlGenerator


@dataclass(frozen=True)
class PackageRegistration:
    """Every known version of one package id."""

    package_id: str
    packages: Sequence[Package]


def _lower(version: Version) -> str:
    return version.to_normalized_string().lower()


class RegistrationBuilder:
    """Projects package versions into registration documents.

    Args:
        urls: Generator for the absolute URLs embedded in documents
        page_size: Maximum number of versions per registration page

    Raises:
        ValueError: If page_size is smaller than 1
    """

    def __init__(self, urls: UrlGenerator, page_size: int = 64):
        if page_size < 1:
            raise ValueError(f"page_size must be at least 1, got {page_size}")
        self.urls = urls
        self.page_size = page_size

    def build_index(self, registration: PackageRegistration) -> RegistrationIndexResponse:
        """Build the registration index for a package.

        With more versions than fit on one page, every page is listed without
        its items and must be fetched from the page URL. Otherwise the single
        page is inlined.
        """
        package_id = registration.package_id
        packages = sorted(registration.packages, key=lambda p: p.parsed_version)
        chunks = [
            packages[i : i + self.page_size] for i in range(0, len(packages), self.page_size)
        ]
        index_url = self.urls.registration_index(package_id)

        pages = []
        if len(chunks) > 1:
            for chunk in chunks:
                lower = chunk[0].parsed_version
                upper = chunk[-1].parsed_version
                pages.append(
                    RegistrationIndexPage(
                        url=self.urls.registration_page(package_id, lower, upper),
                        count=len(chunk),
                        lower=_lower(lower),
                        upper=_lower(upper),
                    )
                )
        elif chunks:
            chunk = chunks[0]
            pages.append(
                RegistrationIndexPage(
                    url=index_url,
                    count=len(chunk),
                    lower=_lower(chunk[0].parsed_version),
                    upper=_lower(chunk[-1].parsed_version),
                    items=[self._page_item(p) for p in chunk],
                )
            )

        return RegistrationIndexResponse(
            url=index_url,
            count=len(pages),
            total_downloads=sum(p.downloads for p in packages),
            items=pages,
        )

    def build_page(
        self,
        registration: PackageRegistration,
        lower: Version,
        upper: Version,
    ) -> Optional[RegistrationIndexPage]:
        """Build one page holding the versions between lower and upper, inclusive.

        Returns:
            The page, or None if the bounds are inverted or select nothing
        """
        if lower > upper:
            return None

        packages = sorted(
            (p for p in registration.packages if lower <= p.parsed_version <= upper),
            key=lambda p: p.parsed_version,
        )
        if not packages:
            return None

        first = packages[0].parsed_version
        last = packages[-1].parsed_version
        return RegistrationIndexPage(
            url=self.urls.registration_page(registration.package_id, first, last),
            count=len(packages),
            lower=_lower(first),
            upper=_lower(last),
            items=[self._page_item(p) for p in packages],
        )

    def build_leaf(self, package: Package) -> RegistrationLeafResponse:
        version = package.parsed_version
        return RegistrationLeafResponse(
            url=self.urls.registration_leaf(package.id, version),
            listed=package.listed,
            package_content=self.urls.package_download(package.id, version),
            published=as_utc(package.published),
            registration_index_url=self.urls.registration_index(package.id),
        )

    def _page_item(self, package: Package) -> RegistrationIndexPageItem:
        version = package.parsed_version
        content_url = self.urls.package_download(package.id, version)
        return RegistrationIndexPageItem(
            url=self.urls.registration_leaf(package.id, version),
            package_content=content_url,
            catalog_entry=PackageMetadata(
                url=self.urls.registration_leaf(package.id, version),
                id=package.id,
                version=package.version,
                authors=", ".join(package.authors or []),
                dependency_groups=self._dependency_groups(package),
                description=package.description,
                downloads=package.downloads,
                has_readme=package.has_readme,
                icon_url=self._icon_url(package),
                language=package.language,
                license_url=package.license_url,
                listed=package.listed,
                min_client_version=package.min_client_version,
                package_content=content_url,
                package_types=[PackageTypeItem(name=t.name) for t in package.package_types],
                project_url=package.project_url,
                repository_url=package.repository_url,
                repository_type=package.repository_type,
                published=as_utc(package.published),
                release_notes=package.release_notes,
                require_license_acceptance=package.require_license_acceptance,
                summary=package.summary,
                tags=list(package.tags or []),
                title=package.title,
            ),
        )

    def _icon_url(self, package: Package) -> Optional[str]:
        if package.has_embedded_icon:
            return self.urls.package_icon(package.id, package.parsed_version)
        return package.icon_url

    @staticmethod
    def _dependency_groups(package: Package) -> list[DependencyGroupItem]:
        groups: dict[Optional[str], DependencyGroupItem] = {}
        for dependency in package.dependencies:
            group = groups.setdefault(
                dependency.target_framework,
                DependencyGroupItem(target_framework=dependency.target_framework),
            )
            # The empty sentinel only marks the framework as supported.
            if dependency.id is None or dependency.version_range is None:
                continue
            group.dependencies.append(
                DependencyItem(id=dependency.id, range=dependency.version_range)
            )
        return list(groups.values())
