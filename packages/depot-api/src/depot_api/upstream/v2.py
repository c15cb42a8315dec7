# SPDX-License-Identifier: MIT
"""Client for legacy upstream registries speaking the v2 OData protocol."""

import logging
import xml.etree.ElementTree as ET
from typing import Optional

import httpx

from depot_version import Version, try_parse_version

from ..db.models import Package, PackageDependency, PackageType
from .base import UpstreamClient
from .convert import dependency_group, parse_timestamp, split_authors, split_tags, target_frameworks

logger = logging.getLogger(__name__)

# Unlisted packages are reported with this publish year by v2 feeds.
UNLISTED_YEAR = 1900
MAX_FEED_PAGES = 50


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _find(element: ET.Element, name: str) -> Optional[ET.Element]:
    for child in element:
        if _local_name(child.tag) == name:
            return child
    return None


def _find_all(element: ET.Element, name: str) -> list[ET.Element]:
    return [child for child in element if _local_name(child.tag) == name]


def _property(properties: Optional[ET.Element], name: str) -> Optional[str]:
    if properties is None:
        return None
    element = _find(properties, name)
    if element is None or element.text is None:
        return None
    return element.text.strip() or None


def parse_dependencies(value: Optional[str]) -> list[PackageDependency]:
    """Parse a v2 dependency string such as ``A:[1.0, ):net45|::netstandard2.0``."""
    if not value:
        return []

    groups: dict[Optional[str], list[tuple[Optional[str], Optional[str]]]] = {}
    for entry in value.split("|"):
        if not entry.strip():
            continue
        dependency_id, _, rest = entry.partition(":")
        version_range, _, framework = rest.partition(":")
        group = groups.setdefault(framework.strip() or None, [])
        if dependency_id.strip():
            group.append((dependency_id.strip(), version_range.strip() or None))

    dependencies = []
    for framework, entries in groups.items():
        dependencies.extend(dependency_group(framework, entries))
    return dependencies


class V2UpstreamClient(UpstreamClient):
    """Reads versions, metadata and archives from a v2 OData feed.

    Failures are logged and reported as "nothing found".
    """

    def __init__(self, http: httpx.AsyncClient, source_url: str):
        self._http = http
        self._source = source_url.rstrip("/")

    async def _entries(self, package_id: str) -> list[ET.Element]:
        url: Optional[str] = f"{self._source}/FindPackagesById()"
        params: Optional[dict[str, str]] = {
            "id": "'{}'".format(package_id.replace("'", "''")),
            "semVerLevel": "2.0.0",
        }
        entries: list[ET.Element] = []
        for _ in range(MAX_FEED_PAGES):
            if url is None:
                break
            response = await self._http.get(url, params=params)
            if response.status_code == 404:
                break
            response.raise_for_status()

            feed = ET.fromstring(response.content)
            entries.extend(_find_all(feed, "entry"))

            url = None
            params = None
            for link in _find_all(feed, "link"):
                if link.get("rel") == "next" and link.get("href"):
                    url = link.get("href")
        return entries

    async def list_package_versions(self, package_id: str) -> list[Version]:
        try:
            entries = await self._entries(package_id)
        except (httpx.HTTPError, ET.ParseError) as e:
            logger.error("Failed to mirror %s's upstream versions: %s", package_id, e)
            return []

        versions = []
        for entry in entries:
            version = try_parse_version(_property(_find(entry, "properties"), "Version") or "")
            if version is not None:
                versions.append(version)
        return versions

    async def list_packages(self, package_id: str) -> list[Package]:
        try:
            entries = await self._entries(package_id)
        except (httpx.HTTPError, ET.ParseError) as e:
            logger.error("Failed to mirror %s's upstream metadata: %s", package_id, e)
            return []

        packages = []
        for entry in entries:
            package = self._to_package(entry, package_id)
            if package is not None:
                packages.append(package)
        return packages

    async def download_package_or_none(self, package_id: str, version: Version) -> Optional[bytes]:
        url = f"{self._source}/package/{package_id}/{version.to_normalized_string()}"
        try:
            response = await self._http.get(url)
            if response.status_code == 404:
                return None
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(
                "Failed to download package %s %s from upstream: %s",
                package_id,
                version.to_normalized_string(),
                e,
            )
            return None
        return response.content

    async def aclose(self) -> None:
        await self._http.aclose()

    @staticmethod
    def _to_package(entry: ET.Element, package_id: str) -> Optional[Package]:
        properties = _find(entry, "properties")
        version = try_parse_version(_property(properties, "Version") or "")
        if version is None:
            return None

        title_element = _find(entry, "title")
        entry_id = _property(properties, "Id") or (
            title_element.text.strip() if title_element is not None and title_element.text else None
        )

        authors = _property(properties, "Authors")
        if authors is None:
            author = _find(entry, "author")
            name = _find(author, "name") if author is not None else None
            authors = name.text if name is not None else None

        published = parse_timestamp(_property(properties, "Published"))
        listed_text = _property(properties, "Listed")
        if listed_text is not None:
            listed = listed_text.lower() == "true"
        else:
            listed = published is None or published.year != UNLISTED_YEAR

        dependencies = parse_dependencies(_property(properties, "Dependencies"))
        package = Package(
            id=entry_id or package_id,
            version=version,
            authors=split_authors(authors),
            description=_property(properties, "Description"),
            listed=listed,
            require_license_acceptance=(
                (_property(properties, "RequireLicenseAcceptance") or "").lower() == "true"
            ),
            summary=_property(properties, "Summary"),
            title=_property(properties, "Title"),
            icon_url=_property(properties, "IconUrl"),
            license_url=_property(properties, "LicenseUrl"),
            project_url=_property(properties, "ProjectUrl"),
            tags=split_tags(_property(properties, "Tags")),
            dependencies=dependencies,
            package_types=[PackageType(name="Dependency", version=None)],
            target_frameworks=target_frameworks(dependencies),
        )
        if published is not None:
            package.published = published
        return package
