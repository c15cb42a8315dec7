# SPDX-License-Identifier: MIT
"""Client for upstream registries speaking the v3 JSON protocol."""

import asyncio
import logging
from typing import Any, Optional

import httpx

from depot_version import Version, try_parse_version

from ..db.models import Package, PackageType
from .base import UpstreamClient
from .convert import dependency_group, parse_timestamp, split_authors, split_tags, target_frameworks

logger = logging.getLogger(__name__)

PACKAGE_BASE_ADDRESS = ("PackageBaseAddress/3.0.0",)
REGISTRATIONS_BASE_URL = (
    "RegistrationsBaseUrl/3.6.0",
    "RegistrationsBaseUrl/3.4.0",
    "RegistrationsBaseUrl/3.0.0-rc",
    "RegistrationsBaseUrl",
)


class V3UpstreamClient(UpstreamClient):
    """Reads versions, metadata and archives from a v3 service index.

    The service index is fetched once, on first use, and its resource URLs
    are reused for the lifetime of the client.
    """

    def __init__(self, http: httpx.AsyncClient, service_index_url: str):
        self._http = http
        self._service_index_url = service_index_url
        self._resources: Optional[dict[str, str]] = None
        self._lock = asyncio.Lock()

    async def _resource(self, types: tuple[str, ...]) -> str:
        if self._resources is None:
            async with self._lock:
                if self._resources is None:
                    response = await self._http.get(self._service_index_url)
                    response.raise_for_status()
                    resources: dict[str, str] = {}
                    for resource in response.json().get("resources", []):
                        resource_types = resource.get("@type")
                        if isinstance(resource_types, str):
                            resource_types = [resource_types]
                        for resource_type in resource_types or []:
                            resources.setdefault(resource_type, resource["@id"])
                    self._resources = resources

        for resource_type in types:
            if resource_type in self._resources:
                return self._resources[resource_type].rstrip("/")
        raise LookupError(f"Service index at {self._service_index_url} has no {types[0]} resource")

    async def list_package_versions(self, package_id: str) -> list[Version]:
        base = await self._resource(PACKAGE_BASE_ADDRESS)
        response = await self._http.get(f"{base}/{package_id.lower()}/index.json")
        if response.status_code == 404:
            return []
        response.raise_for_status()

        versions = []
        for text in response.json().get("versions", []):
            version = try_parse_version(text)
            if version is not None:
                versions.append(version)
        return versions

    async def list_packages(self, package_id: str) -> list[Package]:
        base = await self._resource(REGISTRATIONS_BASE_URL)
        response = await self._http.get(f"{base}/{package_id.lower()}/index.json")
        if response.status_code == 404:
            return []
        response.raise_for_status()

        packages = []
        for page in response.json().get("items", []):
            items = page.get("items")
            if items is None:
                page_response = await self._http.get(page["@id"])
                page_response.raise_for_status()
                items = page_response.json().get("items", [])
            for item in items:
                package = self._to_package(item.get("catalogEntry") or {})
                if package is not None:
                    packages.append(package)
        return packages

    async def download_package_or_none(self, package_id: str, version: Version) -> Optional[bytes]:
        base = await self._resource(PACKAGE_BASE_ADDRESS)
        lower_id = package_id.lower()
        lower_version = version.to_normalized_string().lower()
        response = await self._http.get(
            f"{base}/{lower_id}/{lower_version}/{lower_id}.{lower_version}.nupkg"
        )
        if response.status_code == 404:
            return None
        response.raise_for_status()
        return response.content

    async def aclose(self) -> None:
        await self._http.aclose()

    @staticmethod
    def _to_package(entry: dict[str, Any]) -> Optional[Package]:
        version = try_parse_version(entry.get("version", ""))
        if not entry.get("id") or version is None:
            return None

        dependencies = []
        for group in entry.get("dependencyGroups") or []:
            dependencies.extend(
                dependency_group(
                    group.get("targetFramework"),
                    [(d.get("id"), d.get("range")) for d in group.get("dependencies") or []],
                )
            )

        published = parse_timestamp(entry.get("published"))
        package = Package(
            id=entry["id"],
            version=version,
            authors=split_authors(entry.get("authors")),
            description=entry.get("description"),
            language=entry.get("language") or None,
            listed=entry.get("listed", True),
            min_client_version=entry.get("minClientVersion") or None,
            require_license_acceptance=bool(entry.get("requireLicenseAcceptance", False)),
            summary=entry.get("summary") or None,
            title=entry.get("title") or None,
            icon_url=entry.get("iconUrl") or None,
            license_url=entry.get("licenseUrl") or None,
            project_url=entry.get("projectUrl") or None,
            tags=split_tags(entry.get("tags")),
            dependencies=dependencies,
            package_types=[PackageType(name="Dependency", version=None)],
            target_frameworks=target_frameworks(dependencies),
        )
        if published is not None:
            package.published = published
        return package
