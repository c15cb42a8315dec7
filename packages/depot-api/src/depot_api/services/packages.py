# SPDX-License-Identifier: MIT
"""Package lookups that fall back to the upstream mirrors."""

import logging
from typing import Optional

import httpx

from depot_version import Version

from ..db.catalog import CatalogStore
from ..db.models import Package
from ..upstream.base import UpstreamClient
from .indexing import IndexingResult, PackageIndexingService

logger = logging.getLogger(__name__)


class PackageService:
    """Finds packages locally, mirroring them from upstream on a miss.

    Attributes:
        catalog: Local catalog store.
        upstream: Upstream mirror client.
        indexer: Pipeline used to index mirrored packages.
    """

    def __init__(
        self,
        catalog: CatalogStore,
        upstream: UpstreamClient,
        indexer: PackageIndexingService,
    ) -> None:
        self.catalog = catalog
        self.upstream = upstream
        self.indexer = indexer

    async def find_packages(self, package_id: str) -> list[Package]:
        """Return every version of a package, oldest first.

        Upstream metadata is only consulted when the id is unknown locally.
        Upstream packages are not indexed by this lookup.
        """
        local = await self.catalog.find(package_id, include_unlisted=True)
        if local:
            return local

        try:
            upstream = await self.upstream.list_packages(package_id)
        except httpx.HTTPError as e:
            logger.warning("Failed to list upstream packages for %s: %s", package_id, e)
            return []
        return sorted(upstream, key=lambda p: p.parsed_version)

    async def find_package_versions(self, package_id: str) -> list[Version]:
        """Return the union of local and upstream versions, ascending."""
        local = await self.catalog.find(package_id, include_unlisted=True)
        try:
            upstream = await self.upstream.list_package_versions(package_id)
        except httpx.HTTPError as e:
            logger.warning("Failed to list upstream versions for %s: %s", package_id, e)
            upstream = []
        return sorted({p.parsed_version for p in local} | set(upstream))

    async def find_package_or_none(self, package_id: str, version: Version) -> Optional[Package]:
        """Return a package version, indexing it from upstream if needed."""
        package = await self.catalog.find_or_none(package_id, version, include_unlisted=True)
        if package is not None:
            return package

        if not await self._mirror(package_id, version):
            return None
        return await self.catalog.find_or_none(package_id, version, include_unlisted=True)

    async def exists(self, package_id: str, version: Version) -> bool:
        return await self.find_package_or_none(package_id, version) is not None

    async def add_download(self, package_id: str, version: Version) -> None:
        await self.catalog.add_download(package_id, version)

    async def _mirror(self, package_id: str, version: Version) -> bool:
        normalized = version.to_normalized_string()
        try:
            content = await self.upstream.download_package_or_none(package_id, version)
        except httpx.HTTPError as e:
            logger.warning("Failed to download %s %s from upstream: %s", package_id, normalized, e)
            return False
        if content is None:
            return False

        logger.info("Indexing %s %s from upstream", package_id, normalized)
        result = await self.indexer.index(content)
        if result == IndexingResult.INVALID_PACKAGE:
            logger.warning("Upstream package %s %s is invalid", package_id, normalized)
            return False
        return True
