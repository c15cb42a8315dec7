# SPDX-License-Identifier: MIT
"""Package indexing pipeline: accept, store and prune package versions."""

import asyncio
import logging
from enum import Enum

from depot_version import Version

from ..config import APIConfig, PackageOverwriteAllowed
from ..db.catalog import AddResult, CatalogStore
from ..db.models import Package
from ..search.indexer import SearchIndexer
from ..storage.packages import PackageStorageService
from .reader import InvalidPackageError, read_package
from .retention import find_prunable_versions

logger = logging.getLogger(__name__)


class IndexingResult(Enum):
    """Outcome of indexing an uploaded package."""

    SUCCESS = "success"
    INVALID_PACKAGE = "invalid_package"
    PACKAGE_ALREADY_EXISTS = "package_already_exists"


class PackageIndexingService:
    """Indexes uploaded packages into the catalog and content storage.

    Attributes:
        catalog: Catalog store for package rows.
        storage: Package content storage.
        search_indexer: Search backend notified of new packages.
        config: Overwrite policy and retention quotas.
    """

    def __init__(
        self,
        catalog: CatalogStore,
        storage: PackageStorageService,
        search_indexer: SearchIndexer,
        config: APIConfig,
    ) -> None:
        self.catalog = catalog
        self.storage = storage
        self.search_indexer = search_indexer
        self.config = config

    def _can_overwrite(self, version: Version) -> bool:
        policy = self.config.allow_package_overwrites
        if policy == PackageOverwriteAllowed.TRUE:
            return True
        if policy == PackageOverwriteAllowed.PRERELEASE_ONLY:
            return version.is_prerelease
        return False

    async def index(self, content: bytes) -> IndexingResult:
        """Index a package archive.

        Args:
            content: The raw package archive

        Returns:
            SUCCESS, INVALID_PACKAGE or PACKAGE_ALREADY_EXISTS

        Raises:
            Exception: Storage failures after the row was inserted; the row is
                removed again before the error propagates
        """
        try:
            archive = read_package(content)
        except InvalidPackageError as e:
            logger.warning("Uploaded package is invalid: %s", e.message)
            return IndexingResult.INVALID_PACKAGE

        package = archive.package
        version = package.parsed_version
        normalized = version.to_normalized_string()

        existing = await self.catalog.find_or_none(package.id, version, include_unlisted=True)
        if existing is not None:
            if existing.listed and not self._can_overwrite(version):
                logger.warning(
                    "Package %s %s already exists and may not be overwritten",
                    package.id,
                    normalized,
                )
                return IndexingResult.PACKAGE_ALREADY_EXISTS

            logger.info("Replacing existing package %s %s", package.id, normalized)
            await self.storage.delete(package.id, version)
            await self.catalog.hard_delete(package.id, version)

        if await self.catalog.add(package) == AddResult.PACKAGE_ALREADY_EXISTS:
            return IndexingResult.PACKAGE_ALREADY_EXISTS

        try:
            await self.storage.save_package_content(archive)
        except (Exception, asyncio.CancelledError):
            logger.exception(
                "Failed to store content of %s %s, removing its metadata", package.id, normalized
            )
            await asyncio.shield(self._remove_metadata(package.id, version))
            raise

        try:
            await self.search_indexer.index(package)
        except Exception:
            logger.exception("Failed to add %s %s to the search index", package.id, normalized)

        logger.info("Indexed package %s %s", package.id, normalized)

        await self._apply_retention(package)
        return IndexingResult.SUCCESS

    async def _remove_metadata(self, package_id: str, version: Version) -> None:
        await self.catalog.hard_delete(package_id, version)

    async def _apply_retention(self, package: Package) -> None:
        retention = self.config.retention
        if not retention.enabled:
            return

        try:
            existing = await self.catalog.find(package.id, include_unlisted=True)
            prunable = find_prunable_versions((p.parsed_version for p in existing), retention)
            for version in prunable:
                logger.info(
                    "Deleting %s %s to satisfy retention quotas",
                    package.id,
                    version.to_normalized_string(),
                )
                await self.storage.delete(package.id, version)
                await self.catalog.hard_delete(package.id, version)
        except Exception:
            logger.exception("Failed to apply retention policy to %s", package.id)
