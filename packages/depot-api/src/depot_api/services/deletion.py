# SPDX-License-Identifier: MIT
"""Package deletion and relisting."""

import logging

from depot_version import Version

from ..config import APIConfig, PackageDeletionBehavior
from ..db.catalog import CatalogStore
from ..storage.packages import PackageStorageService

logger = logging.getLogger(__name__)


class PackageDeletionService:
    """Applies the configured deletion behavior to delete requests."""

    def __init__(self, catalog: CatalogStore, storage: PackageStorageService, config: APIConfig):
        self.catalog = catalog
        self.storage = storage
        self.config = config

    async def try_delete_package(self, package_id: str, version: Version) -> bool:
        """Unlist or hard-delete a package version.

        Returns:
            False if the version does not exist
        """
        if self.config.package_deletion_behavior == PackageDeletionBehavior.HARD_DELETE:
            return await self.hard_delete_package(package_id, version)
        return await self.catalog.unlist(package_id, version)

    async def hard_delete_package(self, package_id: str, version: Version) -> bool:
        """Remove a package version's row and stored content."""
        if not await self.catalog.hard_delete(package_id, version):
            return False
        await self.storage.delete(package_id, version)
        logger.info("Hard deleted package %s %s", package_id, version.to_normalized_string())
        return True

    async def try_relist_package(self, package_id: str, version: Version) -> bool:
        """Make an unlisted version visible again.

        Returns:
            False if the version does not exist
        """
        return await self.catalog.relist(package_id, version)
