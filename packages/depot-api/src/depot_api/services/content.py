# SPDX-License-Identifier: MIT
"""Package content downloads."""

from typing import Optional

from depot_version import Version

from ..storage.packages import PackageStorageService
from .packages import PackageService


class PackageContentService:
    """Serves package archives and the files extracted from them."""

    def __init__(self, packages: PackageService, storage: PackageStorageService):
        self.packages = packages
        self.storage = storage

    async def get_package_versions_or_none(self, package_id: str) -> Optional[list[str]]:
        """Return lower-cased normalized versions, ascending, or None if unknown."""
        versions = await self.packages.find_package_versions(package_id)
        if not versions:
            return None
        return [v.to_normalized_string().lower() for v in versions]

    async def get_package_content_or_none(self, package_id: str, version: Version) -> Optional[bytes]:
        """Return a package archive and count the download."""
        if not await self.packages.exists(package_id, version):
            return None

        await self.packages.add_download(package_id, version)
        return await self.storage.get_package_content_or_none(package_id, version)

    async def get_package_manifest_or_none(self, package_id: str, version: Version) -> Optional[bytes]:
        if not await self.packages.exists(package_id, version):
            return None
        return await self.storage.get_nuspec_or_none(package_id, version)

    async def get_package_readme_or_none(self, package_id: str, version: Version) -> Optional[bytes]:
        package = await self.packages.find_package_or_none(package_id, version)
        if package is None or not package.has_readme:
            return None
        return await self.storage.get_readme_or_none(package_id, version)

    async def get_package_icon_or_none(self, package_id: str, version: Version) -> Optional[bytes]:
        package = await self.packages.find_package_or_none(package_id, version)
        if package is None or not package.has_embedded_icon:
            return None
        return await self.storage.get_icon_or_none(package_id, version)
