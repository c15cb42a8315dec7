# SPDX-License-Identifier: MIT
"""Package-aware layout on top of a storage backend."""

import logging
from typing import TYPE_CHECKING, Optional

from depot_version import Version

from .base import PutResult, StorageError, StorageService

if TYPE_CHECKING:
    from ..services.reader import PackageArchive

logger = logging.getLogger(__name__)

PACKAGES_PATH = "packages"
PACKAGE_CONTENT_TYPE = "binary/octet-stream"
NUSPEC_CONTENT_TYPE = "text/plain"
README_CONTENT_TYPE = "text/markdown"
ICON_CONTENT_TYPE = "image/xyz"


def _folder(package_id: str, version: Version) -> str:
    lower_id = package_id.lower()
    lower_version = version.to_normalized_string().lower()
    return f"{PACKAGES_PATH}/{lower_id}/{lower_version}"


def package_path(package_id: str, version: Version) -> str:
    lower_id = package_id.lower()
    lower_version = version.to_normalized_string().lower()
    return f"{_folder(package_id, version)}/{lower_id}.{lower_version}.nupkg"


def nuspec_path(package_id: str, version: Version) -> str:
    return f"{_folder(package_id, version)}/{package_id.lower()}.nuspec"


def readme_path(package_id: str, version: Version) -> str:
    return f"{_folder(package_id, version)}/readme"


def icon_path(package_id: str, version: Version) -> str:
    return f"{_folder(package_id, version)}/icon"


class PackageStorageService:
    """Stores package archives and the files extracted from them.

    Layout: ``packages/<id>/<version>/`` holding the archive, its manifest and
    optional readme and icon files, all lower-cased.
    """

    def __init__(self, storage: StorageService):
        self._storage = storage

    async def save_package_content(self, archive: "PackageArchive") -> None:
        """Persist a package's archive and extracted files.

        Raises:
            StorageError: If any file conflicts with different existing content
        """
        package = archive.package
        version = package.parsed_version
        logger.info("Storing package %s %s", package.id, version.to_normalized_string())

        files = [
            (package_path(package.id, version), archive.content, PACKAGE_CONTENT_TYPE),
            (nuspec_path(package.id, version), archive.nuspec, NUSPEC_CONTENT_TYPE),
        ]
        if archive.readme is not None:
            files.append((readme_path(package.id, version), archive.readme, README_CONTENT_TYPE))
        if archive.icon is not None:
            files.append((icon_path(package.id, version), archive.icon, ICON_CONTENT_TYPE))

        for path, content, content_type in files:
            result = await self._storage.put(path, content, content_type)
            if result == PutResult.CONFLICT:
                raise StorageError(f"Different content already exists at {path}")

    async def get_package_content_or_none(self, package_id: str, version: Version) -> Optional[bytes]:
        return await self._storage.get(package_path(package_id, version))

    async def get_nuspec_or_none(self, package_id: str, version: Version) -> Optional[bytes]:
        return await self._storage.get(nuspec_path(package_id, version))

    async def get_readme_or_none(self, package_id: str, version: Version) -> Optional[bytes]:
        return await self._storage.get(readme_path(package_id, version))

    async def get_icon_or_none(self, package_id: str, version: Version) -> Optional[bytes]:
        return await self._storage.get(icon_path(package_id, version))

    async def delete(self, package_id: str, version: Version) -> None:
        """Delete every stored file of a package version."""
        for path in (
            package_path(package_id, version),
            nuspec_path(package_id, version),
            readme_path(package_id, version),
            icon_path(package_id, version),
        ):
            await self._storage.delete(path)
