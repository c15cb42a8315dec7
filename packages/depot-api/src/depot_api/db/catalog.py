# SPDX-License-Identifier: MIT
"""Catalog store: persistence of package version rows."""

import logging
from enum import Enum
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from depot_version import Version

from .models import Package

logger = logging.getLogger(__name__)


class AddResult(Enum):
    """Outcome of inserting a package row."""

    SUCCESS = "success"
    PACKAGE_ALREADY_EXISTS = "package_already_exists"


def _version_key(version: Version) -> str:
    return version.to_normalized_string().lower()


class CatalogStore:
    """Reads and writes package rows within one database session.

    Attributes:
        session: The database session all queries run in.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find(self, package_id: str, include_unlisted: bool = False) -> list[Package]:
        """Return every version of a package, oldest first."""
        query = select(Package).where(Package.normalized_id == package_id.lower())
        if not include_unlisted:
            query = query.where(Package.listed.is_(True))
        result = await self.session.execute(query)
        packages = list(result.scalars().all())
        packages.sort(key=lambda p: p.parsed_version)
        return packages

    async def find_or_none(
        self,
        package_id: str,
        version: Version,
        include_unlisted: bool = True,
    ) -> Optional[Package]:
        """Return one package version, or None if it does not exist."""
        query = select(Package).where(
            Package.normalized_id == package_id.lower(),
            Package.normalized_version == _version_key(version),
        )
        if not include_unlisted:
            query = query.where(Package.listed.is_(True))
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def exists(self, package_id: str, version: Optional[Version] = None) -> bool:
        """Return True if the package (or the given version of it) exists."""
        query = select(Package.key).where(Package.normalized_id == package_id.lower())
        if version is not None:
            query = query.where(Package.normalized_version == _version_key(version))
        result = await self.session.execute(query.limit(1))
        return result.first() is not None

    async def add(self, package: Package) -> AddResult:
        """Insert a package row.

        A uniqueness violation on (id, version) is reported as
        PACKAGE_ALREADY_EXISTS rather than raised, so concurrent pushes of the
        same version resolve to exactly one winner.
        """
        self.session.add(package)
        try:
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            logger.info(
                "Package %s %s already exists in the catalog",
                package.id,
                package.normalized_version,
            )
            return AddResult.PACKAGE_ALREADY_EXISTS
        return AddResult.SUCCESS

    async def hard_delete(self, package_id: str, version: Version) -> bool:
        """Delete a package row and its children.

        Returns:
            True if a row was deleted
        """
        package = await self.find_or_none(package_id, version, include_unlisted=True)
        if package is None:
            return False
        await self.session.delete(package)
        await self.session.commit()
        return True

    async def unlist(self, package_id: str, version: Version) -> bool:
        """Hide a package version from listings."""
        return await self._set_listed(package_id, version, False)

    async def relist(self, package_id: str, version: Version) -> bool:
        """Make an unlisted package version visible again."""
        return await self._set_listed(package_id, version, True)

    async def _set_listed(self, package_id: str, version: Version, listed: bool) -> bool:
        package = await self.find_or_none(package_id, version, include_unlisted=True)
        if package is None:
            return False
        package.listed = listed
        await self.session.commit()
        return True

    async def add_download(self, package_id: str, version: Version) -> None:
        """Increment the download counter of a package version."""
        await self.session.execute(
            update(Package)
            .where(
                Package.normalized_id == package_id.lower(),
                Package.normalized_version == _version_key(version),
            )
            .values(downloads=Package.downloads + 1)
        )
        await self.session.commit()

    async def list_batch(self, after_key: int, limit: int) -> list[Package]:
        """Return up to ``limit`` rows with a key above ``after_key``, in key order."""
        query = select(Package).where(Package.key > after_key).order_by(Package.key).limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())
