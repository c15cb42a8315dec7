# SPDX-License-Identifier: MIT
"""Registration lookups."""

from typing import Optional

from depot_version import Version

from ..models.registration import (
    RegistrationIndexPage,
    RegistrationIndexResponse,
    RegistrationLeafResponse,
)
from .packages import PackageService
from .registration import PackageRegistration, RegistrationBuilder


class PackageMetadataService:
    """Resolves packages and renders their registration documents."""

    def __init__(self, packages: PackageService, builder: RegistrationBuilder):
        self.packages = packages
        self.builder = builder

    async def _registration_or_none(self, package_id: str) -> Optional[PackageRegistration]:
        packages = await self.packages.find_packages(package_id)
        if not packages:
            return None
        return PackageRegistration(package_id=packages[0].id, packages=packages)

    async def get_registration_index_or_none(
        self, package_id: str
    ) -> Optional[RegistrationIndexResponse]:
        registration = await self._registration_or_none(package_id)
        if registration is None:
            return None
        return self.builder.build_index(registration)

    async def get_registration_page_or_none(
        self, package_id: str, lower: Version, upper: Version
    ) -> Optional[RegistrationIndexPage]:
        registration = await self._registration_or_none(package_id)
        if registration is None:
            return None
        return self.builder.build_page(registration, lower, upper)

    async def get_registration_leaf_or_none(
        self, package_id: str, version: Version
    ) -> Optional[RegistrationLeafResponse]:
        package = await self.packages.find_package_or_none(package_id, version)
        if package is None:
            return None
        return self.builder.build_leaf(package)
