# SPDX-License-Identifier: MIT
"""Upstream client interface."""

from abc import ABC, abstractmethod
from typing import Optional

from depot_version import Version

from ..db.models import Package


class UpstreamClient(ABC):
    """A remote registry consulted when a package is not available locally."""

    @abstractmethod
    async def list_package_versions(self, package_id: str) -> list[Version]:
        """List every version of a package on the upstream."""
        ...

    @abstractmethod
    async def list_packages(self, package_id: str) -> list[Package]:
        """List the metadata of every version of a package on the upstream.

        The returned rows are transient and never added to the catalog.
        """
        ...

    @abstractmethod
    async def download_package_or_none(self, package_id: str, version: Version) -> Optional[bytes]:
        """Download a package archive, or return None if it does not exist."""
        ...

    async def aclose(self) -> None:
        """Release network resources."""
        return None


class DisabledUpstreamClient(UpstreamClient):
    """Used when no mirror is enabled."""

    async def list_package_versions(self, package_id: str) -> list[Version]:
        return []

    async def list_packages(self, package_id: str) -> list[Package]:
        return []

    async def download_package_or_none(self, package_id: str, version: Version) -> Optional[bytes]:
        return None
