# SPDX-License-Identifier: MIT
"""Upstream client that tries several mirrors in order."""

import logging
from typing import Optional, Sequence

from depot_version import Version

from ..db.models import Package
from .base import UpstreamClient

logger = logging.getLogger(__name__)


class FallbackUpstreamClient(UpstreamClient):
    """Tries each mirror in configured order until one has a result.

    A mirror that raises is logged and skipped. Once a mirror returns a
    non-empty result the remaining mirrors are not contacted. If no mirror has
    a result the call returns an empty list or None; it never raises.
    """

    def __init__(self, clients: Sequence[UpstreamClient]):
        if not clients:
            raise ValueError("At least one upstream client is required")
        self._clients = list(clients)

    @property
    def clients(self) -> list[UpstreamClient]:
        return list(self._clients)

    async def list_package_versions(self, package_id: str) -> list[Version]:
        for index, client in enumerate(self._clients):
            try:
                versions = await client.list_package_versions(package_id)
            except Exception:
                logger.warning(
                    "Mirror %d failed while listing versions for %s",
                    index,
                    package_id,
                    exc_info=True,
                )
                continue
            if versions:
                return versions
        return []

    async def list_packages(self, package_id: str) -> list[Package]:
        for index, client in enumerate(self._clients):
            try:
                packages = await client.list_packages(package_id)
            except Exception:
                logger.warning(
                    "Mirror %d failed while listing packages for %s",
                    index,
                    package_id,
                    exc_info=True,
                )
                continue
            if packages:
                return packages
        return []

    async def download_package_or_none(self, package_id: str, version: Version) -> Optional[bytes]:
        for index, client in enumerate(self._clients):
            try:
                content = await client.download_package_or_none(package_id, version)
            except Exception:
                logger.warning(
                    "Mirror %d failed while downloading %s %s",
                    index,
                    package_id,
                    version.to_normalized_string(),
                    exc_info=True,
                )
                continue
            if content is not None:
                return content
        return None

    async def aclose(self) -> None:
        for client in self._clients:
            await client.aclose()
