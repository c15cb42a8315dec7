# SPDX-License-Identifier: MIT
"""Storage backend that keeps nothing."""

from typing import Optional

from .base import PutResult, StorageService


class NullStorageService(StorageService):
    """Accepts every write and never returns content.

    Useful for metadata-only deployments and tests.
    """

    name = "null"

    async def get(self, path: str) -> Optional[bytes]:
        return None

    async def put(self, path: str, content: bytes, content_type: str) -> PutResult:
        return PutResult.SUCCESS

    async def delete(self, path: str) -> None:
        return None
