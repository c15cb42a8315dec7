# SPDX-License-Identifier: MIT
"""Local filesystem storage backend."""

import asyncio
import logging
from pathlib import Path
from typing import Optional

from .base import PutResult, StorageError, StorageService

logger = logging.getLogger(__name__)


class FileStorageService(StorageService):
    """Stores blobs as files below a root directory.

    File I/O runs in worker threads so it never blocks the event loop.
    """

    name = "filesystem"

    def __init__(self, root: str | Path):
        self.root = Path(root).resolve()

    def _resolve(self, path: str) -> Path:
        target = (self.root / path).resolve()
        if not target.is_relative_to(self.root):
            raise StorageError(f"Path escapes storage root: {path}")
        return target

    async def get(self, path: str) -> Optional[bytes]:
        target = self._resolve(path)

        def _read() -> Optional[bytes]:
            try:
                return target.read_bytes()
            except FileNotFoundError:
                return None

        return await asyncio.to_thread(_read)

    async def put(self, path: str, content: bytes, content_type: str) -> PutResult:
        target = self._resolve(path)

        def _write() -> PutResult:
            target.parent.mkdir(parents=True, exist_ok=True)
            try:
                with open(target, "xb") as f:
                    f.write(content)
            except FileExistsError:
                existing = target.read_bytes()
                return PutResult.ALREADY_EXISTS if existing == content else PutResult.CONFLICT
            return PutResult.SUCCESS

        try:
            return await asyncio.to_thread(_write)
        except OSError as e:
            raise StorageError(f"Failed to write {path}: {e}") from e

    async def delete(self, path: str) -> None:
        target = self._resolve(path)

        def _delete() -> None:
            target.unlink(missing_ok=True)

        try:
            await asyncio.to_thread(_delete)
        except OSError as e:
            raise StorageError(f"Failed to delete {path}: {e}") from e
