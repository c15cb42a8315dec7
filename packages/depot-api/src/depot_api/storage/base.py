# SPDX-License-Identifier: MIT
"""Abstract base class for content storage backends."""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional


class PutResult(Enum):
    """Outcome of writing a blob."""

    SUCCESS = "success"
    ALREADY_EXISTS = "already_exists"
    CONFLICT = "conflict"


class StorageError(Exception):
    """Raised when a storage backend cannot complete an operation."""

    pass


class StorageService(ABC):
    """Abstract base class for storage backends.

    Paths are relative, ``/``-separated and lower-case.

    Attributes:
        name: Unique name for this storage backend.
    """

    name: str = "base"

    @abstractmethod
    async def get(self, path: str) -> Optional[bytes]:
        """Read a blob.

        Args:
            path: Path in storage.

        Returns:
            The blob content, or None if it does not exist.
        """
        ...

    @abstractmethod
    async def put(self, path: str, content: bytes, content_type: str) -> PutResult:
        """Write a blob unless one already exists at the path.

        Args:
            path: Destination path in storage.
            content: Blob content.
            content_type: MIME type of the content.

        Returns:
            SUCCESS if written, ALREADY_EXISTS if identical content is present,
            CONFLICT if different content is present.

        Raises:
            StorageError: If the write fails.
        """
        ...

    @abstractmethod
    async def delete(self, path: str) -> None:
        """Delete a blob. Deleting a missing path is not an error."""
        ...
