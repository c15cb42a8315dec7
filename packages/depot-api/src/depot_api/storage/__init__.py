# SPDX-License-Identifier: MIT
"""Package content storage."""

from .base import PutResult, StorageError, StorageService
from .filesystem import FileStorageService
from .null import NullStorageService
from .packages import PackageStorageService

__all__ = [
    "PutResult",
    "StorageError",
    "StorageService",
    "FileStorageService",
    "NullStorageService",
    "PackageStorageService",
]
