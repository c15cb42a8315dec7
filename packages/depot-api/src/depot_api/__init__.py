# SPDX-License-Identifier: MIT
"""Private package registry with upstream mirroring."""

__version__ = "0.1.0"

from .app import create_app
from .checksum import compute_etag, compute_sha256, matches_if_none_match
from .config import (
    APIConfig,
    AuthConfig,
    ConfigError,
    DatabaseConfig,
    MirrorConfig,
    RetentionConfig,
    StorageConfig,
)
from .middleware.errors import (
    APIError,
    ErrorCode,
    InvalidPackageUploadError,
    PackageExistsError,
    PackageNotFoundError,
    UnauthorizedError,
    VersionNotFoundError,
)

__all__ = [
    # App factory
    "create_app",
    # Configuration
    "APIConfig",
    "AuthConfig",
    "ConfigError",
    "DatabaseConfig",
    "MirrorConfig",
    "RetentionConfig",
    "StorageConfig",
    # Checksum utilities
    "compute_etag",
    "compute_sha256",
    "matches_if_none_match",
    # Errors
    "APIError",
    "ErrorCode",
    "InvalidPackageUploadError",
    "PackageExistsError",
    "PackageNotFoundError",
    "UnauthorizedError",
    "VersionNotFoundError",
]
