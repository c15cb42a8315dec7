# SPDX-License-Identifier: MIT
"""API server configuration.

Configuration is assembled from an optional TOML file (``DEPOT_CONFIG_FILE``)
followed by ``DEPOT_*`` environment variable overrides. List-valued settings
such as mirrors and API keys are only available through the TOML file.
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field, fields, is_dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Optional


class ConfigError(Exception):
    """Raised when configuration loading or validation fails."""

    pass


class PackageOverwriteAllowed(str, Enum):
    """Whether pushing an existing listed version replaces it."""

    FALSE = "false"
    TRUE = "true"
    PRERELEASE_ONLY = "prerelease_only"


class PackageDeletionBehavior(str, Enum):
    """How package deletion requests are interpreted."""

    UNLIST = "unlist"
    HARD_DELETE = "hard_delete"


class MirrorAuthenticationType(str, Enum):
    """Authentication attached to a mirror's HTTP client."""

    NONE = "none"
    BASIC = "basic"
    BEARER = "bearer"
    CUSTOM = "custom"


@dataclass
class DatabaseConfig:
    """Database connection configuration."""

    url: str = "sqlite:///./depot.db"
    echo: bool = False
    pool_size: int = 5
    max_overflow: int = 10


@dataclass
class StorageConfig:
    """Package content storage configuration."""

    type: str = "filesystem"  # "filesystem" or "null"
    path: str = "./packages"


@dataclass
class SearchConfig:
    """Search backend configuration."""

    type: str = "database"  # "database" or "null"


@dataclass
class RetentionConfig:
    """Version retention quotas. None or 0 disables a tier."""

    max_major_versions: Optional[int] = None
    max_minor_versions: Optional[int] = None
    max_patch_versions: Optional[int] = None
    max_prerelease_versions: Optional[int] = None

    @property
    def enabled(self) -> bool:
        return any(
            limit
            for limit in (
                self.max_major_versions,
                self.max_minor_versions,
                self.max_patch_versions,
                self.max_prerelease_versions,
            )
        )


@dataclass
class MirrorAuthenticationConfig:
    """Credentials for an upstream mirror."""

    type: MirrorAuthenticationType = MirrorAuthenticationType.NONE
    username: Optional[str] = None
    password: Optional[str] = None
    token: Optional[str] = None
    custom_headers: dict[str, str] = field(default_factory=dict)


@dataclass
class MirrorConfig:
    """An upstream registry consulted when a package is missing locally."""

    enabled: bool = True
    package_source: Optional[str] = None
    legacy: bool = False
    package_download_timeout_seconds: int = 600
    authentication: MirrorAuthenticationConfig = field(default_factory=MirrorAuthenticationConfig)


@dataclass
class ApiKeyConfig:
    """A push API key, as plain text or as a PBKDF2 hash."""

    key: Optional[str] = None
    key_hash: Optional[str] = None


@dataclass
class CredentialConfig:
    """HTTP basic credentials granting read access."""

    username: str = ""
    password: Optional[str] = None
    password_hash: Optional[str] = None


@dataclass
class AuthConfig:
    """Authentication configuration.

    When no API key is configured anywhere, package pushes are not
    authenticated. When no credentials are configured, reads are anonymous.
    """

    api_key: Optional[str] = None
    api_key_hash: Optional[str] = None
    api_keys: list[ApiKeyConfig] = field(default_factory=list)
    credentials: list[CredentialConfig] = field(default_factory=list)


@dataclass
class ReindexConfig:
    """Background search reindexing."""

    enabled: bool = False
    run_on_startup: bool = False
    interval_minutes: int = 0
    batch_size: int = 100


@dataclass
class APIConfig:
    """Main API server configuration."""

    # Server settings
    title: str = "Depot Package Registry"
    description: str = "Private package registry with upstream mirroring"
    version: str = "0.1.0"
    debug: bool = False
    path_base: str = ""
    user_agent: str = "Depot/0.1.0"

    # Sub-configurations
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    retention: RetentionConfig = field(default_factory=RetentionConfig)
    mirrors: list[MirrorConfig] = field(default_factory=list)
    auth: AuthConfig = field(default_factory=AuthConfig)
    reindex: ReindexConfig = field(default_factory=ReindexConfig)

    # Package settings
    allow_package_overwrites: PackageOverwriteAllowed = PackageOverwriteAllowed.FALSE
    package_deletion_behavior: PackageDeletionBehavior = PackageDeletionBehavior.UNLIST
    read_only: bool = False
    registration_page_size: int = 64
    max_package_size_mib: int = 8 * 1024

    # API settings
    docs_url: str = "/docs"
    openapi_url: str = "/openapi.json"

    @property
    def max_package_size_bytes(self) -> int:
        return self.max_package_size_mib * 1024 * 1024

    @classmethod
    def from_toml(cls, path: str | Path) -> "APIConfig":
        """Load configuration from a TOML file.

        Args:
            path: Path to the TOML file

        Returns:
            APIConfig instance

        Raises:
            ConfigError: If the file is unreadable, malformed or has unknown keys
        """
        config_path = Path(path)
        try:
            with open(config_path, "rb") as f:
                data = tomllib.load(f)
        except FileNotFoundError as e:
            raise ConfigError(f"Configuration file not found: {config_path}") from e
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML in {config_path}: {e}") from e

        return _build(cls, data, "")

    @classmethod
    def from_env(cls) -> "APIConfig":
        """Create configuration from environment variables."""
        if config_file := os.getenv("DEPOT_CONFIG_FILE"):
            config = cls.from_toml(config_file)
        else:
            config = cls()

        # Database
        if db_url := os.getenv("DEPOT_DATABASE_URL"):
            config.database.url = db_url
        if echo := os.getenv("DEPOT_DATABASE_ECHO"):
            config.database.echo = echo.lower() == "true"

        # Storage and search
        if storage_type := os.getenv("DEPOT_STORAGE_TYPE"):
            config.storage.type = storage_type.lower()
        if storage_path := os.getenv("DEPOT_STORAGE_PATH"):
            config.storage.path = storage_path
        if search_type := os.getenv("DEPOT_SEARCH_TYPE"):
            config.search.type = search_type.lower()

        # Auth
        if api_key := os.getenv("DEPOT_API_KEY"):
            config.auth.api_key = api_key
        if api_key_hash := os.getenv("DEPOT_API_KEY_HASH"):
            config.auth.api_key_hash = api_key_hash

        # Packages
        if overwrites := os.getenv("DEPOT_ALLOW_PACKAGE_OVERWRITES"):
            config.allow_package_overwrites = _enum(
                PackageOverwriteAllowed, overwrites, "allow_package_overwrites"
            )
        if deletion := os.getenv("DEPOT_PACKAGE_DELETION_BEHAVIOR"):
            config.package_deletion_behavior = _enum(
                PackageDeletionBehavior, deletion, "package_deletion_behavior"
            )
        if read_only := os.getenv("DEPOT_READ_ONLY"):
            config.read_only = read_only.lower() == "true"
        if page_size := os.getenv("DEPOT_REGISTRATION_PAGE_SIZE"):
            config.registration_page_size = _int(page_size, "registration_page_size")
        if path_base := os.getenv("DEPOT_PATH_BASE"):
            config.path_base = path_base

        # Retention
        for quota in ("major", "minor", "patch", "prerelease"):
            if value := os.getenv(f"DEPOT_RETENTION_MAX_{quota.upper()}_VERSIONS"):
                setattr(
                    config.retention,
                    f"max_{quota}_versions",
                    _int(value, f"retention.max_{quota}_versions"),
                )

        # Single mirror shortcut
        if mirror_source := os.getenv("DEPOT_MIRROR_SOURCE"):
            config.mirrors.append(
                MirrorConfig(
                    package_source=mirror_source,
                    legacy=os.getenv("DEPOT_MIRROR_LEGACY", "").lower() == "true",
                )
            )

        # Debug
        if debug := os.getenv("DEPOT_DEBUG"):
            config.debug = debug.lower() == "true"

        return config

    def validate(self) -> None:
        """Check option ranges and combinations.

        Raises:
            ConfigError: On the first invalid option found
        """
        if self.registration_page_size < 1:
            raise ConfigError("registration_page_size must be at least 1")
        if self.max_package_size_mib <= 0:
            raise ConfigError("max_package_size_mib must be greater than 0")

        if self.path_base:
            if not self.path_base.startswith("/"):
                raise ConfigError("path_base must start with '/'")
            if len(self.path_base) > 1 and self.path_base.endswith("/"):
                raise ConfigError("path_base must not end with '/' unless it is '/'")

        for f in fields(RetentionConfig):
            value = getattr(self.retention, f.name)
            if value is not None and value < 0:
                raise ConfigError(f"retention.{f.name} must not be negative")

        if self.storage.type not in ("filesystem", "null"):
            raise ConfigError(f"Unknown storage type: {self.storage.type}")
        if self.search.type not in ("database", "null"):
            raise ConfigError(f"Unknown search type: {self.search.type}")

        if self.reindex.batch_size < 1:
            raise ConfigError("reindex.batch_size must be at least 1")
        if self.reindex.interval_minutes < 0:
            raise ConfigError("reindex.interval_minutes must not be negative")

        for index, mirror in enumerate(self.mirrors):
            if not mirror.enabled:
                continue
            if not mirror.package_source:
                raise ConfigError(f"mirrors[{index}].package_source is required")
            if mirror.package_download_timeout_seconds <= 0:
                raise ConfigError(f"mirrors[{index}].package_download_timeout_seconds must be positive")
            auth = mirror.authentication
            if auth.type == MirrorAuthenticationType.BASIC and not auth.username:
                raise ConfigError(f"mirrors[{index}].authentication.username is required")
            if auth.type == MirrorAuthenticationType.BEARER and not auth.token:
                raise ConfigError(f"mirrors[{index}].authentication.token is required")
            if mirror.legacy and auth.type not in (
                MirrorAuthenticationType.NONE,
                MirrorAuthenticationType.BASIC,
            ):
                raise ConfigError(
                    f"mirrors[{index}]: legacy mirrors only support basic authentication"
                )


def _int(value: Any, name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{name} must be an integer, got {value!r}") from e


def _enum(enum_cls: type[Enum], value: Any, name: str) -> Any:
    if isinstance(value, bool):
        value = "true" if value else "false"
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError as e:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ConfigError(f"{name} must be one of: {allowed}") from e


# Element types of list-valued fields, keyed by owning dataclass and field name.
_LIST_ITEM_TYPES: dict[tuple[type, str], type] = {
    (APIConfig, "mirrors"): MirrorConfig,
    (AuthConfig, "api_keys"): ApiKeyConfig,
    (AuthConfig, "credentials"): CredentialConfig,
}


def _build(cls: type, data: Any, prefix: str) -> Any:
    """Build a configuration dataclass from a TOML table."""
    if not isinstance(data, dict):
        raise ConfigError(f"{prefix or 'configuration'} must be a table")

    instance = cls()
    known = {f.name: f for f in fields(cls)}
    for key, value in data.items():
        name = f"{prefix}{key}"
        if key not in known:
            raise ConfigError(f"Unknown configuration key: {name}")

        current = getattr(instance, key)
        if (cls, key) in _LIST_ITEM_TYPES:
            if not isinstance(value, list):
                raise ConfigError(f"{name} must be an array of tables")
            item_type = _LIST_ITEM_TYPES[(cls, key)]
            value = [_build(item_type, item, f"{name}[{i}].") for i, item in enumerate(value)]
        elif is_dataclass(current):
            value = _build(type(current), value, f"{name}.")
        elif isinstance(current, Enum):
            value = _enum(type(current), value, name)
        elif isinstance(current, bool):
            if not isinstance(value, bool):
                raise ConfigError(f"{name} must be a boolean")
        elif isinstance(current, int) or (current is None and isinstance(value, int)):
            value = _int(value, name)
        elif isinstance(current, dict) and not isinstance(value, dict):
            raise ConfigError(f"{name} must be a table")
        setattr(instance, key, value)

    return instance
