# SPDX-License-Identifier: MIT
"""SQLAlchemy database models for the Depot catalog."""

from datetime import UTC, datetime
from typing import Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from depot_version import Version, parse_version


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


def _utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(UTC)


_PACKAGE_DEFAULTS = {
    "authors": list,
    "tags": list,
    "downloads": 0,
    "listed": True,
    "has_readme": False,
    "has_embedded_icon": False,
    "require_license_acceptance": False,
    "published": _utc_now,
}


class Package(Base):
    """One published version of a package.

    Rows are immutable after publishing apart from the listed flag and the
    download counter. ``(normalized_id, normalized_version)`` is unique, which
    is what serializes concurrent pushes of the same version.
    """

    __tablename__ = "packages"
    __table_args__ = (
        UniqueConstraint("normalized_id", "normalized_version", name="uq_packages_id_version"),
    )

    key: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(128))
    normalized_id: Mapped[str] = mapped_column(String(128), index=True)
    version: Mapped[str] = mapped_column(String(64))
    normalized_version: Mapped[str] = mapped_column(String(64))
    original_version: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    authors: Mapped[list[str]] = mapped_column(JSON, default=list)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    downloads: Mapped[int] = mapped_column(Integer, default=0)
    has_readme: Mapped[bool] = mapped_column(Boolean, default=False)
    has_embedded_icon: Mapped[bool] = mapped_column(Boolean, default=False)
    is_prerelease: Mapped[bool] = mapped_column(Boolean, default=False)
    release_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    language: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    listed: Mapped[bool] = mapped_column(Boolean, default=True)
    min_client_version: Mapped[Optional[str]] = mapped_column(String(44), nullable=True)
    published: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utc_now)
    require_license_acceptance: Mapped[bool] = mapped_column(Boolean, default=False)
    semver_level: Mapped[int] = mapped_column(Integer, default=1)
    summary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    title: Mapped[Optional[str]] = mapped_column(String(256), nullable=True)
    icon_url: Mapped[Optional[str]] = mapped_column(String(4000), nullable=True)
    license_url: Mapped[Optional[str]] = mapped_column(String(4000), nullable=True)
    project_url: Mapped[Optional[str]] = mapped_column(String(4000), nullable=True)
    repository_url: Mapped[Optional[str]] = mapped_column(String(4000), nullable=True)
    repository_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    tags: Mapped[list[str]] = mapped_column(JSON, default=list)

    # Relationships
    dependencies: Mapped[list["PackageDependency"]] = relationship(
        "PackageDependency",
        back_populates="package",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    package_types: Mapped[list["PackageType"]] = relationship(
        "PackageType",
        back_populates="package",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    target_frameworks: Mapped[list["TargetFramework"]] = relationship(
        "TargetFramework",
        back_populates="package",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def __init__(self, **kwargs):
        # Column defaults only apply at INSERT; upstream packages are never inserted.
        for name, default in _PACKAGE_DEFAULTS.items():
            kwargs.setdefault(name, default() if callable(default) else default)
        if kwargs.get("id") and "normalized_id" not in kwargs:
            kwargs["normalized_id"] = kwargs["id"].lower()
        version = kwargs.pop("version", None)
        super().__init__(**kwargs)
        if version is not None:
            self.set_version(version)

    def set_version(self, version: Version | str) -> None:
        """Set the version columns from a parsed or raw version."""
        if isinstance(version, str):
            self.original_version = version
            version = parse_version(version)
        elif self.original_version is None:
            self.original_version = version.to_full_string()
        self.version = version.to_full_string()
        self.normalized_version = version.to_normalized_string().lower()
        self.is_prerelease = version.is_prerelease
        self.semver_level = version.semver_level

    @property
    def parsed_version(self) -> Version:
        return parse_version(self.version)

    def __repr__(self) -> str:
        return f"<Package(id={self.id!r}, version={self.version!r})>"


class PackageDependency(Base):
    """A dependency declared by a package for one target framework.

    A row with neither ``id`` nor ``version_range`` records a framework the
    package supports without any dependencies.
    """

    __tablename__ = "package_dependencies"

    key: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    package_key: Mapped[int] = mapped_column(
        ForeignKey("packages.key", ondelete="CASCADE"), index=True
    )
    id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True, index=True)
    version_range: Mapped[Optional[str]] = mapped_column(String(256), nullable=True)
    target_framework: Mapped[Optional[str]] = mapped_column(String(256), nullable=True)

    package: Mapped["Package"] = relationship("Package", back_populates="dependencies")

    def __repr__(self) -> str:
        return (
            f"<PackageDependency(id={self.id!r}, version_range={self.version_range!r}, "
            f"target_framework={self.target_framework!r})>"
        )


class PackageType(Base):
    """A package type (e.g. "Dependency", "DotnetTool") declared by a package."""

    __tablename__ = "package_types"

    key: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    package_key: Mapped[int] = mapped_column(
        ForeignKey("packages.key", ondelete="CASCADE"), index=True
    )
    name: Mapped[str] = mapped_column(String(512))
    version: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    package: Mapped["Package"] = relationship("Package", back_populates="package_types")

    def __repr__(self) -> str:
        return f"<PackageType(name={self.name!r}, version={self.version!r})>"


class TargetFramework(Base):
    """A target framework moniker a package ships assets for."""

    __tablename__ = "target_frameworks"

    key: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    package_key: Mapped[int] = mapped_column(
        ForeignKey("packages.key", ondelete="CASCADE"), index=True
    )
    moniker: Mapped[str] = mapped_column(String(256), index=True)

    package: Mapped["Package"] = relationship("Package", back_populates="target_frameworks")

    def __repr__(self) -> str:
        return f"<TargetFramework(moniker={self.moniker!r})>"
