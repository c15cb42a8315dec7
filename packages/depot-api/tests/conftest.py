# SPDX-License-Identifier: MIT
"""Pytest fixtures for API tests."""

import zipfile
from collections.abc import AsyncGenerator, Callable
from datetime import datetime, timezone
from io import BytesIO
from pathlib import Path
from typing import Optional
from xml.sax.saxutils import escape

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from depot_api import APIConfig, create_app
from depot_api.db import CatalogStore, get_session
from depot_api.db.models import Base, Package, PackageDependency, PackageType, TargetFramework
from depot_api.search.indexer import NullSearchIndexer
from depot_api.services.indexing import PackageIndexingService
from depot_api.storage import FileStorageService, PackageStorageService

NUSPEC_NAMESPACE = "http://schemas.microsoft.com/packaging/2013/05/nuspec.xsd"


def build_nupkg(
    package_id: str = "Contoso.Widgets",
    version: str = "1.0.0",
    *,
    authors: str = "Jane Doe",
    description: str = "Widgets for every occasion",
    tags: Optional[str] = None,
    dependencies: Optional[dict[Optional[str], list[tuple[str, str]]]] = None,
    package_types: Optional[list[str]] = None,
    readme: Optional[bytes] = None,
    icon: Optional[bytes] = None,
    icon_url: Optional[str] = None,
    files: Optional[dict[str, bytes]] = None,
) -> bytes:
    """Build a package archive in memory.

    ``dependencies`` maps a target framework (or None for an ungrouped list)
    to ``(id, range)`` pairs; an empty list produces an empty group.
    """
    metadata = [
        f"<id>{escape(package_id)}</id>",
        f"<version>{escape(version)}</version>",
        f"<authors>{escape(authors)}</authors>",
        f"<description>{escape(description)}</description>",
    ]
    if tags is not None:
        metadata.append(f"<tags>{escape(tags)}</tags>")
    if readme is not None:
        metadata.append("<readme>README.md</readme>")
    if icon is not None:
        metadata.append("<icon>images/icon.png</icon>")
    if icon_url is not None:
        metadata.append(f"<iconUrl>{escape(icon_url)}</iconUrl>")
    if package_types:
        entries = "".join(f'<packageType name="{escape(name)}" />' for name in package_types)
        metadata.append(f"<packageTypes>{entries}</packageTypes>")

    if dependencies:
        groups = []
        for framework, entries in dependencies.items():
            items = "".join(
                f'<dependency id="{escape(dep_id)}" version="{escape(dep_range)}" />'
                for dep_id, dep_range in entries
            )
            if framework is None:
                groups.append(f"<group>{items}</group>")
            else:
                groups.append(f'<group targetFramework="{escape(framework)}">{items}</group>')
        metadata.append(f"<dependencies>{''.join(groups)}</dependencies>")

    nuspec = (
        '<?xml version="1.0" encoding="utf-8"?>'
        f'<package xmlns="{NUSPEC_NAMESPACE}"><metadata>{"".join(metadata)}</metadata></package>'
    )

    buffer = BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        archive.writestr(f"{package_id}.nuspec", nuspec)
        if readme is not None:
            archive.writestr("README.md", readme)
        if icon is not None:
            archive.writestr("images/icon.png", icon)
        for name, data in (files or {}).items():
            archive.writestr(name, data)
    return buffer.getvalue()


def make_package(
    package_id: str = "Contoso.Widgets",
    version: str = "1.0.0",
    *,
    listed: bool = True,
    downloads: int = 0,
    authors: Optional[list[str]] = None,
    tags: Optional[list[str]] = None,
    description: Optional[str] = None,
    dependencies: Optional[list[tuple[Optional[str], Optional[str], Optional[str]]]] = None,
    package_types: Optional[list[str]] = None,
    frameworks: Optional[list[str]] = None,
    **kwargs,
) -> Package:
    """Create an unsaved catalog row.

    ``dependencies`` holds ``(id, range, target_framework)`` triples.
    """
    return Package(
        id=package_id,
        version=version,
        listed=listed,
        downloads=downloads,
        authors=authors if authors is not None else ["Jane Doe"],
        tags=tags or [],
        description=description,
        published=datetime(2024, 1, 1, tzinfo=timezone.utc),
        dependencies=[
            PackageDependency(id=dep_id, version_range=dep_range, target_framework=framework)
            for dep_id, dep_range, framework in dependencies or []
        ],
        package_types=[PackageType(name=name) for name in package_types or ["Dependency"]],
        target_frameworks=[TargetFramework(moniker=moniker) for moniker in frameworks or []],
        **kwargs,
    )


@pytest.fixture
def nupkg() -> Callable[..., bytes]:
    """Factory building package archives in memory."""
    return build_nupkg


@pytest.fixture
def package_factory() -> Callable[..., Package]:
    """Factory creating unsaved catalog rows."""
    return make_package


@pytest.fixture
def test_config(tmp_path: Path) -> APIConfig:
    """Create test configuration with in-memory SQLite."""
    config = APIConfig()
    config.database.url = "sqlite+aiosqlite:///:memory:"
    config.database.echo = False
    config.storage.type = "filesystem"
    config.storage.path = str(tmp_path / "packages")
    return config


@pytest_asyncio.fixture
async def test_engine(test_config: APIConfig):
    """Create test database engine."""
    engine = create_async_engine(
        test_config.database.url,
        echo=test_config.database.echo,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def test_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    session_factory = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with session_factory() as session:
        yield session


@pytest.fixture
def catalog(test_session: AsyncSession) -> CatalogStore:
    return CatalogStore(test_session)


@pytest.fixture
def package_storage(test_config: APIConfig) -> PackageStorageService:
    return PackageStorageService(FileStorageService(Path(test_config.storage.path)))


@pytest.fixture
def indexer(
    catalog: CatalogStore,
    package_storage: PackageStorageService,
    test_config: APIConfig,
) -> PackageIndexingService:
    """Indexing pipeline over the test session and a temporary storage root."""
    return PackageIndexingService(catalog, package_storage, NullSearchIndexer(), test_config)


@pytest_asyncio.fixture
async def app(test_config: APIConfig, test_engine):
    """Create test FastAPI application."""
    app = create_app(test_config)

    # Override database session dependency
    session_factory = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async def override_get_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    return app


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Create test HTTP client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
