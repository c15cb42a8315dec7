# SPDX-License-Identifier: MIT
"""Tests for the package indexing pipeline."""

import asyncio
import logging
import zipfile
from io import BytesIO
from pathlib import Path
from typing import Optional

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from depot_api.config import PackageOverwriteAllowed
from depot_api.db import CatalogStore
from depot_api.db.models import Base, Package
from depot_api.search.indexer import NullSearchIndexer, SearchIndexer
from depot_api.services.indexing import IndexingResult, PackageIndexingService
from depot_api.storage import FileStorageService, PackageStorageService
from depot_api.storage.base import PutResult, StorageError, StorageService
from depot_version import parse_version


class FailingStorageService(StorageService):
    """Storage backend whose writes always fail."""

    async def get(self, path: str) -> Optional[bytes]:
        return None

    async def put(self, path: str, content: bytes, content_type: str) -> PutResult:
        raise StorageError(f"disk full while writing {path}")

    async def delete(self, path: str) -> None:
        return None


class UndeletableStorageService(FileStorageService):
    """File storage that refuses to delete anything."""

    async def delete(self, path: str) -> None:
        raise StorageError(f"permission denied deleting {path}")


class FailingSearchIndexer(SearchIndexer):
    async def index(self, package: Package) -> None:
        raise RuntimeError("search backend unavailable")


@pytest.mark.asyncio
class TestIndexPackage:
    """Tests for accepting uploaded packages."""

    async def test_index_new_package(self, indexer, catalog, package_storage, nupkg):
        content = nupkg("Contoso.Widgets", "1.0.0")

        result = await indexer.index(content)

        assert result == IndexingResult.SUCCESS
        package = await catalog.find_or_none("contoso.widgets", parse_version("1.0.0"))
        assert package is not None
        assert package.id == "Contoso.Widgets"
        stored = await package_storage.get_package_content_or_none(
            "Contoso.Widgets", parse_version("1.0.0")
        )
        assert stored == content
        assert await package_storage.get_nuspec_or_none("Contoso.Widgets", parse_version("1.0.0"))

    async def test_invalid_package(self, indexer, catalog):
        result = await indexer.index(b"not a package")
        assert result == IndexingResult.INVALID_PACKAGE
        assert await catalog.list_batch(0, 10) == []

    async def test_encrypted_manifest_is_invalid(self, indexer, catalog, nupkg):
        content = bytearray(nupkg())
        with zipfile.ZipFile(BytesIO(bytes(content))) as archive:
            assert archive.namelist()[0].endswith(".nuspec")
        # Set the encryption flag on the manifest's local and central headers.
        content[6] |= 0x1
        content[content.find(b"PK\x01\x02") + 8] |= 0x1

        result = await indexer.index(bytes(content))

        assert result == IndexingResult.INVALID_PACKAGE
        assert await catalog.list_batch(0, 10) == []

    async def test_overlong_version_is_invalid(self, indexer, catalog, nupkg):
        result = await indexer.index(nupkg(version="1.0.0-" + "a" * 100))

        assert result == IndexingResult.INVALID_PACKAGE
        assert await catalog.list_batch(0, 10) == []

    async def test_stores_readme_and_icon(self, indexer, package_storage, nupkg):
        await indexer.index(nupkg(readme=b"# Hi", icon=b"\x89PNG\r\n\x1a\n"))
        version = parse_version("1.0.0")
        assert await package_storage.get_readme_or_none("Contoso.Widgets", version) == b"# Hi"
        assert await package_storage.get_icon_or_none("Contoso.Widgets", version) is not None


@pytest.mark.asyncio
class TestOverwritePolicy:
    """Tests for pushing a version that already exists."""

    async def test_duplicate_rejected(self, indexer, nupkg):
        assert await indexer.index(nupkg()) == IndexingResult.SUCCESS
        assert await indexer.index(nupkg()) == IndexingResult.PACKAGE_ALREADY_EXISTS

    async def test_duplicate_rejected_case_insensitive(self, indexer, nupkg):
        assert await indexer.index(nupkg("Contoso.Widgets", "1.0")) == IndexingResult.SUCCESS
        result = await indexer.index(nupkg("contoso.widgets", "1.0.0"))
        assert result == IndexingResult.PACKAGE_ALREADY_EXISTS

    async def test_overwrite_allowed(self, indexer, catalog, test_config, nupkg):
        test_config.allow_package_overwrites = PackageOverwriteAllowed.TRUE

        await indexer.index(nupkg(description="first"))
        result = await indexer.index(nupkg(description="second"))

        assert result == IndexingResult.SUCCESS
        packages = await catalog.find("Contoso.Widgets")
        assert [p.description for p in packages] == ["second"]

    async def test_prerelease_only_rejects_stable(self, indexer, test_config, nupkg):
        test_config.allow_package_overwrites = PackageOverwriteAllowed.PRERELEASE_ONLY

        await indexer.index(nupkg(version="1.0.0"))
        result = await indexer.index(nupkg(version="1.0.0", description="again"))

        assert result == IndexingResult.PACKAGE_ALREADY_EXISTS

    async def test_prerelease_only_allows_prerelease(self, indexer, test_config, nupkg):
        test_config.allow_package_overwrites = PackageOverwriteAllowed.PRERELEASE_ONLY

        await indexer.index(nupkg(version="1.0.0-beta"))
        result = await indexer.index(nupkg(version="1.0.0-beta", description="again"))

        assert result == IndexingResult.SUCCESS

    async def test_unlisted_version_replaced(self, indexer, catalog, nupkg):
        version = parse_version("1.0.0")
        await indexer.index(nupkg(description="first"))
        assert await catalog.unlist("Contoso.Widgets", version)

        result = await indexer.index(nupkg(description="second"))

        assert result == IndexingResult.SUCCESS
        package = await catalog.find_or_none("Contoso.Widgets", version)
        assert package.listed
        assert package.description == "second"


@pytest.mark.asyncio
class TestIndexingFailures:
    """Tests for failures after validation."""

    async def test_storage_failure_removes_row(self, catalog, test_config, nupkg):
        service = PackageIndexingService(
            catalog,
            PackageStorageService(FailingStorageService()),
            NullSearchIndexer(),
            test_config,
        )

        with pytest.raises(StorageError):
            await service.index(nupkg())

        assert not await catalog.exists("Contoso.Widgets")

    async def test_search_indexer_failure_is_not_fatal(
        self, catalog, package_storage, test_config, nupkg
    ):
        service = PackageIndexingService(
            catalog, package_storage, FailingSearchIndexer(), test_config
        )

        assert await service.index(nupkg()) == IndexingResult.SUCCESS
        assert await catalog.exists("Contoso.Widgets")


@pytest.mark.asyncio
class TestRetention:
    """Tests for pruning after a successful push."""

    async def test_old_versions_pruned(self, indexer, catalog, package_storage, test_config, nupkg):
        test_config.retention.max_patch_versions = 2

        for patch in range(3):
            assert await indexer.index(nupkg(version=f"1.0.{patch}")) == IndexingResult.SUCCESS

        packages = await catalog.find("Contoso.Widgets", include_unlisted=True)
        assert [p.normalized_version for p in packages] == ["1.0.1", "1.0.2"]
        pruned = await package_storage.get_package_content_or_none(
            "Contoso.Widgets", parse_version("1.0.0")
        )
        assert pruned is None

    async def test_pruning_failure_does_not_fail_push(
        self, catalog, test_config, nupkg, caplog
    ):
        test_config.retention.max_patch_versions = 1
        storage = PackageStorageService(UndeletableStorageService(test_config.storage.path))
        service = PackageIndexingService(catalog, storage, NullSearchIndexer(), test_config)

        assert await service.index(nupkg(version="1.0.0")) == IndexingResult.SUCCESS
        with caplog.at_level(logging.ERROR, logger="depot_api.services.indexing"):
            assert await service.index(nupkg(version="1.0.1")) == IndexingResult.SUCCESS

        assert "Failed to apply retention policy" in caplog.text
        assert await catalog.exists("Contoso.Widgets", parse_version("1.0.1"))
        assert await storage.get_package_content_or_none(
            "Contoso.Widgets", parse_version("1.0.1")
        )

    async def test_no_quotas_keeps_everything(self, indexer, catalog, nupkg):
        for patch in range(3):
            await indexer.index(nupkg(version=f"1.0.{patch}"))

        assert len(await catalog.find("Contoso.Widgets")) == 3


@pytest.mark.asyncio
class TestConcurrentPush:
    """Concurrent pushes of one version have exactly one winner."""

    async def test_single_winner(self, tmp_path: Path, test_config, package_storage, nupkg):
        engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}")
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
        content = nupkg()

        async def push() -> IndexingResult:
            async with session_factory() as session:
                service = PackageIndexingService(
                    CatalogStore(session), package_storage, NullSearchIndexer(), test_config
                )
                return await service.index(content)

        try:
            results = await asyncio.gather(push(), push())
            async with session_factory() as session:
                rows = await CatalogStore(session).find("Contoso.Widgets", include_unlisted=True)
        finally:
            await engine.dispose()

        assert sorted(r.value for r in results) == ["package_already_exists", "success"]
        assert len(rows) == 1
