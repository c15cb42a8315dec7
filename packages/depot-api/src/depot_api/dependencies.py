# SPDX-License-Identifier: MIT
"""FastAPI dependencies composing the per-request services."""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from .config import APIConfig
from .db import CatalogStore, get_session
from .search.builder import SearchResponseBuilder
from .search.service import SearchService
from .services.content import PackageContentService
from .services.deletion import PackageDeletionService
from .services.indexing import PackageIndexingService
from .services.metadata import PackageMetadataService
from .services.packages import PackageService
from .services.registration import RegistrationBuilder
from .services.urls import UrlGenerator
from .storage import PackageStorageService


def get_config(request: Request) -> APIConfig:
    return request.app.state.config


def get_package_storage(request: Request) -> PackageStorageService:
    return request.app.state.package_storage


def get_urls(request: Request) -> UrlGenerator:
    """Get the URL generator for the request's public base URL."""
    config = get_config(request)
    base_url = str(request.base_url).rstrip("/")
    if config.path_base and config.path_base != "/":
        base_url += config.path_base
    return UrlGenerator(base_url)


async def get_catalog(session: Annotated[AsyncSession, Depends(get_session)]) -> CatalogStore:
    return CatalogStore(session)


async def get_indexing_service(
    request: Request,
    catalog: Annotated[CatalogStore, Depends(get_catalog)],
) -> PackageIndexingService:
    """Get the indexing pipeline bound to the request's catalog session."""
    return PackageIndexingService(
        catalog,
        get_package_storage(request),
        request.app.state.search_indexer,
        get_config(request),
    )


async def get_package_service(
    request: Request,
    catalog: Annotated[CatalogStore, Depends(get_catalog)],
    indexer: Annotated[PackageIndexingService, Depends(get_indexing_service)],
) -> PackageService:
    return PackageService(catalog, request.app.state.upstream, indexer)


async def get_deletion_service(
    request: Request,
    catalog: Annotated[CatalogStore, Depends(get_catalog)],
) -> PackageDeletionService:
    return PackageDeletionService(catalog, get_package_storage(request), get_config(request))


async def get_content_service(
    request: Request,
    packages: Annotated[PackageService, Depends(get_package_service)],
) -> PackageContentService:
    return PackageContentService(packages, get_package_storage(request))


async def get_metadata_service(
    request: Request,
    packages: Annotated[PackageService, Depends(get_package_service)],
    urls: Annotated[UrlGenerator, Depends(get_urls)],
) -> PackageMetadataService:
    builder = RegistrationBuilder(urls, get_config(request).registration_page_size)
    return PackageMetadataService(packages, builder)


async def get_search_service(
    request: Request,
    session: Annotated[AsyncSession, Depends(get_session)],
    urls: Annotated[UrlGenerator, Depends(get_urls)],
) -> SearchService:
    """Get the configured search service for the request's session."""
    return request.app.state.search_factory(session, SearchResponseBuilder(urls))
