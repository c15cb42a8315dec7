# SPDX-License-Identifier: MIT
"""FastAPI application factory."""

import asyncio
import contextlib
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .auth import ApiKeyAuthenticator, CredentialAuthenticator
from .config import APIConfig
from .models.responses import HealthResponse
from .providers import create_search_factory, create_search_indexer, create_storage
from .storage import PackageStorageService
from .upstream import create_upstream_client

logger = logging.getLogger(__name__)


async def run_reindex(app: FastAPI) -> int:
    """Submit every catalog package to the search indexer."""
    from .db import CatalogStore, get_session_factory
    from .search.reindex import SearchReindexService

    config: APIConfig = app.state.config
    async with get_session_factory()() as session:
        service = SearchReindexService(
            CatalogStore(session), app.state.search_indexer, config.reindex.batch_size
        )
        return await service.reindex()


async def _reindex_loop(app: FastAPI) -> None:
    config: APIConfig = app.state.config
    if config.reindex.run_on_startup:
        await _reindex_once(app)

    interval = config.reindex.interval_minutes
    while interval > 0:
        await asyncio.sleep(interval * 60)
        await _reindex_once(app)


async def _reindex_once(app: FastAPI) -> None:
    try:
        await run_reindex(app)
    except Exception:
        logger.exception("Search reindex failed")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    config: APIConfig = app.state.config

    # Initialize database connection
    from .db import init_db

    await init_db(config.database)

    reindex_task = None
    if config.reindex.enabled:
        reindex_task = asyncio.create_task(_reindex_loop(app))

    yield

    # Shutdown: cleanup resources
    if reindex_task is not None:
        reindex_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await reindex_task

    from .db import close_db

    await close_db()
    await app.state.upstream.aclose()


def create_app(config: APIConfig | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Backends are selected here, once, from the configuration.

    Args:
        config: API configuration. If None, loads from environment.

    Returns:
        Configured FastAPI application instance.

    Raises:
        ConfigError: If the configuration is invalid
    """
    if config is None:
        config = APIConfig.from_env()
    config.validate()

    app = FastAPI(
        title=config.title,
        description=config.description,
        version=config.version,
        debug=config.debug,
        docs_url=config.docs_url,
        openapi_url=config.openapi_url,
        lifespan=lifespan,
    )

    # Store config and backends in app state
    app.state.config = config
    app.state.package_storage = PackageStorageService(create_storage(config))
    app.state.search_indexer = create_search_indexer(config)
    app.state.search_factory = create_search_factory(config)
    app.state.upstream = create_upstream_client(config.mirrors, config.user_agent)
    app.state.api_key_authenticator = ApiKeyAuthenticator(config.auth)
    app.state.credential_authenticator = CredentialAuthenticator(config.auth.credentials)

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add error handling middleware
    from .middleware.errors import add_error_handlers

    add_error_handlers(app)

    # Register API routes
    from .routes import content, index, publish, registration, search

    prefix = config.path_base if config.path_base != "/" else ""
    app.include_router(index.router, prefix=prefix, tags=["index"])
    app.include_router(publish.router, prefix=prefix, tags=["publish"])
    app.include_router(content.router, prefix=prefix, tags=["content"])
    app.include_router(registration.router, prefix=prefix, tags=["registration"])
    app.include_router(search.router, prefix=prefix, tags=["search"])

    # Health check endpoint
    @app.get("/health", response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(status="healthy", version=config.version)

    return app
