# SPDX-License-Identifier: MIT
"""Database module for the Depot catalog."""

from typing import TYPE_CHECKING

from .catalog import AddResult, CatalogStore

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from ..config import DatabaseConfig

__all__ = [
    "AddResult",
    "CatalogStore",
    "init_db",
    "close_db",
    "get_session",
    "get_session_factory",
]

# Database engine and session will be initialized at startup
_engine = None
_session_factory = None


def to_async_url(url: str) -> str:
    """Convert a sync database URL to its async driver equivalent."""
    if url.startswith("sqlite:///"):
        return url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


async def init_db(config: "DatabaseConfig") -> None:
    """Initialize database connection.

    Args:
        config: Database configuration
    """
    global _engine, _session_factory

    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

    url = to_async_url(config.url)
    if "sqlite" in url:
        _engine = create_async_engine(url, echo=config.echo)
    else:
        _engine = create_async_engine(
            url,
            echo=config.echo,
            pool_size=config.pool_size,
            max_overflow=config.max_overflow,
        )

    _session_factory = async_sessionmaker(
        _engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    # Create tables
    from .models import Base

    async with _engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Close database connection."""
    global _engine, _session_factory

    if _engine:
        await _engine.dispose()
        _engine = None
        _session_factory = None


def get_session_factory() -> "async_sessionmaker[AsyncSession]":
    """Return the session factory for work outside a request."""
    if _session_factory is None:
        raise RuntimeError("Database not initialized")
    return _session_factory


async def get_session():
    """Get database session for dependency injection."""
    if _session_factory is None:
        raise RuntimeError("Database not initialized")

    async with _session_factory() as session:
        yield session
