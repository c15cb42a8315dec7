# SPDX-License-Identifier: MIT
"""Backend selection.

Each concern keeps an ordered list of ``(predicate, factory)`` pairs. The
first pair whose predicate accepts the configuration provides the backend.
The database search service is registered last so any dedicated search
backend listed before it takes precedence.
"""

from pathlib import Path
from typing import Callable, Sequence, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from .config import APIConfig, ConfigError
from .search.builder import SearchResponseBuilder
from .search.database import DatabaseSearchService
from .search.frameworks import FrameworkCompatibilityService
from .search.indexer import NullSearchIndexer, SearchIndexer
from .search.service import NullSearchService, SearchService
from .storage import FileStorageService, NullStorageService, StorageService

T = TypeVar("T")

Provider = tuple[Callable[[APIConfig], bool], Callable[[APIConfig], T]]
SearchServiceFactory = Callable[[AsyncSession, SearchResponseBuilder], SearchService]


def select_provider(providers: Sequence[Provider], config: APIConfig, concern: str) -> T:
    """Return the backend built by the first provider accepting the configuration.

    Raises:
        ConfigError: If no provider accepts the configuration
    """
    for predicate, factory in providers:
        if predicate(config):
            return factory(config)
    raise ConfigError(f"No {concern} provider matches the configuration")


STORAGE_PROVIDERS: list[Provider] = [
    (
        lambda config: config.storage.type == "filesystem",
        lambda config: FileStorageService(Path(config.storage.path)),
    ),
    (lambda config: config.storage.type == "null", lambda config: NullStorageService()),
]

SEARCH_INDEXER_PROVIDERS: list[Provider] = [
    (lambda config: config.search.type in ("database", "null"), lambda config: NullSearchIndexer()),
]


def _null_search(config: APIConfig) -> SearchServiceFactory:
    return lambda session, builder: NullSearchService()


def _database_search(config: APIConfig) -> SearchServiceFactory:
    frameworks = FrameworkCompatibilityService()
    return lambda session, builder: DatabaseSearchService(session, frameworks, builder)


SEARCH_PROVIDERS: list[Provider] = [
    (lambda config: config.search.type == "null", _null_search),
    # Catch-all: the catalog database can always answer searches.
    (lambda config: True, _database_search),
]


def create_storage(config: APIConfig) -> StorageService:
    return select_provider(STORAGE_PROVIDERS, config, "storage")


def create_search_indexer(config: APIConfig) -> SearchIndexer:
    return select_provider(SEARCH_INDEXER_PROVIDERS, config, "search indexer")


def create_search_factory(config: APIConfig) -> SearchServiceFactory:
    """Return a factory building the search service for one database session."""
    return select_provider(SEARCH_PROVIDERS, config, "search")
