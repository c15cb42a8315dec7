# SPDX-License-Identifier: MIT
"""Search indexers notified when packages are added."""

from abc import ABC, abstractmethod

from ..db.models import Package


class SearchIndexer(ABC):
    """Keeps an external search backend in sync with the catalog."""

    @abstractmethod
    async def index(self, package: Package) -> None:
        """Add or refresh a package in the search backend."""
        ...


class NullSearchIndexer(SearchIndexer):
    """Indexer for backends that query the catalog directly."""

    async def index(self, package: Package) -> None:
        return None
