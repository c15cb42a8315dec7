# SPDX-License-Identifier: MIT
"""Rebuild the search index from the catalog."""

import logging

from ..db.catalog import CatalogStore
from .indexer import SearchIndexer

logger = logging.getLogger(__name__)


class SearchReindexService:
    """Submits every catalog row to the search indexer, in key order."""

    def __init__(self, catalog: CatalogStore, indexer: SearchIndexer, batch_size: int = 100):
        if batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {batch_size}")
        self.catalog = catalog
        self.indexer = indexer
        self.batch_size = batch_size

    async def reindex(self) -> int:
        """Reindex all packages.

        Returns:
            The number of packages submitted to the indexer
        """
        logger.info("Starting search reindex (batch size: %d)", self.batch_size)
        indexed = 0
        last_key = 0

        while True:
            batch = await self.catalog.list_batch(last_key, self.batch_size)
            if not batch:
                break
            for package in batch:
                await self.indexer.index(package)
                indexed += 1
            last_key = batch[-1].key

        logger.info("Finished search reindex. Indexed %d packages.", indexed)
        return indexed
