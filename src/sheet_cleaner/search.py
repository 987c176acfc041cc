"""Debounced product-name lookup for NAME mode."""

from __future__ import annotations

import asyncio
import logging

from sheet_cleaner.exceptions import AliasStoreError
from sheet_cleaner.stores.base import AliasStore

logger = logging.getLogger(__name__)


class ProductNameSearch:
    """Sidebar search state: the last query wins.

    Each call to ``search`` supersedes the previous one. A superseded call
    returns None and never overwrites ``results``.
    """

    def __init__(self, store: AliasStore, *, debounce_sec: float = 0.3):
        self.store = store
        self.debounce_sec = debounce_sec
        self.query = ""
        self.results: list[str] = []
        self._generation = 0

    async def search(self, query: str) -> list[str] | None:
        self._generation += 1
        generation = self._generation
        self.query = query

        if self.debounce_sec > 0:
            await asyncio.sleep(self.debounce_sec)
        if generation != self._generation:
            return None

        text = query.strip()
        if not text:
            names: list[str] = []
        else:
            try:
                names = await asyncio.to_thread(self.store.search_product_names, text)
            except AliasStoreError as exc:
                logger.warning("product search failed: %s", exc)
                names = []

        if generation != self._generation:
            logger.debug("discarding stale product search for %r", query)
            return None
        self.results = names
        return names

    def clear(self) -> None:
        self._generation += 1
        self.query = ""
        self.results = []
