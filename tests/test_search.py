"""Tests for debounced product-name search."""

import asyncio

from sheet_cleaner.exceptions import AliasStoreError
from sheet_cleaner.search import ProductNameSearch
from sheet_cleaner.stores import InMemoryAliasStore


def _store():
    return InMemoryAliasStore(product_names=["Shaw Floorte Pro", "Coretec Pro Oak"])


def test_search_returns_matches():
    search = ProductNameSearch(_store(), debounce_sec=0)

    assert asyncio.run(search.search("coretec")) == ["Coretec Pro Oak"]
    assert search.results == ["Coretec Pro Oak"]


def test_last_query_wins():
    search = ProductNameSearch(_store(), debounce_sec=0.01)

    async def type_quickly():
        return await asyncio.gather(search.search("shaw"), search.search("coretec"))

    first, second = asyncio.run(type_quickly())

    assert first is None
    assert second == ["Coretec Pro Oak"]
    assert search.query == "coretec"
    assert search.results == ["Coretec Pro Oak"]


def test_blank_query_clears_results():
    search = ProductNameSearch(_store(), debounce_sec=0)
    asyncio.run(search.search("shaw"))

    assert asyncio.run(search.search("   ")) == []
    assert search.results == []


def test_store_failure_returns_no_results(mocker):
    store = mocker.MagicMock()
    store.search_product_names.side_effect = AliasStoreError("down")
    search = ProductNameSearch(store, debounce_sec=0)

    assert asyncio.run(search.search("shaw")) == []


def test_clear_resets_state():
    search = ProductNameSearch(_store(), debounce_sec=0)
    asyncio.run(search.search("shaw"))

    search.clear()

    assert (search.query, search.results) == ("", [])
