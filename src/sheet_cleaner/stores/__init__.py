"""Alias store implementations."""

from sheet_cleaner.config import CleanerConfig
from sheet_cleaner.stores.base import AliasStore
from sheet_cleaner.stores.http import HttpAliasStore
from sheet_cleaner.stores.memory import InMemoryAliasStore


def build_alias_store(config: CleanerConfig | None = None) -> AliasStore:
    """HTTP store when a URL is configured, otherwise an empty in-memory store."""
    config = config or CleanerConfig.from_env()
    if config.alias_store_url:
        return HttpAliasStore(
            config.alias_store_url,
            token=config.alias_store_token,
            timeout_sec=config.alias_store_timeout_sec,
            search_limit=config.search_limit,
        )
    return InMemoryAliasStore(search_limit=config.search_limit)


__all__ = ["AliasStore", "HttpAliasStore", "InMemoryAliasStore", "build_alias_store"]
