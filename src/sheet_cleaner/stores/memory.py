"""Dictionary-backed alias store."""

from __future__ import annotations

from sheet_cleaner.matching.repository import ProductAlias, SizeAlias, SizeStat, fold
from sheet_cleaner.stores.base import AliasStore


class InMemoryAliasStore(AliasStore):
    """Keeps aliases in process memory. Alias text is unique, last write wins."""

    def __init__(
        self,
        *,
        sizes: list[SizeStat] | None = None,
        size_aliases: list[SizeAlias] | None = None,
        product_aliases: list[ProductAlias] | None = None,
        product_names: list[str] | None = None,
        search_limit: int = 20,
    ):
        self.search_limit = search_limit
        self._sizes: dict[str, SizeStat] = {}
        self._size_aliases: dict[str, SizeAlias] = {}
        self._product_aliases: dict[str, ProductAlias] = {}
        self._product_names: dict[str, str] = {}
        for stat in sizes or []:
            self._sizes[fold(stat.value)] = stat
        for alias in size_aliases or []:
            self._size_aliases[alias.alias_text] = alias
        for alias in product_aliases or []:
            self._product_aliases[alias.alias_text] = alias
        for name in product_names or []:
            self._product_names[fold(name)] = name

    def load_size_stats(self) -> list[SizeStat]:
        return list(self._sizes.values())

    def load_size_aliases(self) -> list[SizeAlias]:
        return list(self._size_aliases.values())

    def load_product_aliases(self) -> list[ProductAlias]:
        return list(self._product_aliases.values())

    def load_product_names(self) -> list[str]:
        return list(self._product_names.values())

    def create_size_alias(self, alias_text: str, mapped_size: str) -> None:
        self._size_aliases[alias_text] = SizeAlias(alias_text=alias_text, mapped_size=mapped_size)

    def create_size(self, label: str) -> None:
        key = fold(label)
        if key and key not in self._sizes:
            self._sizes[key] = SizeStat(value=label.strip(), count=0)

    def create_product_alias(self, alias_text: str, mapped_product_name: str) -> None:
        self._product_aliases[alias_text] = ProductAlias(
            alias_text=alias_text,
            mapped_product_name=mapped_product_name,
        )

    def search_product_names(self, query: str) -> list[str]:
        needle = fold(query)
        if not needle:
            return []
        hits = [name for key, name in self._product_names.items() if needle in key]
        hits.sort(key=lambda name: (not fold(name).startswith(needle), name.lower()))
        return hits[: self.search_limit]
