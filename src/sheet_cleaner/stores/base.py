"""Base alias store interface."""

from abc import ABC, abstractmethod

from sheet_cleaner.matching.repository import ProductAlias, SizeAlias, SizeStat


class AliasStore(ABC):
    """Abstract base class for durable alias storage."""

    @abstractmethod
    def load_size_stats(self) -> list[SizeStat]:
        """Return canonical size labels with usage counts."""
        pass

    @abstractmethod
    def load_size_aliases(self) -> list[SizeAlias]:
        """Return learned raw-text to size mappings."""
        pass

    @abstractmethod
    def load_product_aliases(self) -> list[ProductAlias]:
        """Return learned raw-text to product name mappings."""
        pass

    @abstractmethod
    def load_product_names(self) -> list[str]:
        """Return every canonical product name."""
        pass

    @abstractmethod
    def create_size_alias(self, alias_text: str, mapped_size: str) -> None:
        pass

    @abstractmethod
    def create_size(self, label: str) -> None:
        pass

    @abstractmethod
    def create_product_alias(self, alias_text: str, mapped_product_name: str) -> None:
        pass

    @abstractmethod
    def search_product_names(self, query: str) -> list[str]:
        """Return product names matching ``query``.

        Args:
            query: Free text typed by the operator.

        Returns:
            Matching product names, best matches first.
        """
        pass
