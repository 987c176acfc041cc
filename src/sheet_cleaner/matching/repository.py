"""In-memory dictionaries of learned sizes and product names."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from sheet_cleaner.stores.base import AliasStore


@dataclass(frozen=True)
class SizeStat:
    value: str
    count: int = 0


@dataclass(frozen=True)
class SizeAlias:
    alias_text: str
    mapped_size: str


@dataclass(frozen=True)
class ProductAlias:
    alias_text: str
    mapped_product_name: str


@dataclass
class KnownValue:
    label: str
    matchers: list[str] = field(default_factory=list)
    count: int = 0


def fold(value: str | None) -> str:
    """Comparison key for dictionary lookups."""
    return (value or "").strip().lower()


class SizeDictionary:
    """Versioned collection of canonical size labels and their matchers."""

    def __init__(self, known_values: Iterable[KnownValue] = ()):
        self.version = 0
        self._values: list[KnownValue] = []
        for known in known_values:
            self.add(known.label, known.matchers, count=known.count)
        self.version = 0

    @classmethod
    def from_store(cls, stats: Iterable[SizeStat], aliases: Iterable[SizeAlias]) -> SizeDictionary:
        dictionary = cls()
        for stat in stats:
            dictionary.add(stat.value, count=stat.count)
        for alias in aliases:
            dictionary.add(alias.mapped_size, [alias.alias_text])
        dictionary.version = 0
        return dictionary

    @property
    def values(self) -> list[KnownValue]:
        return list(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def find(self, label: str | None) -> KnownValue | None:
        key = fold(label)
        if not key:
            return None
        for known in self._values:
            if fold(known.label) == key:
                return known
        return None

    def is_known(self, value: str | None) -> bool:
        return self.find(value) is not None

    def add(
        self,
        label: str,
        matchers: Iterable[str | None] = (),
        *,
        count: int = 0,
    ) -> tuple[KnownValue | None, list[str]]:
        """Create ``label`` if missing and attach new matchers.

        Returns the known value and the matchers that were actually added.
        Empty labels and matchers are ignored, and matchers are deduplicated
        case-insensitively against the label and the existing matchers.
        """
        clean_label = (label or "").strip()
        if not clean_label:
            return None, []

        known = self.find(clean_label)
        changed = False
        if known is None:
            known = KnownValue(label=clean_label, count=count)
            self._values.append(known)
            changed = True
        elif count > known.count:
            known.count = count

        added: list[str] = []
        taken = {fold(known.label), *(fold(m) for m in known.matchers)}
        for matcher in matchers:
            key = fold(matcher)
            if not key or key in taken:
                continue
            clean = matcher.strip()
            known.matchers.append(clean)
            added.append(clean)
            taken.add(key)
            changed = True

        if changed:
            self.version += 1
        return known, added

    def rename(self, old_label: str, new_label: str) -> KnownValue:
        known = self.find(old_label)
        if known is None:
            raise KeyError(old_label)
        clean = new_label.strip()
        if not clean:
            raise ValueError("size label must not be empty")
        other = self.find(clean)
        if other is not None and other is not known:
            raise ValueError(f"size already exists: {other.label}")
        if known.label != clean:
            known.label = clean
            known.matchers = [m for m in known.matchers if fold(m) != fold(clean)]
            self.version += 1
        return known

    def remove(self, label: str) -> bool:
        known = self.find(label)
        if known is None:
            return False
        self._values.remove(known)
        self.version += 1
        return True


class NameDictionary:
    """Versioned product aliases and canonical product names."""

    def __init__(
        self,
        aliases: Iterable[ProductAlias] = (),
        product_names: Iterable[str] = (),
    ):
        self.version = 0
        self._aliases: dict[str, ProductAlias] = {}
        self._names: dict[str, str] = {}
        self._matchers: list[tuple[str, str]] = []
        for alias in aliases:
            self.add_alias(alias.alias_text, alias.mapped_product_name)
        for name in product_names:
            self.add_product_name(name)
        self.version = 0

    @property
    def aliases(self) -> list[ProductAlias]:
        return list(self._aliases.values())

    @property
    def product_names(self) -> list[str]:
        return list(self._names.values())

    @property
    def matchers(self) -> list[tuple[str, str]]:
        """``(matcher_text, canonical_name)`` pairs, longest matcher first."""
        return list(self._matchers)

    def exact_alias(self, raw: str | None) -> ProductAlias | None:
        return self._aliases.get(fold(raw))

    def canonical(self, value: str | None) -> str | None:
        key = fold(value)
        if not key:
            return None
        if key in self._names:
            return self._names[key]
        for alias in self._aliases.values():
            if fold(alias.mapped_product_name) == key:
                return alias.mapped_product_name
        return None

    def is_known(self, value: str | None) -> bool:
        return self.canonical(value) is not None

    def add_alias(self, alias_text: str, mapped_product_name: str) -> bool:
        alias_key = fold(alias_text)
        mapped = (mapped_product_name or "").strip()
        if not alias_key or not mapped:
            return False
        current = self._aliases.get(alias_key)
        if current is not None and current.mapped_product_name == mapped:
            return False
        self._aliases[alias_key] = ProductAlias(alias_text=alias_text, mapped_product_name=mapped)
        self._rebuild()
        return True

    def add_product_name(self, name: str) -> bool:
        key = fold(name)
        if not key or key in self._names:
            return False
        self._names[key] = name.strip()
        self._rebuild()
        return True

    def _rebuild(self) -> None:
        combined = [(alias.alias_text, alias.mapped_product_name) for alias in self._aliases.values()]
        combined.extend((name, name) for name in self._names.values())
        combined = [(text, target) for text, target in combined if fold(text)]
        self._matchers = sorted(combined, key=lambda item: len(item[0].strip()), reverse=True)
        self.version += 1


@dataclass
class Dictionaries:
    size: SizeDictionary = field(default_factory=SizeDictionary)
    name: NameDictionary = field(default_factory=NameDictionary)

    @property
    def version(self) -> tuple[int, int]:
        return self.size.version, self.name.version


def load_dictionaries(store: AliasStore) -> Dictionaries:
    """Fetch and merge every dictionary the matcher needs.

    Raises ``AliasStoreError`` when any of the store reads fail.
    """
    size = SizeDictionary.from_store(store.load_size_stats(), store.load_size_aliases())
    name = NameDictionary(store.load_product_aliases(), store.load_product_names())
    return Dictionaries(size=size, name=name)
