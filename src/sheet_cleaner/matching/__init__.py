"""Matching utilities for sheet-cleaner."""

from sheet_cleaner.matching.engine import (
    classify,
    dimension_pattern,
    match,
    match_name,
    match_price,
    match_size,
    normalize_size,
    parse_price,
)
from sheet_cleaner.matching.repository import (
    Dictionaries,
    KnownValue,
    NameDictionary,
    ProductAlias,
    SizeAlias,
    SizeDictionary,
    SizeStat,
    load_dictionaries,
)
from sheet_cleaner.matching.types import Extraction

__all__ = [
    "Dictionaries",
    "Extraction",
    "KnownValue",
    "NameDictionary",
    "ProductAlias",
    "SizeAlias",
    "SizeDictionary",
    "SizeStat",
    "classify",
    "dimension_pattern",
    "load_dictionaries",
    "match",
    "match_name",
    "match_price",
    "match_size",
    "normalize_size",
    "parse_price",
]
