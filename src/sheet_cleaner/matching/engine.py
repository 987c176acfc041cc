"""Matcher for sizes, product names and prices."""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from sheet_cleaner.matching.repository import Dictionaries, NameDictionary, SizeDictionary, fold
from sheet_cleaner.matching.types import Extraction, Method
from sheet_cleaner.schema import CleaningMode, RowStatus

_UNIT = r"""(?:["']|mm|cm|in)?"""
_NUMBER = r"(\d+(?:\.\d+)?)"
DIMENSION_RE = re.compile(
    rf"^{_NUMBER}\s*{_UNIT}\s*x\s*{_NUMBER}\s*{_UNIT}$",
    flags=re.IGNORECASE,
)
_PRICE_STRIP_RE = re.compile(r"[^\d.]")
_CENTS = Decimal("0.01")
_NUMBER_ONLY_RE = re.compile(r"^\d+(?:\.\d+)?$")


def normalize_size(raw: str | None) -> str:
    """Canonicalize a pure dimension string to ``A"xB"``.

    Anything that is not strictly ``number [unit] x number [unit]`` is
    returned trimmed but otherwise untouched.
    """
    if not raw:
        return ""
    text = raw.strip()
    match = DIMENSION_RE.match(text)
    if match:
        return f'{match.group(1)}"x{match.group(2)}"'
    return text


def dimension_pattern(label: str) -> re.Pattern[str] | None:
    """Regex matching the raw ``A x B`` form of a dimension label, if any."""
    naked = re.sub(r"[\"']", "", label or "")
    parts = re.split(r"x", naked, flags=re.IGNORECASE)
    if len(parts) != 2:
        return None
    width, height = parts[0].strip(), parts[1].strip()
    if not _is_number(width) or not _is_number(height):
        return None
    return re.compile(
        rf"\b{re.escape(width)}\s*x\s*{re.escape(height)}\b",
        flags=re.IGNORECASE,
    )


def match_size(raw: str | None, dictionary: SizeDictionary) -> Extraction:
    text = raw or ""
    candidate = normalize_size(text)

    known = dictionary.find(candidate)
    if known is not None:
        return _matched("SIZE", text, known.label, "exact", candidate)

    lowered = text.lower()
    for known in dictionary.values:
        for matcher in known.matchers:
            key = fold(matcher)
            if key and key in lowered:
                return _matched("SIZE", text, known.label, "alias", matcher)

    for known in dictionary.values:
        pattern = dimension_pattern(known.label)
        if pattern is not None and pattern.search(text):
            return _matched("SIZE", text, known.label, "dimension", pattern.pattern)

    return _unmatched("SIZE", text, candidate)


def match_name(raw: str | None, dictionary: NameDictionary) -> Extraction:
    text = raw or ""
    candidate = text.strip()
    if not candidate:
        return _unmatched("NAME", text, candidate)

    alias = dictionary.exact_alias(candidate)
    if alias is not None:
        return _matched("NAME", text, alias.mapped_product_name, "exact", alias.alias_text)

    lowered = text.lower()
    for matcher, canonical in dictionary.matchers:
        if fold(matcher) in lowered:
            return _matched("NAME", text, canonical, "contains", matcher)

    return _unmatched("NAME", text, candidate)


def match_price(raw: str | None) -> Extraction:
    text = raw or ""
    price = parse_price(text)
    if price is None:
        return Extraction(mode="PRICE", raw=text, value=text, status="UNKNOWN", method="unmapped")
    return Extraction(mode="PRICE", raw=text, value=price, status="MATCHED", method="parsed")


def parse_price(raw: str | None) -> str | None:
    """Return ``raw`` as a two-decimal amount, or None if it is not numeric."""
    digits = _PRICE_STRIP_RE.sub("", raw or "")
    if not digits:
        return None
    try:
        amount = Decimal(digits).quantize(_CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        # Also raised when the digit run exceeds the context precision.
        return None
    return str(amount)


def match(mode: CleaningMode, raw: str | None, dictionaries: Dictionaries) -> Extraction:
    if mode == "SIZE":
        return match_size(raw, dictionaries.size)
    if mode == "NAME":
        return match_name(raw, dictionaries.name)
    if mode == "PRICE":
        return match_price(raw)
    raise ValueError(f"Unsupported cleaning mode: {mode}")


def classify(mode: CleaningMode, value: str | None, dictionaries: Dictionaries) -> RowStatus:
    """Status of an operator-supplied value against the current dictionary."""
    if not value or not value.strip():
        return "UNKNOWN"
    if mode == "SIZE":
        return "MATCHED" if dictionaries.size.is_known(value) else "NEW"
    if mode == "NAME":
        return "MATCHED" if dictionaries.name.is_known(value) else "NEW"
    return "MATCHED" if parse_price(value) is not None else "NEW"


def _matched(mode: CleaningMode, raw: str, value: str, method: Method, matched_on: str | None) -> Extraction:
    return Extraction(
        mode=mode,
        raw=raw,
        value=value,
        status="MATCHED",
        method=method,
        matched_on=matched_on,
    )


def _unmatched(mode: CleaningMode, raw: str, candidate: str) -> Extraction:
    if not candidate:
        return Extraction(mode=mode, raw=raw, value=None, status="UNKNOWN")
    return Extraction(mode=mode, raw=raw, value=candidate, status="NEW")


def _is_number(value: str) -> bool:
    return bool(_NUMBER_ONLY_RE.match(value))
