"""Write corrected values back onto the original row objects."""

from __future__ import annotations

from typing import Iterable, Mapping

from sheet_cleaner.schema import CleaningMode, ParsedRow


def write_back(rows: Iterable[ParsedRow], columns: Mapping[CleaningMode, str]) -> list[dict[str, str]]:
    """Return copies of the original rows with every non-empty extraction applied.

    Each assigned mode overwrites only its own column, and only where the row
    has a non-empty value for that mode. Column structure is never changed.
    """
    cleaned: list[dict[str, str]] = []
    for row in rows:
        out = dict(row.original_data)
        for mode, column in columns.items():
            result = row.results.get(mode)
            if result is None or not result.extracted_value:
                continue
            out[column] = result.extracted_value
        cleaned.append(out)
    return cleaned
