"""Data models for matcher output."""

from typing import Literal

from pydantic import BaseModel

from sheet_cleaner.schema import CleaningMode, RowStatus

Method = Literal["exact", "alias", "dimension", "contains", "parsed", "unmapped"]


class Extraction(BaseModel):
    """Matcher result for a single raw text."""

    mode: CleaningMode
    raw: str
    value: str | None = None
    status: RowStatus = "UNKNOWN"
    method: Method = "unmapped"
    matched_on: str | None = None
