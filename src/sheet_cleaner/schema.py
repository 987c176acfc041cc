"""Data models for sheet-cleaner."""

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

CleaningMode = Literal["SIZE", "NAME", "PRICE"]
RowStatus = Literal["UNKNOWN", "MATCHED", "NEW"]
SessionState = Literal["UPLOAD", "SELECT_COLUMN", "ANALYZE", "EXPORT"]
RowFilter = Literal["ALL", "MATCHED", "REVIEW"]

MODES: tuple[CleaningMode, ...] = ("SIZE", "NAME", "PRICE")


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


class SheetData(BaseModel):
    """Header row plus row objects keyed by header name."""

    file_name: str | None = None
    headers: list[str]
    rows: list[dict[str, str]] = Field(default_factory=list)

    @field_validator("headers")
    @classmethod
    def _unique_headers(cls, headers: list[str]) -> list[str]:
        seen: set[str] = set()
        for header in headers:
            if header in seen:
                raise ValueError(f"duplicate header: {header}")
            seen.add(header)
        return headers

    @field_validator("rows", mode="before")
    @classmethod
    def _stringify_cells(cls, rows: Any) -> Any:
        if not isinstance(rows, list):
            return rows
        return [
            {str(k): _cell_text(v) for k, v in row.items()} if isinstance(row, dict) else row
            for row in rows
        ]


class ModeResult(BaseModel):
    """Extraction and reconciliation state of one row for one mode."""

    target_text: str = ""
    extracted_value: str | None = None
    status: RowStatus = "UNKNOWN"
    manual_override: bool = False
    selection_source: str | None = None


class ParsedRow(BaseModel):
    """One spreadsheet row being cleaned."""

    id: str
    original_data: dict[str, str]
    results: dict[CleaningMode, ModeResult] = Field(default_factory=dict)

    def result(self, mode: CleaningMode) -> ModeResult:
        if mode not in self.results:
            self.results[mode] = ModeResult()
        return self.results[mode]


class Notice(BaseModel):
    """Non-fatal message surfaced to the operator."""

    level: Literal["info", "warning"] = "info"
    code: str
    message: str


class ModeStats(BaseModel):
    total: int = 0
    matched: int = 0
    unknown: int = 0
    new: int = 0

    @property
    def review(self) -> int:
        return self.unknown + self.new


class RowGroup(BaseModel):
    """Rows of one mode sharing the same raw text."""

    target_text: str
    row_ids: list[str]
    extracted_value: str | None = None
    status: RowStatus = "UNKNOWN"
    manual_override: bool = False

    @property
    def count(self) -> int:
        return len(self.row_ids)


class PromotionResult(BaseModel):
    """Outcome of promoting a row correction into a dictionary rule."""

    mode: CleaningMode
    label: str | None = None
    alias_text: str | None = None
    added_matchers: list[str] = Field(default_factory=list)
    updated_row_ids: list[str] = Field(default_factory=list)
    persisted: bool = False
    dictionary_version: int = 0
