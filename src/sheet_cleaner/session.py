"""Cleaning session: row model, column assignment and review views."""

from __future__ import annotations

import logging

from sheet_cleaner.exceptions import (
    AliasStoreError,
    ColumnNotFoundError,
    DictionaryNotReadyError,
    EmptySheetError,
    InvalidTransitionError,
    RowNotFoundError,
)
from sheet_cleaner.export import write_back
from sheet_cleaner.matching.engine import match
from sheet_cleaner.matching.repository import Dictionaries, load_dictionaries
from sheet_cleaner.schema import (
    MODES,
    CleaningMode,
    ModeResult,
    ModeStats,
    Notice,
    ParsedRow,
    RowFilter,
    RowGroup,
    SessionState,
    SheetData,
)
from sheet_cleaner.stores.base import AliasStore

logger = logging.getLogger(__name__)


class CleaningSession:
    """Single source of truth for one spreadsheet being cleaned.

    States move ``UPLOAD -> SELECT_COLUMN -> ANALYZE -> EXPORT``. Each mode
    keeps its own column assignment; all modes share the row collection.
    """

    def __init__(self, store: AliasStore | None = None):
        self.store = store
        self.state: SessionState = "UPLOAD"
        self.sheet: SheetData | None = None
        self.rows: list[ParsedRow] = []
        self.columns: dict[CleaningMode, str] = {}
        self.active_mode: CleaningMode = "SIZE"
        self.dictionaries = Dictionaries()
        self.dictionary_ready = False
        self.notices: list[Notice] = []
        self._rows_by_id: dict[str, ParsedRow] = {}

    def load_dictionaries(self) -> Dictionaries:
        """Fetch dictionaries from the store; failures leave them empty."""
        if self.store is None:
            self.dictionaries = Dictionaries()
        else:
            try:
                self.dictionaries = load_dictionaries(self.store)
            except AliasStoreError as exc:
                logger.warning("dictionary load failed: %s", exc)
                self.dictionaries = Dictionaries()
                self.notify(
                    "warning",
                    "dictionary_load_failed",
                    "Could not load learned sizes and names; starting with an empty dictionary.",
                )
        self.dictionary_ready = True
        return self.dictionaries

    def load_sheet(self, sheet: SheetData) -> None:
        self._require_state("UPLOAD")
        if not sheet.rows:
            raise EmptySheetError()
        self.sheet = sheet
        self.state = "SELECT_COLUMN"
        logger.info("loaded sheet %s with %d rows", sheet.file_name or "<upload>", len(sheet.rows))

    def switch_mode(self, mode: CleaningMode) -> SessionState:
        """Show ``mode``; its results are kept, not recomputed."""
        self._require_state("SELECT_COLUMN", "ANALYZE")
        check_mode(mode)
        self.active_mode = mode
        self.state = "ANALYZE" if mode in self.columns else "SELECT_COLUMN"
        return self.state

    def assign_column(self, column: str, mode: CleaningMode | None = None) -> list[str]:
        """Assign ``column`` to ``mode`` and rescan every row.

        Returns the ids of rows whose result for the mode changed.
        """
        self._require_state("SELECT_COLUMN", "ANALYZE")
        mode = mode or self.active_mode
        check_mode(mode)
        if not self.dictionary_ready:
            raise DictionaryNotReadyError("dictionaries are still loading")
        assert self.sheet is not None
        if column not in self.sheet.headers:
            raise ColumnNotFoundError(f"unknown column: {column}")

        if not self.rows:
            self._build_rows()
        self.columns[mode] = column
        self.active_mode = mode
        self.state = "ANALYZE"
        return self.rescan(mode)

    def clear_column(self, mode: CleaningMode | None = None) -> None:
        self._require_state("SELECT_COLUMN", "ANALYZE")
        mode = mode or self.active_mode
        self.columns.pop(mode, None)
        if mode == self.active_mode:
            self.state = "SELECT_COLUMN"

    def rescan(self, mode: CleaningMode) -> list[str]:
        """Re-run the matcher over every row for ``mode``.

        A row keeps its manual result while its raw text is unchanged.
        """
        column = self.columns.get(mode)
        if column is None:
            return []
        changed: list[str] = []
        for row in self.rows:
            current = row.result(mode)
            target = row.original_data.get(column) or ""
            if current.manual_override and current.target_text == target:
                continue
            extraction = match(mode, target, self.dictionaries)
            fresh = ModeResult(
                target_text=target,
                extracted_value=extraction.value,
                status=extraction.status,
            )
            if fresh != current:
                row.results[mode] = fresh
                changed.append(row.id)
        logger.debug("rescanned %s over %d rows, %d changed", mode, len(self.rows), len(changed))
        return changed

    def row(self, row_id: str) -> ParsedRow:
        try:
            return self._rows_by_id[row_id]
        except KeyError:
            raise RowNotFoundError(f"unknown row: {row_id}") from None

    def rows_for(self, mode: CleaningMode, row_filter: RowFilter = "ALL") -> list[ParsedRow]:
        if row_filter == "ALL":
            return list(self.rows)
        if row_filter == "MATCHED":
            return [row for row in self.rows if row.result(mode).status == "MATCHED"]
        return [row for row in self.rows if row.result(mode).status in ("UNKNOWN", "NEW")]

    def groups(self, mode: CleaningMode, row_filter: RowFilter = "ALL") -> list[RowGroup]:
        """Rows grouped by raw text, in first-seen order."""
        groups: dict[str, RowGroup] = {}
        for row in self.rows_for(mode, row_filter):
            result = row.result(mode)
            group = groups.get(result.target_text)
            if group is None:
                groups[result.target_text] = RowGroup(
                    target_text=result.target_text,
                    row_ids=[row.id],
                    extracted_value=result.extracted_value,
                    status=result.status,
                    manual_override=result.manual_override,
                )
            else:
                group.row_ids.append(row.id)
        return list(groups.values())

    def stats(self, mode: CleaningMode) -> ModeStats:
        stats = ModeStats(total=len(self.rows))
        for row in self.rows:
            status = row.result(mode).status
            if status == "MATCHED":
                stats.matched += 1
            elif status == "NEW":
                stats.new += 1
            else:
                stats.unknown += 1
        return stats

    def export(self) -> list[dict[str, str]]:
        """Write corrected values back and close the session."""
        self._require_state("ANALYZE")
        cleaned = write_back(self.rows, self.columns)
        self.state = "EXPORT"
        logger.info("exported %d rows (modes: %s)", len(cleaned), ", ".join(self.columns) or "none")
        return cleaned

    def reset(self) -> None:
        """Back to UPLOAD; rows and assignments are dropped, dictionaries kept."""
        self.state = "UPLOAD"
        self.sheet = None
        self.rows = []
        self._rows_by_id = {}
        self.columns = {}
        self.active_mode = "SIZE"

    def notify(self, level: str, code: str, message: str) -> Notice:
        notice = Notice(level=level, code=code, message=message)
        self.notices.append(notice)
        return notice

    def drain_notices(self) -> list[Notice]:
        notices, self.notices = self.notices, []
        return notices

    def require_mutable(self) -> None:
        self._require_state("ANALYZE")

    def _build_rows(self) -> None:
        assert self.sheet is not None
        self.rows = [
            ParsedRow(id=str(idx), original_data=dict(data))
            for idx, data in enumerate(self.sheet.rows)
        ]
        self._rows_by_id = {row.id: row for row in self.rows}

    def _require_state(self, *allowed: SessionState) -> None:
        if self.state not in allowed:
            raise InvalidTransitionError(
                f"not allowed in state {self.state} (expected {' or '.join(allowed)})"
            )


def check_mode(mode: str) -> None:
    if mode not in MODES:
        raise ValueError(f"Unsupported cleaning mode: {mode}")
