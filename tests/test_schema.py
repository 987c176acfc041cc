"""Tests for schema models."""

import pytest
from pydantic import ValidationError

from sheet_cleaner import ParsedRow, SheetData
from sheet_cleaner.schema import ModeStats, Notice, RowGroup


def test_sheet_cells_are_text():
    """Cells from spreadsheets may arrive as numbers or None."""
    sheet = SheetData(headers=["Cost", "Note"], rows=[{"Cost": 12.5, "Note": None}])
    assert sheet.rows == [{"Cost": "12.5", "Note": ""}]


def test_sheet_headers_must_be_unique():
    with pytest.raises(ValidationError):
        SheetData(headers=["A", "A"])


def test_row_result_is_created_on_demand():
    """A mode without a result starts UNKNOWN and empty."""
    row = ParsedRow(id="0", original_data={"Size": "2x2"})

    result = row.result("SIZE")

    assert result.status == "UNKNOWN"
    assert result.extracted_value is None
    assert result.manual_override is False
    assert row.results["SIZE"] is result


def test_review_counts_unknown_and_new():
    assert ModeStats(total=6, matched=2, unknown=1, new=3).review == 4


def test_group_count():
    assert RowGroup(target_text="COR", row_ids=["0", "4"]).count == 2


def test_notice_level_is_checked():
    with pytest.raises(ValidationError):
        Notice(level="error", code="x", message="y")
