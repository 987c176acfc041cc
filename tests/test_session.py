"""Tests for the cleaning session state machine and row model."""

import pytest

from sheet_cleaner.exceptions import (
    AliasStoreError,
    ColumnNotFoundError,
    DictionaryNotReadyError,
    EmptySheetError,
    InvalidTransitionError,
    RowNotFoundError,
)
from sheet_cleaner.schema import SheetData
from sheet_cleaner.session import CleaningSession


def _ready(store, sheet) -> CleaningSession:
    session = CleaningSession(store)
    session.load_dictionaries()
    session.load_sheet(sheet)
    return session


def test_empty_sheet_is_rejected(store):
    session = CleaningSession(store)

    with pytest.raises(EmptySheetError, match="empty file"):
        session.load_sheet(SheetData(headers=["Description"], rows=[]))

    assert session.state == "UPLOAD"


def test_column_assignment_waits_for_dictionaries(store, sheet):
    session = CleaningSession(store)
    session.load_sheet(sheet)

    with pytest.raises(DictionaryNotReadyError):
        session.assign_column("Description", "SIZE")

    session.load_dictionaries()
    session.assign_column("Description", "SIZE")
    assert session.state == "ANALYZE"


def test_dictionary_failure_starts_empty_with_warning(mocker, sheet):
    store = mocker.MagicMock()
    store.load_size_stats.side_effect = AliasStoreError("connection refused")
    session = CleaningSession(store)

    session.load_dictionaries()
    session.load_sheet(sheet)
    session.assign_column("Description", "SIZE")

    assert session.dictionary_ready
    assert len(session.dictionaries.size) == 0
    assert [n.code for n in session.notices] == ["dictionary_load_failed"]
    assert session.row("0").result("SIZE").status == "NEW"


def test_assign_column_scans_every_row(store, sheet):
    session = _ready(store, sheet)

    session.assign_column("Description", "SIZE")

    results = [row.result("SIZE") for row in session.rows]
    assert [r.target_text for r in results][:2] == ["12 x 24", "M122 Tile Sample"]
    assert (results[0].extracted_value, results[0].status) == ('12"x24"', "MATCHED")
    assert (results[1].extracted_value, results[1].status) == ("M122 Tile Sample", "NEW")
    assert (results[2].extracted_value, results[2].status) == (None, "UNKNOWN")
    assert [row.id for row in session.rows] == ["0", "1", "2", "3", "4"]


def test_unknown_column_is_rejected(store, sheet):
    session = _ready(store, sheet)

    with pytest.raises(ColumnNotFoundError):
        session.assign_column("Colour", "SIZE")


def test_modes_keep_independent_assignments(store, sheet):
    session = _ready(store, sheet)
    session.assign_column("Description", "SIZE")
    session.assign_column("Product", "NAME")

    assert session.columns == {"SIZE": "Description", "NAME": "Product"}
    assert session.row("0").result("NAME").extracted_value == "Coretec Pro Oak"

    assert session.switch_mode("SIZE") == "ANALYZE"
    assert session.switch_mode("PRICE") == "SELECT_COLUMN"
    assert session.active_mode == "PRICE"


def test_switch_mode_does_not_recompute(store, sheet):
    session = _ready(store, sheet)
    session.assign_column("Description", "SIZE")
    session.row("1").result("SIZE").extracted_value = "kept"

    session.switch_mode("NAME")
    session.switch_mode("SIZE")

    assert session.row("1").result("SIZE").extracted_value == "kept"


def test_reselecting_column_keeps_manual_override(store, sheet):
    session = _ready(store, sheet)
    session.assign_column("Description", "SIZE")
    result = session.row("0").result("SIZE")
    result.extracted_value = "Hand Picked"
    result.status = "NEW"
    result.manual_override = True

    changed = session.assign_column("Description", "SIZE")

    assert "0" not in changed
    assert session.row("0").result("SIZE").extracted_value == "Hand Picked"


def test_assigning_a_different_column_replaces_manual_override(store, sheet):
    session = _ready(store, sheet)
    session.assign_column("Description", "SIZE")
    result = session.row("0").result("SIZE")
    result.extracted_value = "Hand Picked"
    result.manual_override = True
    result.selection_source = "12"

    session.assign_column("SKU", "SIZE")

    fresh = session.row("0").result("SIZE")
    assert fresh.target_text == "A1"
    assert fresh.manual_override is False
    assert fresh.selection_source is None


def test_clear_column_returns_to_select_column(store, sheet):
    session = _ready(store, sheet)
    session.assign_column("Description", "SIZE")

    session.clear_column("SIZE")

    assert session.state == "SELECT_COLUMN"
    assert "SIZE" not in session.columns


def test_stats_and_filters(store, sheet):
    session = _ready(store, sheet)
    session.assign_column("Description", "SIZE")

    stats = session.stats("SIZE")

    assert (stats.total, stats.matched, stats.new, stats.unknown) == (5, 1, 3, 1)
    assert stats.review == 4
    assert [row.id for row in session.rows_for("SIZE", "MATCHED")] == ["0"]
    assert [row.id for row in session.rows_for("SIZE", "REVIEW")] == ["1", "2", "3", "4"]


def test_groups_by_raw_text(store, sheet):
    session = _ready(store, sheet)
    session.assign_column("Product", "NAME")

    groups = session.groups("NAME")

    assert groups[0].target_text == "COR-PRO-OAK-5IN"
    assert groups[0].row_ids == ["0", "2"]
    assert groups[0].count == 2
    assert len(groups) == 4


def test_export_moves_to_terminal_state(store, sheet):
    session = _ready(store, sheet)
    session.assign_column("Description", "SIZE")

    rows = session.export()

    assert session.state == "EXPORT"
    assert rows[0]["Description"] == '12"x24"'
    with pytest.raises(InvalidTransitionError):
        session.assign_column("Description", "SIZE")
    with pytest.raises(InvalidTransitionError):
        session.export()


def test_reset_discards_rows_but_keeps_dictionaries(store, sheet):
    session = _ready(store, sheet)
    session.assign_column("Description", "SIZE")
    dictionaries = session.dictionaries

    session.reset()

    assert session.state == "UPLOAD"
    assert session.rows == []
    assert session.columns == {}
    assert session.dictionaries is dictionaries
    with pytest.raises(RowNotFoundError):
        session.row("0")

    session.load_sheet(sheet)
    assert session.state == "SELECT_COLUMN"


def test_price_scan_survives_long_digit_runs(store):
    session = CleaningSession(store)
    session.load_dictionaries()
    session.load_sheet(SheetData(headers=["Cost"], rows=[{"Cost": "1" * 30}, {"Cost": "$2"}]))

    session.assign_column("Cost", "PRICE")

    assert session.row("0").result("PRICE").status == "UNKNOWN"
    assert session.row("1").result("PRICE").extracted_value == "2.00"
