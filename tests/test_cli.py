"""Tests for the command-line interface."""

import csv
import json

import pytest

from sheet_cleaner.cli import main


@pytest.fixture(autouse=True)
def _no_store(monkeypatch):
    monkeypatch.delenv("ALIAS_STORE_URL", raising=False)


@pytest.fixture
def vendor_csv(tmp_path):
    path = tmp_path / "vendor.csv"
    path.write_text("SKU,Description,Cost\nA1,12 x 24,$3.499\nA2,,call\n", encoding="utf-8")
    return path


def test_json_summary_and_output(vendor_csv, tmp_path, capsys):
    output = tmp_path / "clean.csv"

    code = main([str(vendor_csv), "--size-column", "Description", "--price-column", "Cost",
                 "--output", str(output), "--json"])

    assert code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["rows"] == 2
    assert payload["columns"] == {"SIZE": "Description", "PRICE": "Cost"}
    assert payload["modes"]["SIZE"] == {"total": 2, "matched": 0, "unknown": 1, "new": 1, "review": 2}
    assert payload["modes"]["PRICE"]["matched"] == 1

    with output.open(encoding="utf-8", newline="") as f:
        rows = list(csv.DictReader(f))
    assert rows[0] == {"SKU": "A1", "Description": '12"x24"', "Cost": "3.50"}
    assert rows[1] == {"SKU": "A2", "Description": "", "Cost": "call"}


def test_formatted_summary(vendor_csv, capsys):
    assert main([str(vendor_csv), "--price-column", "Cost"]) == 0

    out = capsys.readouterr().out
    assert "vendor.csv" in out
    assert "1/2 matched" in out


def test_unknown_column_is_an_error(vendor_csv, capsys):
    assert main([str(vendor_csv), "--size-column", "Colour"]) == 1
    assert "Error:" in capsys.readouterr().err


def test_missing_file_is_an_error(tmp_path, capsys):
    assert main([str(tmp_path / "nope.csv"), "--size-column", "Description"]) == 1
    assert "File not found" in capsys.readouterr().err


def test_a_column_is_required(vendor_csv):
    with pytest.raises(SystemExit):
        main([str(vendor_csv)])
