"""Tests for reading CSV and Excel files."""

import pytest
from openpyxl import Workbook

from sheet_cleaner.exceptions import EmptySheetError, SheetReadError
from sheet_cleaner.reader import read_sheet, write_csv


def test_reads_csv(tmp_path):
    path = tmp_path / "vendor.csv"
    path.write_text("SKU,Description,Cost\nA1,12 x 24,$3\n,,\nA2,M122\n", encoding="utf-8")

    sheet = read_sheet(path)

    assert sheet.file_name == "vendor.csv"
    assert sheet.headers == ["SKU", "Description", "Cost"]
    assert sheet.rows == [
        {"SKU": "A1", "Description": "12 x 24", "Cost": "$3"},
        {"SKU": "A2", "Description": "M122", "Cost": ""},
    ]


def test_blank_and_duplicate_headers_are_named(tmp_path):
    path = tmp_path / "vendor.csv"
    path.write_text("Size,,Size\n1,2,3\n", encoding="utf-8")

    sheet = read_sheet(path)

    assert sheet.headers == ["Size", "Column 2", "Size (2)"]


@pytest.mark.parametrize(
    ("header_line", "expected"),
    [
        ("A,A,A (2)", ["A", "A (2)", "A (2) (2)"]),
        ("A (2),A,A", ["A (2)", "A", "A (3)"]),
        ("Column 2,,", ["Column 2", "Column 2 (2)", "Column 3"]),
    ],
)
def test_generated_header_names_never_collide(tmp_path, header_line, expected):
    path = tmp_path / "vendor.csv"
    path.write_text(f"{header_line}\n1,2,3\n", encoding="utf-8")

    sheet = read_sheet(path)

    assert sheet.headers == expected
    assert sheet.rows == [dict(zip(expected, ["1", "2", "3"]))]


def test_reads_first_worksheet_of_xlsx(tmp_path):
    workbook = Workbook()
    worksheet = workbook.active
    worksheet.append(["SKU", "Cost"])
    worksheet.append(["A1", 12.5])
    worksheet.append(["A2", None])
    path = tmp_path / "vendor.xlsx"
    workbook.save(path)

    sheet = read_sheet(path)

    assert sheet.headers == ["SKU", "Cost"]
    assert sheet.rows == [{"SKU": "A1", "Cost": "12.5"}, {"SKU": "A2", "Cost": ""}]


def test_header_only_file_is_empty(tmp_path):
    path = tmp_path / "empty.csv"
    path.write_text("SKU,Description\n", encoding="utf-8")

    with pytest.raises(EmptySheetError):
        read_sheet(path)


def test_missing_and_unsupported_files(tmp_path):
    with pytest.raises(SheetReadError):
        read_sheet(tmp_path / "missing.csv")

    path = tmp_path / "vendor.pdf"
    path.write_bytes(b"%PDF")
    with pytest.raises(SheetReadError):
        read_sheet(path)


def test_write_csv(tmp_path):
    path = tmp_path / "out.csv"

    write_csv(path, ["SKU", "Size"], [{"SKU": "A1", "Size": '2"x2"'}])

    assert path.read_text(encoding="utf-8").splitlines() == ["SKU,Size", 'A1,"2""x2"""']
