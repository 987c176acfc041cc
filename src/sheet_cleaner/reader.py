"""Load CSV and Excel files into SheetData."""

from __future__ import annotations

import csv
from pathlib import Path

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from sheet_cleaner.exceptions import EmptySheetError, SheetReadError
from sheet_cleaner.schema import SheetData

SheetInput = str | Path


def read_sheet(path: SheetInput) -> SheetData:
    """Read the first sheet of ``path``; the first row holds the headers.

    Raises:
        SheetReadError: If the file is missing or not a supported format.
        EmptySheetError: If the file has no data rows.
    """
    path = Path(path)
    if not path.exists():
        raise SheetReadError(f"File not found: {path}")

    suffix = path.suffix.lower()
    if suffix in {".csv", ".txt"}:
        headers, rows = _read_csv(path)
    elif suffix in {".xlsx", ".xlsm"}:
        headers, rows = _read_xlsx(path)
    else:
        raise SheetReadError(f"Unsupported file type: {suffix or path.name}")

    if not rows:
        raise EmptySheetError()
    return SheetData(file_name=path.name, headers=headers, rows=rows)


def write_csv(path: SheetInput, headers: list[str], rows: list[dict[str, str]]) -> None:
    with Path(path).open("w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=headers, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(rows)


def _read_csv(path: Path) -> tuple[list[str], list[dict[str, str]]]:
    try:
        with path.open("r", encoding="utf-8-sig", newline="") as f:
            reader = csv.reader(f)
            records = [record for record in reader if any(cell.strip() for cell in record)]
    except (OSError, UnicodeDecodeError, csv.Error) as e:
        raise SheetReadError(f"Failed to read CSV: {e}") from e
    return _to_rows(records)


def _read_xlsx(path: Path) -> tuple[list[str], list[dict[str, str]]]:
    try:
        workbook = load_workbook(path, read_only=True, data_only=True)
    except (OSError, InvalidFileException, KeyError, ValueError) as e:
        raise SheetReadError(f"Failed to open workbook: {e}") from e
    try:
        sheet = workbook.worksheets[0]
        records = []
        for values in sheet.iter_rows(values_only=True):
            record = ["" if value is None else str(value) for value in values]
            if any(cell.strip() for cell in record):
                records.append(record)
    finally:
        workbook.close()
    return _to_rows(records)


def _to_rows(records: list[list[str]]) -> tuple[list[str], list[dict[str, str]]]:
    if not records:
        return [], []

    headers: list[str] = []
    used: set[str] = set()
    for idx, raw in enumerate(records[0]):
        base = raw.strip() or f"Column {idx + 1}"
        name, n = base, 1
        while name in used:
            n += 1
            name = f"{base} ({n})"
        used.add(name)
        headers.append(name)

    rows = []
    for record in records[1:]:
        padded = record + [""] * (len(headers) - len(record))
        rows.append({header: padded[i] for i, header in enumerate(headers)})
    return headers, rows
