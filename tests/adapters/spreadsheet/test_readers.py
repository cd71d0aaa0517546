from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

import openpyxl
import pytest

from permitsync.adapters.spreadsheet import (
    EmptySheetError,
    SpreadsheetError,
    UnsupportedFileError,
    read_csv,
    read_rows,
    read_xlsx,
)

if TYPE_CHECKING:
    from pathlib import Path

HEADERS = ["Permit ID", "English Name", "MOI Number", "Expiry Date"]


def _write_workbook(path: Path, rows: list[list[object]], *, title: str = "Permits") -> Path:
    workbook = openpyxl.Workbook()
    sheet = workbook.active
    assert sheet is not None
    sheet.title = title
    for row in rows:
        sheet.append(row)
    workbook.save(path)
    return path


def test_read_xlsx_returns_headers_and_text_rows(tmp_path: Path) -> None:
    path = _write_workbook(
        tmp_path / "permits.xlsx",
        [HEADERS, ["P-1", "Ahmed Ali", 1234567890, datetime(2025, 12, 31)]],
    )

    sheet = read_xlsx(path)

    assert sheet.source_name == "permits.xlsx"
    assert sheet.headers == tuple(HEADERS)
    assert sheet.rows == [("P-1", "Ahmed Ali", "1234567890", "2025-12-31")]


def test_read_xlsx_selects_named_sheet(tmp_path: Path) -> None:
    path = tmp_path / "book.xlsx"
    workbook = openpyxl.Workbook()
    first = workbook.active
    assert first is not None
    first.append(["ignored"])
    second = workbook.create_sheet("Zawil")
    second.append(HEADERS)
    second.append(["P-2", "Sara Khan", "555", "2026-01-01"])
    workbook.save(path)

    sheet = read_xlsx(path, sheet="Zawil")

    assert sheet.rows == [("P-2", "Sara Khan", "555", "2026-01-01")]


def test_read_xlsx_unknown_sheet(tmp_path: Path) -> None:
    path = _write_workbook(tmp_path / "permits.xlsx", [HEADERS, ["P-1"]])

    with pytest.raises(SpreadsheetError, match="no sheet named 'Other'"):
        read_xlsx(path, sheet="Other")


def test_read_xlsx_rejects_corrupt_files(tmp_path: Path) -> None:
    path = tmp_path / "broken.xlsx"
    path.write_bytes(b"not a zip archive")

    with pytest.raises(SpreadsheetError, match="Cannot open workbook"):
        read_xlsx(path)


def test_header_only_sheet_is_empty(tmp_path: Path) -> None:
    path = _write_workbook(tmp_path / "permits.xlsx", [HEADERS])

    with pytest.raises(EmptySheetError):
        read_xlsx(path)


def test_read_csv_handles_byte_order_mark(tmp_path: Path) -> None:
    path = tmp_path / "permits.csv"
    path.write_text(
        "\ufeffPermit ID,English Name,MOI Number,Expiry Date\nP-1, Ahmed Ali ,1234567890,\n",
        encoding="utf-8",
    )

    sheet = read_csv(path)

    assert sheet.headers == tuple(HEADERS)
    assert sheet.rows == [("P-1", "Ahmed Ali", "1234567890", None)]


def test_read_csv_rejects_non_utf8(tmp_path: Path) -> None:
    path = tmp_path / "permits.csv"
    path.write_bytes("Permit ID\n\xe9\n".encode("latin-1"))

    with pytest.raises(SpreadsheetError, match="not UTF-8"):
        read_csv(path)


def test_read_rows_dispatches_on_suffix(tmp_path: Path) -> None:
    xlsx = _write_workbook(tmp_path / "PERMITS.XLSX", [HEADERS, ["P-1", "A", "1", "x"]])
    csv_path = tmp_path / "permits.csv"
    csv_path.write_text("Permit ID\nP-2\n", encoding="utf-8")

    assert read_rows(xlsx).rows == [("P-1", "A", "1", "x")]
    assert read_rows(csv_path).rows == [("P-2",)]


def test_read_rows_rejects_other_files(tmp_path: Path) -> None:
    with pytest.raises(UnsupportedFileError, match=r"\.pdf"):
        read_rows(tmp_path / "permits.pdf")
