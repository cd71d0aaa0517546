"""Spreadsheet readers for permit uploads."""

from __future__ import annotations

from .readers import (
    CSV_SUFFIXES,
    EXCEL_SUFFIXES,
    EmptySheetError,
    SheetRows,
    SpreadsheetError,
    UnsupportedFileError,
    read_csv,
    read_rows,
    read_xlsx,
)
from .schema import RawRowPayload, cell_to_text

__all__ = [
    "CSV_SUFFIXES",
    "EXCEL_SUFFIXES",
    "EmptySheetError",
    "RawRowPayload",
    "SheetRows",
    "SpreadsheetError",
    "UnsupportedFileError",
    "cell_to_text",
    "read_csv",
    "read_rows",
    "read_xlsx",
]
