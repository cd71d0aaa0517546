"""Read uploaded permit sheets into a header row plus raw data rows."""

from __future__ import annotations

import csv
import zipfile
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Final

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException

from .schema import RawRowPayload

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

log = getLogger(__name__)

EXCEL_SUFFIXES: Final[frozenset[str]] = frozenset({".xlsx", ".xlsm"})
CSV_SUFFIXES: Final[frozenset[str]] = frozenset({".csv"})


class SpreadsheetError(RuntimeError):
    """Raised when an uploaded file cannot be read as a permit sheet."""


class UnsupportedFileError(SpreadsheetError):
    """Raised for files that are neither Excel workbooks nor CSV."""


class EmptySheetError(SpreadsheetError):
    """Raised when a sheet has no data rows below its header."""


@dataclass(frozen=True, slots=True)
class SheetRows:
    source_name: str
    headers: tuple[str, ...]
    rows: list[tuple[str | None, ...]] = field(default_factory=list[tuple[str | None, ...]])


def _to_sheet_rows(source_name: str, raw_rows: Iterable[Iterable[object]]) -> SheetRows:
    payloads = [RawRowPayload(cells=tuple(raw)) for raw in raw_rows]
    if len(payloads) < 2:
        raise EmptySheetError(f"{source_name} has no data rows below the header row")
    header, *data = payloads
    log.debug("Read %s data rows from %s", len(data), source_name)
    return SheetRows(
        source_name=source_name,
        headers=header.texts(),
        rows=[payload.cells for payload in data],
    )


def read_xlsx(path: Path, *, sheet: str | None = None) -> SheetRows:
    """Read the first worksheet (or ``sheet``) of an Excel workbook."""

    try:
        workbook = openpyxl.load_workbook(path, read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as exc:
        raise SpreadsheetError(f"Cannot open workbook {path.name}: {exc}") from exc
    try:
        if sheet is None:
            worksheet = workbook.worksheets[0]
        elif sheet in workbook.sheetnames:
            worksheet = workbook[sheet]
        else:
            raise SpreadsheetError(f"Workbook {path.name} has no sheet named {sheet!r}")
        return _to_sheet_rows(path.name, worksheet.iter_rows(values_only=True))
    finally:
        workbook.close()


def read_csv(path: Path) -> SheetRows:
    """Read a comma-separated export, tolerating a UTF-8 byte order mark."""

    try:
        with path.open(newline="", encoding="utf-8-sig") as handle:
            return _to_sheet_rows(path.name, list(csv.reader(handle)))
    except UnicodeDecodeError as exc:
        raise SpreadsheetError(f"{path.name} is not UTF-8 encoded CSV: {exc}") from exc


def read_rows(path: Path, *, sheet: str | None = None) -> SheetRows:
    """Dispatch on the file suffix to the matching reader."""

    suffix = path.suffix.lower()
    if suffix in EXCEL_SUFFIXES:
        return read_xlsx(path, sheet=sheet)
    if suffix in CSV_SUFFIXES:
        return read_csv(path)
    raise UnsupportedFileError(
        f"Unsupported file type {path.suffix or '(none)'}; expected .xlsx, .xlsm or .csv"
    )

