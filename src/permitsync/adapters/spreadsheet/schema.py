"""Pydantic models normalising raw spreadsheet rows to text cells."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date, datetime, time
from typing import cast

from pydantic import BaseModel, ConfigDict, field_validator


def cell_to_text(value: object) -> str | None:
    """Render one cell the way a user sees it in the sheet; blanks become ``None``."""

    if value is None:
        return None
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date | time):
        return value.isoformat()
    if isinstance(value, float) and value.is_integer():
        # Excel stores identity numbers as floats
        return str(int(value))
    return str(value).strip() or None


class SpreadsheetBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class RawRowPayload(SpreadsheetBaseModel):
    cells: tuple[str | None, ...] = ()

    @field_validator("cells", mode="before")
    @classmethod
    def _coerce_cells(cls, value: object) -> object:
        if isinstance(value, str) or not isinstance(value, Sequence):
            raise ValueError("a row must be a sequence of cells")
        items = cast(Sequence[object], value)
        return tuple(cell_to_text(item) for item in items)

    def texts(self) -> tuple[str, ...]:
        return tuple(cell or "" for cell in self.cells)
