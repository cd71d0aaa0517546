"""Per-row results of reconciling one candidate record."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from uuid import UUID

    from .enums import SkipReason


@dataclass(frozen=True, slots=True)
class Inserted:
    row_number: int
    permit: UUID


@dataclass(frozen=True, slots=True)
class Updated:
    """An existing permit was superseded by a new permit identifier."""

    row_number: int
    permit: UUID
    replaced_permit_id: str


@dataclass(frozen=True, slots=True)
class Skipped:
    """No write happened. ``message`` is set only for rows that count as errors."""

    row_number: int
    reason: SkipReason
    message: str | None = None


type RowOutcome = Inserted | Updated | Skipped
