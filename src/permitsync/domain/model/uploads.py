"""Audit record of one bulk-import run."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .entity import Entity, utcnow
from .enums import RunStatus, SkipReason
from .outcomes import Inserted, Skipped, Updated

if TYPE_CHECKING:
    from datetime import datetime

    from .outcomes import RowOutcome


@dataclass(frozen=True, slots=True)
class UploadResult:
    """Summary handed back to whoever submitted the batch."""

    inserted: int
    updated: int
    skipped: int
    errors: tuple[str, ...]


@dataclass(eq=False, kw_only=True)
class UploadRun(Entity):
    """Counts and row errors for one invocation of the import engine.

    ``total`` is the number of candidates submitted. Once a run completes,
    ``inserted + updated + skipped == total``; failed and cancelled runs only
    count the rows that were actually handled.
    """

    uploader: str
    source_file: str
    total: int
    started_at: datetime = field(default_factory=utcnow)
    finished_at: datetime | None = None

    inserted: int = 0
    updated: int = 0
    skipped: int = 0
    duplicates: int = 0
    errors: list[str] = field(default_factory=list[str])

    status: RunStatus = RunStatus.PROCESSING
    fatal_error: str | None = None

    @property
    def processed(self) -> int:
        return self.inserted + self.updated + self.skipped

    @property
    def is_sealed(self) -> bool:
        return self.status != RunStatus.PROCESSING

    def record(self, outcome: RowOutcome) -> None:
        if self.is_sealed:
            raise ValueError("Cannot record outcomes on a sealed upload run")
        if isinstance(outcome, Inserted):
            self.inserted += 1
        elif isinstance(outcome, Updated):
            self.updated += 1
        elif isinstance(outcome, Skipped):
            self.skipped += 1
            if outcome.reason == SkipReason.DUPLICATE:
                self.duplicates += 1
            if outcome.message:
                self.errors.append(outcome.message)
        else:
            raise TypeError(f"Unsupported row outcome: {type(outcome).__name__}")

    def seal(
        self,
        status: RunStatus,
        *,
        now: datetime | None = None,
        fatal_error: str | None = None,
    ) -> None:
        if status == RunStatus.PROCESSING:
            raise ValueError("A run cannot be sealed as processing")
        if self.is_sealed:
            raise ValueError(f"Upload run already sealed as {self.status}")
        self.status = status
        self.fatal_error = fatal_error
        self.finished_at = now or utcnow()

    def result(self) -> UploadResult:
        return UploadResult(
            inserted=self.inserted,
            updated=self.updated,
            skipped=self.skipped,
            errors=tuple(self.errors),
        )
