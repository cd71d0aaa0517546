"""Progress notifications emitted while a batch is reconciled."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ProgressEvent:
    current_row: int
    total_rows: int
    percentage: int
    status_message: str


type ProgressCallback = Callable[[ProgressEvent], None]


def progress_percentage(current_row: int, total_rows: int) -> int:
    if total_rows <= 0:
        return 100
    # half up, in integers
    return (current_row * 200 + total_rows) // (2 * total_rows)


class ProgressReporter:
    """Forward progress to a caller callback without ever failing the run."""

    def __init__(self, callback: ProgressCallback | None, *, total_rows: int) -> None:
        self._callback = callback
        self.total_rows = total_rows

    def report(self, current_row: int, status_message: str) -> ProgressEvent:
        event = ProgressEvent(
            current_row=current_row,
            total_rows=self.total_rows,
            percentage=progress_percentage(current_row, self.total_rows),
            status_message=status_message,
        )
        if self._callback is None:
            return event
        try:
            self._callback(event)
        except Exception:
            log.exception("Progress callback failed at row %s/%s", current_row, self.total_rows)
        return event
