"""Error taxonomy shared by the import engine and storage adapters."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from permitsync.domain.model import UploadRun


class StorageError(RuntimeError):
    """Raised when a single read or write against the store fails."""


class StorageUnavailableError(StorageError):
    """Raised when the store itself cannot be reached.

    The import engine treats this as fatal for the remainder of a run.
    """


class ImportAbortedError(RuntimeError):
    """Raised after a run was sealed as failed because storage became unavailable."""

    def __init__(self, message: str, *, run: UploadRun) -> None:
        super().__init__(message)
        self.run = run
