"""Upload ledger: the persisted audit trail of import runs."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from permitsync.domain.errors import StorageError

if TYPE_CHECKING:
    from collections.abc import Callable

    from permitsync.domain.model import UploadRun
    from permitsync.domain.ports import ImportUnitOfWork

log = getLogger(__name__)


class UploadLedger:
    """Persist sealed runs for later audit display."""

    def __init__(self, unit_of_work_factory: Callable[[], ImportUnitOfWork]) -> None:
        self._unit_of_work_factory = unit_of_work_factory

    def seal(self, run: UploadRun) -> UploadRun:
        """Write ``run`` to the store; a failed write is logged, never raised.

        The returned run is always the in-memory one, so the outcome of an
        import never depends on whether its ledger entry could be written.
        """

        try:
            with self._unit_of_work_factory() as uow:
                uow.repositories.upload_runs.add(run)
                uow.commit()
        except StorageError:
            log.exception(
                "Could not write ledger entry for %s (uploaded by %s)",
                run.source_file,
                run.uploader,
            )
        else:
            log.info(
                "Ledger entry %s written: status=%s, inserted=%s, updated=%s, skipped=%s",
                run.id,
                run.status,
                run.inserted,
                run.updated,
                run.skipped,
            )
        return run

    def history(self, limit: int | None = None) -> list[UploadRun]:
        """Return persisted runs, newest first."""

        with self._unit_of_work_factory() as uow:
            return list(uow.repositories.upload_runs.list_recent(limit))
