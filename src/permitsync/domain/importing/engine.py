"""Reconciliation engine: apply a batch of candidate records to the store."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from permitsync.domain.errors import ImportAbortedError, StorageError, StorageUnavailableError
from permitsync.domain.model import (
    Inserted,
    Permit,
    RunStatus,
    Skipped,
    SkipReason,
    Updated,
    UploadRun,
    utcnow,
)

from .ledger import UploadLedger
from .progress import ProgressReporter
from .resolver import EmployeeResolver

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from datetime import datetime

    from permitsync.domain.model import RowOutcome
    from permitsync.domain.ports import ImportUnitOfWork

    from .candidates import CandidateRecord
    from .progress import ProgressCallback

log = getLogger(__name__)

type CancellationCheck = Callable[[], bool]


@dataclass(frozen=True, slots=True)
class RunMetadata:
    uploader: str
    source_file: str


def _status_message(candidate: CandidateRecord) -> str:
    name = candidate.display_name
    if name:
        return f"Processing {name}..."
    return f"Processing row {candidate.row_number}..."


class ReconciliationEngine:
    """Process candidate records one by one, each row in its own transaction.

    For every valid record the engine decides between skip (exact duplicate),
    supersede (same identity number, new permit id) and insert. Per-row storage
    failures are recorded against the row; an unreachable store aborts the run.
    """

    def __init__(
        self,
        unit_of_work_factory: Callable[[], ImportUnitOfWork],
        *,
        ledger: UploadLedger | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._unit_of_work_factory = unit_of_work_factory
        self._ledger = ledger or UploadLedger(unit_of_work_factory)
        self._clock = clock

    def run(
        self,
        candidates: Iterable[CandidateRecord],
        meta: RunMetadata,
        *,
        progress: ProgressCallback | None = None,
        cancel: CancellationCheck | None = None,
    ) -> UploadRun:
        batch = list(candidates)
        run = UploadRun(
            uploader=meta.uploader,
            source_file=meta.source_file,
            total=len(batch),
            started_at=self._clock(),
        )
        reporter = ProgressReporter(progress, total_rows=len(batch))
        log.info(
            "Starting import of %s rows from %s (uploader: %s)",
            run.total,
            run.source_file,
            run.uploader,
        )

        status = RunStatus.COMPLETED
        fatal: StorageUnavailableError | None = None
        with self._unit_of_work_factory() as uow:
            resolver = EmployeeResolver(uow.repositories.persons, clock=self._clock)
            for position, candidate in enumerate(batch, start=1):
                if cancel is not None and cancel():
                    log.info("Import of %s cancelled before row %s", run.source_file, position)
                    status = RunStatus.CANCELLED
                    break
                try:
                    outcome = self.process_candidate(candidate, uow, resolver)
                except StorageUnavailableError as exc:
                    fatal = exc
                    break
                run.record(outcome)
                reporter.report(position, _status_message(candidate))

        if fatal is not None:
            run.seal(RunStatus.FAILED, now=self._clock(), fatal_error=str(fatal))
            log.error(
                "Import of %s aborted after %s of %s rows: %s",
                run.source_file,
                run.processed,
                run.total,
                fatal,
            )
            self._ledger.seal(run)
            raise ImportAbortedError(
                f"Import of {run.source_file} aborted: storage unavailable", run=run
            ) from fatal

        run.seal(status, now=self._clock())
        log.info(
            "Import of %s %s: %s inserted, %s updated, %s skipped (%s duplicates)",
            run.source_file,
            run.status,
            run.inserted,
            run.updated,
            run.skipped,
            run.duplicates,
        )
        return self._ledger.seal(run)

    def process_candidate(
        self,
        candidate: CandidateRecord,
        uow: ImportUnitOfWork,
        resolver: EmployeeResolver,
    ) -> RowOutcome:
        """Reconcile a single candidate and commit its row transaction.

        Raises ``StorageUnavailableError`` after rolling back; any other
        storage failure becomes a ``Skipped`` outcome.
        """

        if not candidate.is_valid:
            return Skipped(
                candidate.row_number,
                SkipReason.VALIDATION,
                f"row {candidate.row_number}: {', '.join(candidate.errors)}",
            )

        try:
            with uow.serialized(candidate.identity_number):
                outcome = self._reconcile(candidate, uow, resolver)
                uow.commit()
        except StorageUnavailableError:
            _rollback_quietly(uow)
            raise
        except StorageError as exc:
            _rollback_quietly(uow)
            log.warning("Row %s could not be stored: %s", candidate.row_number, exc)
            return Skipped(
                candidate.row_number,
                SkipReason.STORAGE_ERROR,
                f"row {candidate.row_number}: {exc}",
            )
        return outcome

    def _reconcile(
        self,
        candidate: CandidateRecord,
        uow: ImportUnitOfWork,
        resolver: EmployeeResolver,
    ) -> RowOutcome:
        permits = uow.repositories.permits
        identity_number = candidate.identity_number

        if permits.find_by_identity_and_permit_id(identity_number, candidate.permit_id) is not None:
            log.debug("Row %s duplicates an existing permit", candidate.row_number)
            return Skipped(candidate.row_number, SkipReason.DUPLICATE)

        existing = permits.find_by_identity_number(identity_number)
        if existing is not None:
            replaced = existing.supersede(candidate.permit_fields(), now=self._clock())
            permits.update(existing)
            log.debug(
                "Row %s superseded permit %s with %s",
                candidate.row_number,
                replaced,
                candidate.permit_id,
            )
            return Updated(candidate.row_number, existing.id, replaced)

        person = resolver.resolve(identity_number, candidate.person_attributes())
        permit = Permit.issue(
            candidate.permit_fields(),
            identity_number=identity_number,
            person_id=person.id,
            now=self._clock(),
        )
        permits.add(permit)
        return Inserted(candidate.row_number, permit.id)


def _rollback_quietly(uow: ImportUnitOfWork) -> None:
    # The failure that triggered the rollback is the one reported.
    try:
        uow.rollback()
    except StorageError:
        log.debug("Rollback after a storage failure failed as well", exc_info=True)
