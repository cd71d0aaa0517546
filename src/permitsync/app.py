"""Application orchestration entry points."""

from __future__ import annotations

import csv
from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING, Final

from permitsync.adapters.spreadsheet import read_rows
from permitsync.adapters.sqlalchemy import SqlAlchemyImportUnitOfWork, is_started, startup
from permitsync.config import get_import_config
from permitsync.domain.importing import (
    FIELD_LABELS,
    PermitField,
    ReconciliationEngine,
    RunMetadata,
    UploadLedger,
    build_candidates,
    detect_field_mapping,
)
from permitsync.domain.model import ExpiryPolicy
from permitsync.domain.ports import ImportUnitOfWork

if TYPE_CHECKING:
    from pathlib import Path

    from permitsync.domain.importing import CancellationCheck, CandidateRecord, ProgressCallback
    from permitsync.domain.model import PermitStatus, UploadRun

UnitOfWorkFactory = Callable[[], ImportUnitOfWork]

log = getLogger(__name__)

EXPORT_COLUMNS: Final[tuple[PermitField, ...]] = (
    PermitField.PERMIT_ID,
    PermitField.PERMIT_TYPE,
    PermitField.ISSUED_FOR,
    PermitField.NAME_SECONDARY,
    PermitField.NAME_PRIMARY,
    PermitField.IDENTITY_NUMBER,
    PermitField.DOCUMENT_NUMBER,
    PermitField.NATIONALITY,
    PermitField.PLATE_NUMBER,
    PermitField.ISSUING_LOCATION,
    PermitField.ISSUE_DATE,
    PermitField.EXPIRY_DATE,
)
EXPORT_HEADER: Final[tuple[str, ...]] = (
    *(FIELD_LABELS[column] for column in EXPORT_COLUMNS),
    "Status",
)


class NoCandidatesError(ValueError):
    """Raised when an uploaded file yields no permit rows at all."""


def _unit_of_work_factory(factory: UnitOfWorkFactory | None) -> UnitOfWorkFactory:
    if factory is not None:
        return factory
    if not is_started():
        config = get_import_config()
        startup(expiry_policy=ExpiryPolicy(expiring_soon_days=config.expiring_soon_days))
    return SqlAlchemyImportUnitOfWork


def load_candidates(path: Path, *, sheet: str | None = None) -> list[CandidateRecord]:
    """Read ``path`` and turn its data rows into candidate records."""

    sheet_rows = read_rows(path, sheet=sheet)
    mapping = detect_field_mapping(sheet_rows.headers)
    missing = mapping.missing_mandatory()
    if missing:
        log.warning(
            "%s has no column for: %s",
            sheet_rows.source_name,
            ", ".join(FIELD_LABELS[name] for name in missing),
        )

    candidates = build_candidates(sheet_rows.rows, mapping)
    if not candidates:
        raise NoCandidatesError(f"No permit records found in {sheet_rows.source_name}")
    log.info("Loaded %s candidate rows from %s", len(candidates), sheet_rows.source_name)
    return candidates


def import_permits_file(
    path: Path,
    *,
    uploader: str | None = None,
    progress: ProgressCallback | None = None,
    cancel: CancellationCheck | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    sheet: str | None = None,
) -> UploadRun:
    """Import one uploaded permit sheet and return its sealed upload run."""

    candidates = load_candidates(path, sheet=sheet)
    engine = ReconciliationEngine(_unit_of_work_factory(unit_of_work_factory))
    meta = RunMetadata(
        uploader=uploader or get_import_config().default_uploader,
        source_file=path.name,
    )
    return engine.run(candidates, meta, progress=progress, cancel=cancel)


def upload_history(
    *,
    limit: int | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[UploadRun]:
    return UploadLedger(_unit_of_work_factory(unit_of_work_factory)).history(limit)


def permit_status_summary(
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> dict[PermitStatus, int]:
    """Count stored permits per status."""

    with _unit_of_work_factory(unit_of_work_factory)() as uow:
        return uow.repositories.permits.count_by_status()


def export_permits_csv(
    path: Path,
    *,
    status: PermitStatus | None = None,
    search: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> int:
    """Write stored permits to ``path`` as CSV and return the number of rows written."""

    with _unit_of_work_factory(unit_of_work_factory)() as uow:
        permits = uow.repositories.permits.list_permits(status=status, search=search)

    with path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle)
        writer.writerow(EXPORT_HEADER)
        for permit in permits:
            writer.writerow(
                [*(getattr(permit, column.value) or "" for column in EXPORT_COLUMNS), permit.status]
            )
    log.info("Exported %s permits to %s", len(permits), path)
    return len(permits)
