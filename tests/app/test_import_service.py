from __future__ import annotations

import csv
import logging
from typing import TYPE_CHECKING

import pytest

from permitsync import app
from permitsync.adapters.sqlalchemy import shutdown
from permitsync.domain.model import PermitStatus, RunStatus
from tests.helpers.permits import FakePermitStore, make_permit_fields

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

HEADER = (
    "Permit Number,Permit Type,Issued For,Arabic Name,English Name,MOI Number,"
    "Passport,Nationality,Plate,Port Name,Issue Date,Expiry Date"
)


def _write_upload(path: Path, *rows: str) -> Path:
    path.write_text("\n".join([HEADER, *rows]) + "\n", encoding="utf-8")
    return path


def _row(permit_id: str, identity: str, *, expiry: str = "2025-12-31") -> str:
    return (
        f"{permit_id},Port Access,Contractor,,Ahmed Ali,{identity},"
        f"A123,SA,,Jeddah Port,2025-01-01,{expiry}"
    )


def test_import_permits_file_reconciles_rows(
    tmp_path: Path,
    fake_store: FakePermitStore,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.delenv("PERMITSYNC_UPLOADER", raising=False)
    upload = _write_upload(
        tmp_path / "permits.csv",
        _row("P-1", "1"),
        ",,,,,,,,,,,",
        _row("P-3", "3", expiry=""),
    )

    run = app.import_permits_file(upload, unit_of_work_factory=fake_store.unit_of_work)

    assert run.status == RunStatus.COMPLETED
    assert run.uploader == "Excel Upload"
    assert run.source_file == "permits.csv"
    assert (run.total, run.inserted, run.skipped) == (2, 1, 1)
    assert run.errors == ["row 3: Expiry Date is required"]
    assert fake_store.permits["1"].document_number == "A123"


def test_import_uses_explicit_uploader(tmp_path: Path, fake_store: FakePermitStore) -> None:
    upload = _write_upload(tmp_path / "permits.csv", _row("P-1", "1"))

    run = app.import_permits_file(
        upload,
        uploader="Gate Office",
        unit_of_work_factory=fake_store.unit_of_work,
    )

    assert run.uploader == "Gate Office"
    assert fake_store.upload_runs[0].uploader == "Gate Office"


def test_file_without_permit_rows_is_rejected(tmp_path: Path, fake_store: FakePermitStore) -> None:
    upload = _write_upload(tmp_path / "permits.csv", ",,,,,,,,,,,")

    with pytest.raises(app.NoCandidatesError, match="permits.csv"):
        app.import_permits_file(upload, unit_of_work_factory=fake_store.unit_of_work)

    assert fake_store.upload_runs == []


def test_missing_columns_are_logged(
    tmp_path: Path,
    caplog: pytest.LogCaptureFixture,
) -> None:
    upload = tmp_path / "partial.csv"
    upload.write_text("Permit ID,Name\nP-1,Ahmed Ali\n", encoding="utf-8")

    with caplog.at_level(logging.WARNING):
        candidates = app.load_candidates(upload)

    assert "partial.csv has no column for: Identity Number, Issue Date" in caplog.text
    assert not candidates[0].is_valid


def test_status_summary_and_history(fake_store: FakePermitStore, tmp_path: Path) -> None:
    fake_store.seed_permit(make_permit_fields("P-1", expiry_date="2024-01-01"), identity_number="1")
    upload = _write_upload(tmp_path / "permits.csv", _row("P-2", "2"))
    app.import_permits_file(upload, unit_of_work_factory=fake_store.unit_of_work)

    summary = app.permit_status_summary(unit_of_work_factory=fake_store.unit_of_work)
    history = app.upload_history(limit=5, unit_of_work_factory=fake_store.unit_of_work)

    assert summary[PermitStatus.EXPIRED] == 1
    assert summary[PermitStatus.VALID] == 1
    assert [run.source_file for run in history] == ["permits.csv"]


def test_export_permits_csv(fake_store: FakePermitStore, tmp_path: Path) -> None:
    fake_store.seed_permit(
        make_permit_fields("P-1", name_secondary="أحمد علي", expiry_date="2025-01-20"),
        identity_number="1234567890",
    )
    destination = tmp_path / "export.csv"

    written = app.export_permits_csv(destination, unit_of_work_factory=fake_store.unit_of_work)

    with destination.open(newline="", encoding="utf-8") as handle:
        rows = list(csv.reader(handle))
    assert written == 1
    assert rows[0] == [
        "Permit ID",
        "Permit Type",
        "Issued For",
        "Secondary Name",
        "Holder Name",
        "Identity Number",
        "Document Number",
        "Nationality",
        "Plate Number",
        "Issuing Location",
        "Issue Date",
        "Expiry Date",
        "Status",
    ]
    assert rows[1] == [
        "P-1",
        "Port Access",
        "Contractor",
        "أحمد علي",
        "Ahmed Ali",
        "1234567890",
        "",
        "",
        "",
        "Jeddah Port",
        "2025-01-01",
        "2025-01-20",
        "expiring_soon",
    ]


@pytest.fixture
def file_database(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    database = tmp_path / "permitsync.db"
    monkeypatch.setenv("DATABASE_URI", f"sqlite+pysqlite:///{database}")
    shutdown()
    try:
        yield database
    finally:
        shutdown()


def test_default_storage_is_started_on_demand(file_database: Path, tmp_path: Path) -> None:
    upload = _write_upload(tmp_path / "permits.csv", _row("P-1", "1"), _row("P-2", "2"))

    first = app.import_permits_file(upload)
    second = app.import_permits_file(upload)

    assert file_database.exists()
    assert first.inserted == 2
    assert second.duplicates == 2
    assert len(app.upload_history()) == 2
