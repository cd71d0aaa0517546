from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest

from permitsync.adapters.sqlalchemy import (
    SqlAlchemyPermitRepository,
    SqlAlchemyPersonRepository,
    SqlAlchemyUploadRunRepository,
)
from permitsync.domain.errors import StorageError
from permitsync.domain.model import (
    ExpiryPolicy,
    Permit,
    PermitStatus,
    Person,
    RunStatus,
    UploadRun,
)
from tests.helpers.permits import make_permit_fields

if TYPE_CHECKING:
    from sqlalchemy.orm import Session


def _person(identity_number: str = "1234567890") -> Person:
    return Person(identity_number=identity_number, name_primary="Ahmed Ali")


def _permit(person: Person, permit_id: str = "P-100", **overrides: str) -> Permit:
    return Permit.issue(
        make_permit_fields(permit_id, **overrides),
        identity_number=person.identity_number,
        person_id=person.id,
    )


def test_person_round_trip(sqlite_session: Session) -> None:
    repo = SqlAlchemyPersonRepository(sqlite_session)
    person = _person()
    repo.add(person)
    sqlite_session.commit()
    sqlite_session.expunge_all()

    loaded = repo.get_by_identity_number("1234567890")

    assert loaded is not None
    assert loaded.id == person.id
    assert loaded.created_at.tzinfo is not None
    assert repo.get_by_identity_number("unknown") is None


def test_permit_add_derives_status(sqlite_session: Session, fixed_policy: ExpiryPolicy) -> None:
    person = _person()
    SqlAlchemyPersonRepository(sqlite_session).add(person)
    repo = SqlAlchemyPermitRepository(sqlite_session, policy=fixed_policy)
    permit = _permit(person, expiry_date="2025-01-15")

    repo.add(permit)
    sqlite_session.commit()

    assert permit.status == PermitStatus.EXPIRING_SOON
    found = repo.find_by_identity_and_permit_id("1234567890", "P-100")
    assert found is permit
    assert repo.find_by_identity_and_permit_id("1234567890", "P-999") is None
    assert repo.find_by_identity_number("1234567890") is permit


def test_update_recomputes_status_unless_done(
    sqlite_session: Session,
    fixed_policy: ExpiryPolicy,
) -> None:
    person = _person()
    SqlAlchemyPersonRepository(sqlite_session).add(person)
    repo = SqlAlchemyPermitRepository(sqlite_session, policy=fixed_policy)
    permit = _permit(person, expiry_date="2026-01-01")
    repo.add(permit)
    sqlite_session.commit()
    assert permit.status == PermitStatus.VALID

    permit.supersede(make_permit_fields("P-200", expiry_date="2024-12-01"))
    repo.update(permit)
    sqlite_session.commit()
    assert permit.status == PermitStatus.EXPIRED

    permit.status = PermitStatus.DONE
    permit.supersede(make_permit_fields("P-300", expiry_date="2026-01-01"))
    repo.update(permit)
    sqlite_session.commit()
    sqlite_session.expunge_all()

    reloaded = repo.find_by_identity_number("1234567890")
    assert reloaded is not None
    assert reloaded.permit_id == "P-300"
    assert reloaded.status == PermitStatus.DONE


def test_second_permit_for_identity_is_rejected(
    sqlite_session: Session,
    fixed_policy: ExpiryPolicy,
) -> None:
    person = _person()
    SqlAlchemyPersonRepository(sqlite_session).add(person)
    repo = SqlAlchemyPermitRepository(sqlite_session, policy=fixed_policy)
    repo.add(_permit(person, "P-1"))
    sqlite_session.commit()

    with pytest.raises(StorageError, match="store permit P-2"):
        repo.add(_permit(person, "P-2"))
    sqlite_session.rollback()


def test_list_permits_filters_by_status_and_search(
    sqlite_session: Session,
    fixed_policy: ExpiryPolicy,
) -> None:
    people = SqlAlchemyPersonRepository(sqlite_session)
    repo = SqlAlchemyPermitRepository(sqlite_session, policy=fixed_policy)
    for identity, permit_id, expiry in [
        ("1", "P-1", "2026-01-01"),
        ("2", "P-2", "2024-01-01"),
        ("3", "X-3", "2026-01-01"),
    ]:
        person = _person(identity)
        people.add(person)
        repo.add(_permit(person, permit_id, expiry_date=expiry))
    sqlite_session.commit()

    valid = repo.list_permits(status=PermitStatus.VALID)
    searched = repo.list_permits(search="p-")

    assert sorted(permit.permit_id for permit in valid) == ["P-1", "X-3"]
    assert sorted(permit.permit_id for permit in searched) == ["P-1", "P-2"]
    assert len(repo.list_permits()) == 3


def test_count_by_status_reports_every_status(
    sqlite_session: Session,
    fixed_policy: ExpiryPolicy,
) -> None:
    person = _person()
    SqlAlchemyPersonRepository(sqlite_session).add(person)
    repo = SqlAlchemyPermitRepository(sqlite_session, policy=fixed_policy)
    repo.add(_permit(person, expiry_date="2024-01-01"))
    sqlite_session.commit()

    assert repo.count_by_status() == {
        PermitStatus.VALID: 0,
        PermitStatus.EXPIRING_SOON: 0,
        PermitStatus.EXPIRED: 1,
        PermitStatus.DONE: 0,
    }


def test_upload_runs_round_trip_newest_first(sqlite_session: Session) -> None:
    repo = SqlAlchemyUploadRunRepository(sqlite_session)
    older = UploadRun(
        uploader="tester",
        source_file="old.xlsx",
        total=2,
        started_at=datetime(2025, 1, 1, 8, tzinfo=UTC),
    )
    newer = UploadRun(
        uploader="tester",
        source_file="new.xlsx",
        total=1,
        started_at=datetime(2025, 1, 2, 8, tzinfo=UTC),
        skipped=1,
        errors=["row 1: Expiry Date is required"],
    )
    older.seal(RunStatus.COMPLETED)
    newer.seal(RunStatus.FAILED, fatal_error="database unavailable")
    repo.add(older)
    repo.add(newer)
    sqlite_session.commit()
    sqlite_session.expunge_all()

    runs = repo.list_recent()

    assert [run.source_file for run in runs] == ["new.xlsx", "old.xlsx"]
    assert runs[0].errors == ["row 1: Expiry Date is required"]
    assert runs[0].status == RunStatus.FAILED
    assert runs[0].fatal_error == "database unavailable"
    assert runs[0].started_at == datetime(2025, 1, 2, 8, tzinfo=UTC)
    assert [run.source_file for run in repo.list_recent(1)] == ["new.xlsx"]
