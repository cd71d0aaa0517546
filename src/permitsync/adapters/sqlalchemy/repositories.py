"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING, cast

from sqlalchemy import func, or_, select

from permitsync.adapters.sqlalchemy.errors import storage_errors
from permitsync.adapters.sqlalchemy.mappings import (
    permit_table,
    person_table,
    upload_run_table,
)
from permitsync.domain.model import ExpiryPolicy, Permit, PermitStatus, Person, UploadRun

if TYPE_CHECKING:
    from sqlalchemy.orm import Session


class SqlAlchemyPersonRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Person) -> None:
        with storage_errors(f"store person {entity.identity_number}"):
            self.session.add(entity)
            self.session.flush()

    def get_by_identity_number(self, identity_number: str) -> Person | None:
        stmt = select(Person).where(person_table.c.identity_number == identity_number).limit(1)
        with storage_errors(f"look up person {identity_number}"):
            return self.session.execute(stmt).scalar_one_or_none()


class SqlAlchemyPermitRepository:
    """Permit store. Every write re-derives the permit status from its expiry date."""

    def __init__(self, session: Session, *, policy: ExpiryPolicy | None = None) -> None:
        self.session = session
        self.policy = policy or ExpiryPolicy()

    def add(self, entity: Permit) -> None:
        self.policy.apply(entity)
        with storage_errors(f"store permit {entity.permit_id}"):
            self.session.add(entity)
            self.session.flush()

    def update(self, entity: Permit) -> None:
        self.policy.apply(entity)
        with storage_errors(f"update permit {entity.permit_id}"):
            self.session.merge(entity)
            self.session.flush()

    def find_by_identity_and_permit_id(self, identity_number: str, permit_id: str) -> Permit | None:
        stmt = (
            select(Permit)
            .where(permit_table.c.identity_number == identity_number)
            .where(permit_table.c.permit_id == permit_id)
            .limit(1)
        )
        with storage_errors(f"look up permit {permit_id}"):
            return self.session.execute(stmt).scalar_one_or_none()

    def find_by_identity_number(self, identity_number: str) -> Permit | None:
        stmt = select(Permit).where(permit_table.c.identity_number == identity_number).limit(1)
        with storage_errors(f"look up permits for {identity_number}"):
            return self.session.execute(stmt).scalar_one_or_none()

    def list_permits(
        self,
        *,
        status: PermitStatus | None = None,
        search: str | None = None,
    ) -> list[Permit]:
        stmt = select(Permit).order_by(permit_table.c.created_at.desc())
        if status is not None:
            stmt = stmt.where(permit_table.c.status == status)
        if search:
            pattern = f"%{search.strip()}%"
            stmt = stmt.where(
                or_(
                    permit_table.c.permit_id.ilike(pattern),
                    permit_table.c.name_primary.ilike(pattern),
                    permit_table.c.name_secondary.ilike(pattern),
                    permit_table.c.identity_number.ilike(pattern),
                )
            )
        with storage_errors("list permits"):
            return list(self.session.execute(stmt).scalars())

    def count_by_status(self) -> dict[PermitStatus, int]:
        stmt = select(permit_table.c.status, func.count()).group_by(permit_table.c.status)
        counts = dict.fromkeys(PermitStatus, 0)
        with storage_errors("count permits"):
            rows = self.session.execute(stmt).all()
        for status, count in rows:
            counts[PermitStatus(status)] = cast(int, count)
        return counts


class SqlAlchemyUploadRunRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: UploadRun) -> None:
        with storage_errors(f"record upload run {entity.id}"):
            self.session.add(entity)
            self.session.flush()

    def list_recent(self, limit: int | None = None) -> list[UploadRun]:
        stmt = select(UploadRun).order_by(upload_run_table.c.started_at.desc())
        if limit is not None:
            stmt = stmt.limit(limit)
        with storage_errors("list upload runs"):
            return list(self.session.execute(stmt).scalars())


if TYPE_CHECKING:
    from permitsync.domain.ports import (
        PermitRepository,
        PersonRepository,
        UploadRunRepository,
    )

    _session_stub = cast("Session", object())
    _person_repo: PersonRepository = SqlAlchemyPersonRepository(_session_stub)
    _permit_repo: PermitRepository = SqlAlchemyPermitRepository(_session_stub)
    _upload_run_repo: UploadRunRepository = SqlAlchemyUploadRunRepository(_session_stub)
