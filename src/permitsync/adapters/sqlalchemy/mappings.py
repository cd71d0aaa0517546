"""SQLAlchemy mapping metadata for the permitsync domain model."""

from __future__ import annotations

import json
import logging
import uuid
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import (
    Column,
    DateTime,
    Dialect,
    Enum,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    orm,
)
from sqlalchemy.orm import configure_mappers

from permitsync.domain.model import Permit, PermitStatus, Person, RunStatus, UploadRun

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


class StringListType(TypeDecorator[list[str]]):
    """Ordered list of messages stored as a JSON array."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: list[str] | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        return json.dumps([str(item) for item in value], ensure_ascii=False)

    def process_result_value(self, value: str | None, dialect: Dialect) -> list[str]:
        _ = dialect
        if value is None:
            return []
        loaded = json.loads(value)
        if not isinstance(loaded, list):
            return []
        items = cast(list[Any], loaded)
        return [item for item in items if isinstance(item, str)]


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

person_table = Table(
    "persons",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("identity_number", String, nullable=False),
    Column("name_primary", String, nullable=False),
    Column("name_secondary", String, nullable=True),
    Column("document_number", String, nullable=True),
    Column("nationality", String, nullable=True),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("updated_at", UTCDateTime(), nullable=True),
    UniqueConstraint("identity_number"),
)

permit_table = Table(
    "permits",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("identity_number", String, nullable=False),
    Column(
        "person_id",
        UUIDColumnType,
        ForeignKey("persons.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("permit_id", String, nullable=False, index=True),
    Column("permit_type", String, nullable=False),
    Column("issued_for", String, nullable=False),
    Column("name_primary", String, nullable=False),
    Column("name_secondary", String, nullable=True),
    Column("document_number", String, nullable=True),
    Column("nationality", String, nullable=True),
    Column("plate_number", String, nullable=True),
    Column("issuing_location", String, nullable=False),
    Column("issue_date", String, nullable=False),
    Column("expiry_date", String, nullable=False),
    Column("status", Enum(PermitStatus, native_enum=False), nullable=False, index=True),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("updated_at", UTCDateTime(), nullable=True),
    # One live permit per identity number; backs up the per-key lock across processes.
    UniqueConstraint("identity_number"),
)

upload_run_table = Table(
    "upload_runs",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("uploader", String, nullable=False),
    Column("source_file", String, nullable=False),
    Column("total", Integer, nullable=False),
    Column("started_at", UTCDateTime(), nullable=False, index=True),
    Column("finished_at", UTCDateTime(), nullable=True),
    Column("inserted", Integer, nullable=False, default=0),
    Column("updated", Integer, nullable=False, default=0),
    Column("skipped", Integer, nullable=False, default=0),
    Column("duplicates", Integer, nullable=False, default=0),
    Column("errors", StringListType(), nullable=False),
    Column("status", Enum(RunStatus, native_enum=False), nullable=False),
    Column("fatal_error", Text, nullable=True),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(Person, person_table)
    mapper_registry.map_imperatively(Permit, permit_table)
    mapper_registry.map_imperatively(UploadRun, upload_run_table)

    configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)
