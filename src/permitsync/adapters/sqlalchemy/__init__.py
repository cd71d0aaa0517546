"""SQLAlchemy adapter package for permitsync."""

from __future__ import annotations

from .errors import storage_errors, translate
from .mappings import create_all_tables, mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyPermitRepository,
    SqlAlchemyPersonRepository,
    SqlAlchemyUploadRunRepository,
)
from .unit_of_work import (
    IdentityLocks,
    SqlAlchemyImportUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "IdentityLocks",
    "SqlAlchemyImportUnitOfWork",
    "SqlAlchemyPermitRepository",
    "SqlAlchemyPersonRepository",
    "SqlAlchemyUploadRunRepository",
    "StartupError",
    "configured_engine",
    "create_all_tables",
    "is_started",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
    "storage_errors",
    "translate",
]
