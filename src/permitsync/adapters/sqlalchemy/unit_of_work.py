"""SQLAlchemy-backed unit of work for permit imports."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from permitsync.adapters.sqlalchemy.errors import storage_errors
from permitsync.adapters.sqlalchemy.mappings import start_mappers
from permitsync.adapters.sqlalchemy.migrations import upgrade_head
from permitsync.adapters.sqlalchemy.repositories import (
    SqlAlchemyPermitRepository,
    SqlAlchemyPersonRepository,
    SqlAlchemyUploadRunRepository,
)
from permitsync.config import get_database_uri
from permitsync.domain.model import ExpiryPolicy
from permitsync.domain.ports import ImportRepositories, RepositoryCollection

if TYPE_CHECKING:
    from collections.abc import Iterator
    from contextlib import AbstractContextManager
    from types import TracebackType

    from sqlalchemy.engine import Engine


class StartupError(RuntimeError):
    """Raised when a SQLAlchemy unit of work is used before initialisation."""


@dataclass(slots=True)
class _LockEntry:
    lock: threading.Lock = field(default_factory=threading.Lock)
    users: int = 0


class IdentityLocks:
    """Process-wide registry of one lock per identity number.

    An entry lives only while some thread holds or waits for it.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._entries: dict[str, _LockEntry] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)

    @contextmanager
    def hold(self, identity_number: str) -> Iterator[None]:
        with self._guard:
            entry = self._entries.get(identity_number)
            if entry is None:
                entry = self._entries[identity_number] = _LockEntry()
            entry.users += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._guard:
                entry.users -= 1
                if entry.users == 0:
                    del self._entries[identity_number]


@dataclass(slots=True)
class _AdapterState:
    _engine: Engine | None = None
    _session_factory: sessionmaker[Session] | None = None
    expiry_policy: ExpiryPolicy = field(default_factory=ExpiryPolicy)
    identity_locks: IdentityLocks = field(default_factory=IdentityLocks)

    @property
    def engine(self) -> Engine | None:
        return self._engine

    @engine.setter
    def engine(self, value: Engine | None) -> None:
        self._session_factory = None
        self._engine = value

    @property
    def session_factory(self) -> sessionmaker[Session]:
        if self._engine is None:
            raise StartupError(
                "SQLAlchemy adapter not initialised. Call permitsync.adapters.sqlalchemy."
                "unit_of_work.startup() before requesting a unit of work."
            )
        if self._session_factory is None:
            self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)
        return self._session_factory


_STATE = _AdapterState()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    expiry_policy: ExpiryPolicy | None = None,
    force: bool = False,
) -> None:
    """Initialise the SQLAlchemy engine, schema and session factory."""

    if _STATE.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )

    resolved_engine = engine or create_engine(database_uri or get_database_uri(), future=True)
    start_mappers()
    upgrade_head(engine=resolved_engine)

    _STATE.engine = resolved_engine
    _STATE.expiry_policy = expiry_policy or ExpiryPolicy()


def configured_engine() -> Engine | None:
    """Return the engine currently managed by the adapter (if any)."""

    return _STATE.engine


def is_started() -> bool:
    """Return whether the adapter has been initialised."""

    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the managed engine and reset state (primarily for tests)."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.engine = None
    _STATE.expiry_policy = ExpiryPolicy()


class BaseSqlAlchemyUnitOfWork[TRepositories: RepositoryCollection](ABC):
    """Generic SQLAlchemy unit of work with pluggable repository collections."""

    def __init__(self) -> None:
        self.session_factory: sessionmaker[Session] = _STATE.session_factory
        self._session: Session | None = None

    @abstractmethod
    def _build_repositories(self, session: Session) -> TRepositories: ...

    def __enter__(self) -> BaseSqlAlchemyUnitOfWork[TRepositories]:
        self.session = self.session_factory()
        self._repositories = self._build_repositories(self.session)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        try:
            if exc_type is not None:
                self.session.rollback()
        finally:
            self.session.close()
            self.session = None
        return False

    def commit(self) -> None:
        with storage_errors("commit"):
            self.session.commit()

    def rollback(self) -> None:
        with storage_errors("roll back"):
            self.session.rollback()

    @property
    def repositories(self) -> TRepositories:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._repositories

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._session

    @session.setter
    def session(self, session: Session | None) -> None:
        if self._session is not None and session is not None:
            raise StartupError("Unit of work session already initialised")
        self._session = session


class SqlAlchemyImportUnitOfWork(BaseSqlAlchemyUnitOfWork[ImportRepositories]):
    """Unit of work for the import engine and the upload ledger."""

    def __enter__(self) -> SqlAlchemyImportUnitOfWork:
        super().__enter__()
        return self

    def _build_repositories(self, session: Session) -> ImportRepositories:
        return ImportRepositories(
            persons=SqlAlchemyPersonRepository(session),
            permits=SqlAlchemyPermitRepository(session, policy=_STATE.expiry_policy),
            upload_runs=SqlAlchemyUploadRunRepository(session),
        )

    def serialized(self, identity_number: str) -> AbstractContextManager[None]:
        return _STATE.identity_locks.hold(identity_number)


if TYPE_CHECKING:
    from permitsync.domain.ports import ImportUnitOfWork

    _uow_check: ImportUnitOfWork = SqlAlchemyImportUnitOfWork()
