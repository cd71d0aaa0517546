"""Unit-of-work abstractions for coordinating repositories."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from contextlib import AbstractContextManager
    from types import TracebackType

    from permitsync.domain.ports.persistence import (
        PermitRepository,
        PersonRepository,
        UploadRunRepository,
    )


@runtime_checkable
class RepositoryCollection(Protocol):
    """Marker protocol for groups of repositories managed together."""


@runtime_checkable
class UnitOfWork[TRepositories: RepositoryCollection](Protocol):
    """Generic unit-of-work boundary around a repository collection."""

    @property
    def repositories(self) -> TRepositories: ...

    def __enter__(self) -> UnitOfWork[TRepositories]: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


@dataclass(slots=True)
class ImportRepositories(RepositoryCollection):
    """Repositories required to reconcile permit uploads."""

    persons: PersonRepository
    permits: PermitRepository
    upload_runs: UploadRunRepository


@runtime_checkable
class ImportUnitOfWork(UnitOfWork[ImportRepositories], Protocol):
    """Unit of work used by the import engine.

    ``serialized`` must hold off any other unit of work touching the same
    identity number until the block exits, so that the lookup and the insert or
    supersede for that key are not interleaved with another run.
    """

    def __enter__(self) -> ImportUnitOfWork: ...

    def serialized(self, identity_number: str) -> AbstractContextManager[None]: ...
