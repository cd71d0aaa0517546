"""Domain port definitions for adapters."""

from __future__ import annotations

from .persistence import (
    PermitRepository,
    PersonRepository,
    Repository,
    UploadRunRepository,
)
from .unit_of_work import (
    ImportRepositories,
    ImportUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "ImportRepositories",
    "ImportUnitOfWork",
    "PermitRepository",
    "PersonRepository",
    "Repository",
    "RepositoryCollection",
    "UnitOfWork",
    "UploadRunRepository",
]
