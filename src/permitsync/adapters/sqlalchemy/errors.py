"""Translate SQLAlchemy exceptions into the domain storage error taxonomy."""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING

from sqlalchemy.exc import (
    DBAPIError,
    DisconnectionError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
)

from permitsync.domain.errors import StorageError, StorageUnavailableError

if TYPE_CHECKING:
    from collections.abc import Iterator


def is_unavailable(exc: SQLAlchemyError) -> bool:
    """Return whether ``exc`` means the database itself cannot be reached."""

    if isinstance(exc, OperationalError | InterfaceError | DisconnectionError):
        return True
    return isinstance(exc, DBAPIError) and exc.connection_invalidated


def translate(exc: SQLAlchemyError, action: str) -> StorageError:
    cause = getattr(exc, "orig", None) or exc
    if is_unavailable(exc):
        return StorageUnavailableError(f"database unavailable while trying to {action}: {cause}")
    return StorageError(f"failed to {action}: {cause}")


@contextmanager
def storage_errors(action: str) -> Iterator[None]:
    """Re-raise SQLAlchemy failures inside the block as domain storage errors."""

    try:
        yield
    except SQLAlchemyError as exc:
        raise translate(exc, action) from exc
