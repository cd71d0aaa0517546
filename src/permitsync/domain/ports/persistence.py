"""Ports for persisting people, permits and upload runs."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from permitsync.domain.model import Permit, Person, UploadRun

if TYPE_CHECKING:
    from collections.abc import Sequence

    from permitsync.domain.model import PermitStatus


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class PersonRepository(Repository[Person], Protocol):
    """Persistence contract for permit holders."""

    def get_by_identity_number(self, identity_number: str) -> Person | None: ...


@runtime_checkable
class PermitRepository(Repository[Permit], Protocol):
    """Persistence contract for permits.

    Implementations derive ``Permit.status`` from the expiry date on ``add`` and
    ``update``.
    """

    def find_by_identity_and_permit_id(
        self, identity_number: str, permit_id: str
    ) -> Permit | None: ...

    def find_by_identity_number(self, identity_number: str) -> Permit | None: ...

    def update(self, entity: Permit) -> None: ...

    def list_permits(
        self,
        *,
        status: PermitStatus | None = None,
        search: str | None = None,
    ) -> Sequence[Permit]: ...

    def count_by_status(self) -> dict[PermitStatus, int]: ...


@runtime_checkable
class UploadRunRepository(Repository[UploadRun], Protocol):
    """Persistence contract for the upload ledger."""

    def list_recent(self, limit: int | None = None) -> Sequence[UploadRun]: ...
