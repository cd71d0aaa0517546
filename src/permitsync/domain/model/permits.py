"""Permit records tracked per person."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import TYPE_CHECKING

from .entity import Entity, utcnow
from .enums import PermitStatus

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID


@dataclass(frozen=True, slots=True, kw_only=True)
class PermitFields:
    """The mutable content of a permit, as carried by one upload row.

    Dates stay opaque strings here; only the store reasons about expiry.
    """

    permit_id: str
    permit_type: str
    issued_for: str
    name_primary: str
    name_secondary: str | None = None
    document_number: str | None = None
    nationality: str | None = None
    plate_number: str | None = None
    issuing_location: str
    issue_date: str
    expiry_date: str


_MUTABLE_FIELDS: tuple[str, ...] = tuple(f.name for f in fields(PermitFields))


@dataclass(eq=False, kw_only=True)
class Permit(Entity):
    """The one live permit tracked for an identity number."""

    identity_number: str
    person_id: UUID

    permit_id: str
    permit_type: str
    issued_for: str
    name_primary: str
    name_secondary: str | None = None
    document_number: str | None = None
    nationality: str | None = None
    plate_number: str | None = None
    issuing_location: str
    issue_date: str
    expiry_date: str

    status: PermitStatus = PermitStatus.VALID
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime | None = None

    @classmethod
    def issue(
        cls,
        content: PermitFields,
        *,
        identity_number: str,
        person_id: UUID,
        now: datetime | None = None,
    ) -> Permit:
        """Create a permit for ``identity_number`` owned by ``person_id``."""

        return cls(
            identity_number=identity_number,
            person_id=person_id,
            created_at=now or utcnow(),
            **{name: getattr(content, name) for name in _MUTABLE_FIELDS},
        )

    def supersede(self, content: PermitFields, *, now: datetime | None = None) -> str:
        """Overwrite the permit content in place and return the replaced permit id.

        Identity number, internal id and owning person are left untouched.
        """

        previous = self.permit_id
        for name in _MUTABLE_FIELDS:
            setattr(self, name, getattr(content, name))
        self.updated_at = now or utcnow()
        return previous

    def content(self) -> PermitFields:
        return PermitFields(**{name: getattr(self, name) for name in _MUTABLE_FIELDS})
