"""People that permits are issued to."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .entity import Entity, utcnow

if TYPE_CHECKING:
    from datetime import datetime


@dataclass(frozen=True, slots=True)
class PersonAttributes:
    """Descriptive attributes used when a person has to be created from an upload row."""

    name_primary: str
    name_secondary: str | None = None
    document_number: str | None = None
    nationality: str | None = None


@dataclass(eq=False, kw_only=True)
class Person(Entity):
    """A permit holder, keyed by their government identity number."""

    identity_number: str
    name_primary: str
    name_secondary: str | None = None
    document_number: str | None = None
    nationality: str | None = None

    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime | None = None

    @classmethod
    def from_attributes(
        cls,
        identity_number: str,
        attributes: PersonAttributes,
        *,
        now: datetime | None = None,
    ) -> Person:
        return cls(
            identity_number=identity_number,
            name_primary=attributes.name_primary,
            name_secondary=attributes.name_secondary,
            document_number=attributes.document_number,
            nationality=attributes.nationality,
            created_at=now or utcnow(),
        )
