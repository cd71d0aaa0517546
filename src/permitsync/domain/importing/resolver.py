"""Find-or-create resolution of permit holders by identity number."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from permitsync.domain.model import Person, utcnow

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from permitsync.domain.model import PersonAttributes
    from permitsync.domain.ports import PersonRepository

log = getLogger(__name__)


class EmployeeResolver:
    """Resolve a person by identity number, creating them on first sighting.

    Existing people are returned untouched. Storage errors propagate; a
    ``StorageUnavailableError`` from here ends the whole run.
    """

    def __init__(
        self,
        persons: PersonRepository,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._persons = persons
        self._clock = clock
        self.created = 0

    def resolve(self, identity_number: str, fallback: PersonAttributes) -> Person:
        existing = self._persons.get_by_identity_number(identity_number)
        if existing is not None:
            return existing

        person = Person.from_attributes(identity_number, fallback, now=self._clock())
        self._persons.add(person)
        self.created += 1
        log.debug("Created person %s for identity number %s", person.id, identity_number)
        return person
