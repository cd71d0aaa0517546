"""Candidate records: one validated (or rejected) row of an upload."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from permitsync.domain.model import PermitFields, PersonAttributes

from .field_mapping import FIELD_LABELS, MANDATORY_FIELDS, PermitField

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from .field_mapping import FieldMapping


@dataclass(frozen=True, slots=True, kw_only=True)
class CandidateRecord:
    """A single upload row. Invalid records carry their validation messages."""

    row_number: int
    permit_id: str = ""
    permit_type: str = ""
    issued_for: str = ""
    name_primary: str = ""
    name_secondary: str = ""
    identity_number: str = ""
    document_number: str = ""
    nationality: str = ""
    plate_number: str = ""
    issuing_location: str = ""
    issue_date: str = ""
    expiry_date: str = ""
    errors: tuple[str, ...] = field(default=())

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def display_name(self) -> str:
        return self.name_primary or self.name_secondary or self.permit_id

    def permit_fields(self) -> PermitFields:
        return PermitFields(
            permit_id=self.permit_id,
            permit_type=self.permit_type,
            issued_for=self.issued_for,
            name_primary=self.name_primary,
            name_secondary=self.name_secondary or None,
            document_number=self.document_number or None,
            nationality=self.nationality or None,
            plate_number=self.plate_number or None,
            issuing_location=self.issuing_location,
            issue_date=self.issue_date,
            expiry_date=self.expiry_date,
        )

    def person_attributes(self) -> PersonAttributes:
        return PersonAttributes(
            name_primary=self.name_primary,
            name_secondary=self.name_secondary or None,
            document_number=self.document_number or None,
            nationality=self.nationality or None,
        )


def _cell_text(value: object) -> str:
    if value is None:
        return ""
    return str(value).strip()


def validation_errors(values: dict[PermitField, str]) -> tuple[str, ...]:
    return tuple(
        f"{FIELD_LABELS[name]} is required" for name in MANDATORY_FIELDS if not values.get(name)
    )


def build_candidate(
    row_number: int,
    row: Sequence[object],
    mapping: FieldMapping,
) -> CandidateRecord | None:
    """Turn one raw row into a candidate record.

    Returns ``None`` for rows without a permit id and without a holder name;
    those are blank spreadsheet rows and are not reported.
    """

    values = {name: _cell_text(mapping.value(row, name)) for name in PermitField}
    if not values[PermitField.PERMIT_ID] and not values[PermitField.NAME_PRIMARY]:
        return None

    return CandidateRecord(
        row_number=row_number,
        errors=validation_errors(values),
        **{name.value: text for name, text in values.items()},
    )


def build_candidates(
    rows: Iterable[Sequence[object]],
    mapping: FieldMapping,
    *,
    first_row_number: int = 1,
) -> list[CandidateRecord]:
    """Build candidates for every data row, keeping source row numbers."""

    candidates: list[CandidateRecord] = []
    for row_number, row in enumerate(rows, start=first_row_number):
        candidate = build_candidate(row_number, row, mapping)
        if candidate is not None:
            candidates.append(candidate)
    return candidates
