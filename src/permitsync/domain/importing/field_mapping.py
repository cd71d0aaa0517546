"""Declarative header-to-field mapping for uploaded permit sheets.

Each semantic field owns an ordered list of synonym sets, split over more
than one table entry when a broad set must wait for other fields. A header
matches a synonym set when every token of the set occurs in the header, compared
case-insensitively. The mapping is computed once per upload and handed to the
row parser.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence


class PermitField(StrEnum):
    PERMIT_ID = "permit_id"
    PERMIT_TYPE = "permit_type"
    ISSUED_FOR = "issued_for"
    NAME_SECONDARY = "name_secondary"
    NAME_PRIMARY = "name_primary"
    IDENTITY_NUMBER = "identity_number"
    DOCUMENT_NUMBER = "document_number"
    NATIONALITY = "nationality"
    PLATE_NUMBER = "plate_number"
    ISSUING_LOCATION = "issuing_location"
    ISSUE_DATE = "issue_date"
    EXPIRY_DATE = "expiry_date"


# Order matters: this is the order of validation messages for a bad row.
MANDATORY_FIELDS: Final[tuple[PermitField, ...]] = (
    PermitField.PERMIT_ID,
    PermitField.NAME_PRIMARY,
    PermitField.IDENTITY_NUMBER,
    PermitField.ISSUE_DATE,
    PermitField.EXPIRY_DATE,
    PermitField.PERMIT_TYPE,
    PermitField.ISSUED_FOR,
    PermitField.ISSUING_LOCATION,
)

FIELD_LABELS: Final[Mapping[PermitField, str]] = {
    PermitField.PERMIT_ID: "Permit ID",
    PermitField.PERMIT_TYPE: "Permit Type",
    PermitField.ISSUED_FOR: "Issued For",
    PermitField.NAME_SECONDARY: "Secondary Name",
    PermitField.NAME_PRIMARY: "Holder Name",
    PermitField.IDENTITY_NUMBER: "Identity Number",
    PermitField.DOCUMENT_NUMBER: "Document Number",
    PermitField.NATIONALITY: "Nationality",
    PermitField.PLATE_NUMBER: "Plate Number",
    PermitField.ISSUING_LOCATION: "Issuing Location",
    PermitField.ISSUE_DATE: "Issue Date",
    PermitField.EXPIRY_DATE: "Expiry Date",
}


@dataclass(frozen=True, slots=True)
class FieldSynonyms:
    field: PermitField
    synonym_sets: tuple[tuple[str, ...], ...]

    def first_match(self, headers: Sequence[str], claimed: set[int]) -> int | None:
        """Return the first unclaimed column, trying synonym sets in priority order."""

        for tokens in self.synonym_sets:
            for index, header in enumerate(headers):
                if index not in claimed and _contains_all(header, tokens):
                    return index
        return None


def _contains_all(header: str, tokens: tuple[str, ...]) -> bool:
    normalized = header.strip().lower()
    if not normalized:
        return False
    return all(token.lower() in normalized for token in tokens)


# Fields that share tokens with others (secondary vs. primary name, permit id vs.
# permit type) are listed before their broader siblings so the specific header
# claims its column first.
DEFAULT_FIELD_SYNONYMS: Final[tuple[FieldSynonyms, ...]] = (
    FieldSynonyms(PermitField.PERMIT_TYPE, (("permit", "type"),)),
    FieldSynonyms(
        PermitField.PERMIT_ID,
        (("permit", "id"), ("permit", "number"), ("permit", "no")),
    ),
    FieldSynonyms(PermitField.ISSUED_FOR, (("issued", "for"),)),
    FieldSynonyms(PermitField.NAME_SECONDARY, (("arabic", "name"), ("secondary", "name"))),
    FieldSynonyms(
        PermitField.NAME_PRIMARY,
        (("english", "name"), ("holder", "name"), ("employee", "name")),
    ),
    FieldSynonyms(
        PermitField.IDENTITY_NUMBER,
        (("moi", "number"), ("identity",), ("iqama",), ("national", "id")),
    ),
    FieldSynonyms(PermitField.DOCUMENT_NUMBER, (("passport",), ("document", "number"))),
    FieldSynonyms(PermitField.NATIONALITY, (("nationality",),)),
    FieldSynonyms(PermitField.PLATE_NUMBER, (("plate",),)),
    FieldSynonyms(
        PermitField.ISSUING_LOCATION,
        (("port", "name"), ("issuing", "location"), ("port",)),
    ),
    # A bare "name" column is only taken once "Port Name" has gone to the location.
    FieldSynonyms(PermitField.NAME_PRIMARY, (("name",),)),
    FieldSynonyms(PermitField.ISSUE_DATE, (("issue", "date"),)),
    FieldSynonyms(PermitField.EXPIRY_DATE, (("expiry", "date"), ("expiry",), ("expiration",))),
)


@dataclass(frozen=True, slots=True)
class FieldMapping:
    """Column index per semantic field, as detected from one header row."""

    columns: Mapping[PermitField, int] = field(default_factory=dict[PermitField, int])

    def column_for(self, permit_field: PermitField) -> int | None:
        return self.columns.get(permit_field)

    def value(self, row: Sequence[object], permit_field: PermitField) -> object:
        index = self.columns.get(permit_field)
        if index is None or index >= len(row):
            return None
        return row[index]

    def missing_mandatory(self) -> tuple[PermitField, ...]:
        return tuple(name for name in MANDATORY_FIELDS if name not in self.columns)


def detect_field_mapping(
    headers: Iterable[object],
    synonyms: Sequence[FieldSynonyms] = DEFAULT_FIELD_SYNONYMS,
) -> FieldMapping:
    """Map header columns to fields.

    Fields are resolved in table order. For each field the synonym sets are tried
    in order and the first unclaimed column matching a set wins, so "english name"
    beats a bare "name" column further left.
    """

    header_texts = ["" if header is None else str(header) for header in headers]
    claimed: set[int] = set()
    columns: dict[PermitField, int] = {}
    for entry in synonyms:
        if entry.field in columns:
            continue
        index = entry.first_match(header_texts, claimed)
        if index is None:
            continue
        columns[entry.field] = index
        claimed.add(index)
    return FieldMapping(columns=columns)
