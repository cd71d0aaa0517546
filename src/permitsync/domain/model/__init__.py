"""Public domain model surface."""

from __future__ import annotations

from permitsync.domain.model.entity import Entity, new_id, utcnow
from permitsync.domain.model.enums import PermitStatus, RunStatus, SkipReason
from permitsync.domain.model.expiry import (
    DEFAULT_EXPIRING_SOON_DAYS,
    ExpiryPolicy,
    classify_expiry,
    days_remaining,
    parse_permit_date,
)
from permitsync.domain.model.outcomes import Inserted, RowOutcome, Skipped, Updated
from permitsync.domain.model.people import Person, PersonAttributes
from permitsync.domain.model.permits import Permit, PermitFields
from permitsync.domain.model.uploads import UploadResult, UploadRun

__all__ = [  # noqa: RUF022
    # base
    "Entity",
    "new_id",
    "utcnow",
    # enums
    "PermitStatus",
    "RunStatus",
    "SkipReason",
    # people and permits
    "Person",
    "PersonAttributes",
    "Permit",
    "PermitFields",
    # expiry
    "DEFAULT_EXPIRING_SOON_DAYS",
    "ExpiryPolicy",
    "classify_expiry",
    "days_remaining",
    "parse_permit_date",
    # runs
    "Inserted",
    "RowOutcome",
    "Skipped",
    "Updated",
    "UploadResult",
    "UploadRun",
]
