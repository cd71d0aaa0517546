"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class PermitStatus(StrEnum):
    VALID = "valid"
    EXPIRING_SOON = "expiring_soon"
    EXPIRED = "expired"
    DONE = "done"  # set manually; never recomputed from the expiry date


class RunStatus(StrEnum):
    """Completion status of an upload run."""

    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class SkipReason(StrEnum):
    """Why a candidate row did not produce a storage write."""

    VALIDATION = "validation"
    DUPLICATE = "duplicate"
    STORAGE_ERROR = "storage_error"
