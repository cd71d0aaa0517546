"""Bulk import of permit uploads: validation, reconciliation and audit."""

from __future__ import annotations

from permitsync.domain.importing.candidates import (
    CandidateRecord,
    build_candidate,
    build_candidates,
    validation_errors,
)
from permitsync.domain.importing.engine import (
    CancellationCheck,
    ReconciliationEngine,
    RunMetadata,
)
from permitsync.domain.importing.field_mapping import (
    DEFAULT_FIELD_SYNONYMS,
    FIELD_LABELS,
    MANDATORY_FIELDS,
    FieldMapping,
    FieldSynonyms,
    PermitField,
    detect_field_mapping,
)
from permitsync.domain.importing.ledger import UploadLedger
from permitsync.domain.importing.progress import (
    ProgressCallback,
    ProgressEvent,
    ProgressReporter,
    progress_percentage,
)
from permitsync.domain.importing.resolver import EmployeeResolver

__all__ = [  # noqa: RUF022
    # candidates
    "CandidateRecord",
    "build_candidate",
    "build_candidates",
    "validation_errors",
    # field mapping
    "DEFAULT_FIELD_SYNONYMS",
    "FIELD_LABELS",
    "MANDATORY_FIELDS",
    "FieldMapping",
    "FieldSynonyms",
    "PermitField",
    "detect_field_mapping",
    # reconciliation
    "CancellationCheck",
    "EmployeeResolver",
    "ReconciliationEngine",
    "RunMetadata",
    "UploadLedger",
    # progress
    "ProgressCallback",
    "ProgressEvent",
    "ProgressReporter",
    "progress_percentage",
]
