from __future__ import annotations

from datetime import date

import pytest

from permitsync.domain.model import (
    ExpiryPolicy,
    Permit,
    PermitStatus,
    classify_expiry,
    days_remaining,
    new_id,
    parse_permit_date,
)
from tests.helpers.permits import make_permit_fields

TODAY = date(2025, 1, 1)


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("2025-03-15", date(2025, 3, 15)),
        ("2025/03/15", date(2025, 3, 15)),
        ("15/03/2025", date(2025, 3, 15)),
        ("15-03-2025", date(2025, 3, 15)),
        ("2025-03-15T08:30:00", date(2025, 3, 15)),
        (" 2025-03-15 ", date(2025, 3, 15)),
    ],
)
def test_parse_permit_date_accepts_common_formats(text: str, expected: date) -> None:
    assert parse_permit_date(text) == expected


@pytest.mark.parametrize("text", [None, "", "soon", "31/31/2025"])
def test_parse_permit_date_returns_none_for_unreadable_values(text: str | None) -> None:
    assert parse_permit_date(text) is None


def test_days_remaining_counts_calendar_days() -> None:
    assert days_remaining("2025-01-31", today=TODAY) == 30
    assert days_remaining("2024-12-31", today=TODAY) == -1
    assert days_remaining("not a date", today=TODAY) is None


@pytest.mark.parametrize(
    ("expiry", "expected"),
    [
        ("2024-12-31", PermitStatus.EXPIRED),
        ("2025-01-01", PermitStatus.EXPIRING_SOON),
        ("2025-01-31", PermitStatus.EXPIRING_SOON),
        ("2025-02-01", PermitStatus.VALID),
        ("unknown", PermitStatus.VALID),
    ],
)
def test_classify_expiry_thresholds(expiry: str, expected: PermitStatus) -> None:
    assert classify_expiry(expiry, today=TODAY, expiring_soon_days=30) == expected


def test_policy_sets_status_from_expiry_date() -> None:
    permit = Permit.issue(
        make_permit_fields(expiry_date="2025-01-10"),
        identity_number="1",
        person_id=new_id(),
    )
    policy = ExpiryPolicy(expiring_soon_days=5, today=lambda: TODAY)

    assert policy.apply(permit) == PermitStatus.VALID

    permit.expiry_date = "2025-01-03"
    assert policy.apply(permit) == PermitStatus.EXPIRING_SOON
    assert permit.status == PermitStatus.EXPIRING_SOON


def test_policy_never_recomputes_done_permits() -> None:
    permit = Permit.issue(
        make_permit_fields(expiry_date="2020-01-01"),
        identity_number="1",
        person_id=new_id(),
    )
    permit.status = PermitStatus.DONE

    assert ExpiryPolicy(today=lambda: TODAY).apply(permit) == PermitStatus.DONE
