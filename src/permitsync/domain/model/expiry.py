"""Expiry status derivation for stored permits."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from typing import TYPE_CHECKING, Final, Protocol

from .enums import PermitStatus

if TYPE_CHECKING:
    from .permits import Permit

DEFAULT_EXPIRING_SOON_DAYS: Final[int] = 30

_DATE_FORMATS: Final[tuple[str, ...]] = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%d/%m/%Y",
    "%d-%m-%Y",
    "%d.%m.%Y",
)


class Today(Protocol):
    def __call__(self) -> date: ...


def _utc_today() -> date:
    return datetime.now(UTC).date()


def parse_permit_date(value: str | None) -> date | None:
    """Best-effort parse of a spreadsheet date string; ``None`` if it cannot be read."""

    if value is None:
        return None
    text = value.strip()
    if not text:
        return None
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()  # noqa: DTZ007
        except ValueError:
            continue
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        return None


def days_remaining(expiry_date: str | None, *, today: date) -> int | None:
    expiry = parse_permit_date(expiry_date)
    if expiry is None:
        return None
    return (expiry - today).days


def classify_expiry(
    expiry_date: str | None,
    *,
    today: date,
    expiring_soon_days: int = DEFAULT_EXPIRING_SOON_DAYS,
) -> PermitStatus:
    remaining = days_remaining(expiry_date, today=today)
    if remaining is None:
        return PermitStatus.VALID
    if remaining < 0:
        return PermitStatus.EXPIRED
    if remaining <= expiring_soon_days:
        return PermitStatus.EXPIRING_SOON
    return PermitStatus.VALID


@dataclass(frozen=True, slots=True)
class ExpiryPolicy:
    """Recompute a permit's status whenever the store writes it."""

    expiring_soon_days: int = DEFAULT_EXPIRING_SOON_DAYS
    today: Today = field(default=_utc_today)

    def apply(self, permit: Permit) -> PermitStatus:
        if permit.status == PermitStatus.DONE:
            return permit.status
        permit.status = classify_expiry(
            permit.expiry_date,
            today=self.today(),
            expiring_soon_days=self.expiring_soon_days,
        )
        return permit.status
