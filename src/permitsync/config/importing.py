"""Defaults for permit imports."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var, positive_int_env_var

DEFAULT_EXPIRING_SOON_DAYS = 30
DEFAULT_UPLOADER = "Excel Upload"


@dataclass(frozen=True, slots=True)
class ImportConfig:
    expiring_soon_days: int = DEFAULT_EXPIRING_SOON_DAYS
    default_uploader: str = DEFAULT_UPLOADER


def get_import_config() -> ImportConfig:
    return ImportConfig(
        expiring_soon_days=positive_int_env_var(
            "PERMITSYNC_EXPIRING_SOON_DAYS", DEFAULT_EXPIRING_SOON_DAYS
        ),
        default_uploader=optional_env_var("PERMITSYNC_UPLOADER") or DEFAULT_UPLOADER,
    )
