"""Typed readers for ``PERMITSYNC_*`` environment variables."""

from __future__ import annotations

import logging
import os

from .errors import ConfigurationError


def optional_env_var(name: str) -> str | None:
    """Return a stripped environment variable, treating blank values as unset."""

    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def positive_int_env_var(name: str, default: int) -> int:
    raw = optional_env_var(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {value}")
    return value


def log_level_env_var(name: str, default: int) -> int:
    raw = optional_env_var(name)
    if raw is None:
        return default
    levels = logging.getLevelNamesMapping()
    level = levels.get(raw.upper())
    if level is None:
        known = ", ".join(sorted(name for name in levels if name != "NOTSET"))
        raise ConfigurationError(f"{name} must be one of {known}, got {raw!r}")
    return level
