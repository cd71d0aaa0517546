"""Configuration error definitions."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Raised when a ``PERMITSYNC_*`` setting holds an unusable value."""
