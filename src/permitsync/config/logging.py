"""Logging setup for the command line entry point."""

from __future__ import annotations

import logging
from typing import Final

from .env import log_level_env_var

LOG_FORMAT: Final[str] = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Libraries whose INFO output is noise for someone running an import.
_QUIET_LOGGERS: Final[tuple[str, ...]] = ("alembic", "sqlalchemy.engine")


def configure_logging(*, level: int | None = None, force: bool = False) -> None:
    """Configure the root logger.

    ``level`` defaults to ``PERMITSYNC_LOG_LEVEL`` and falls back to INFO.
    """

    resolved = level
    if resolved is None:
        resolved = log_level_env_var("PERMITSYNC_LOG_LEVEL", logging.INFO)
    logging.basicConfig(
        level=resolved,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        force=force,
    )
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(resolved, logging.WARNING))
