"""Application configuration helpers."""

from __future__ import annotations

from .env import log_level_env_var, optional_env_var, positive_int_env_var
from .errors import ConfigurationError
from .importing import ImportConfig, get_import_config
from .logging import configure_logging
from .storage import (
    DatabaseConfig,
    StorageConfig,
    default_data_dir,
    get_database_config,
    get_database_uri,
    get_storage_config,
)

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "ImportConfig",
    "StorageConfig",
    "configure_logging",
    "default_data_dir",
    "get_database_config",
    "get_database_uri",
    "get_import_config",
    "get_storage_config",
    "log_level_env_var",
    "optional_env_var",
    "positive_int_env_var",
]
