"""Application configuration helpers."""

from __future__ import annotations

from .env import positive_int_env
from .errors import ConfigurationError
from .logging import configure_logging
from .query import QueryConfig, get_query_config
from .storage import (
    DatabaseConfig,
    PersistenceConfig,
    StorageConfig,
    get_database_config,
    get_persistence_config,
    get_storage_config,
)

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "PersistenceConfig",
    "QueryConfig",
    "StorageConfig",
    "configure_logging",
    "get_database_config",
    "get_persistence_config",
    "get_query_config",
    "get_storage_config",
    "positive_int_env",
]
