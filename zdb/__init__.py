"""Thin MySQL handle configured from an INI file."""

from __future__ import annotations

from .config import DatabaseConfig, load_config
from .errors import ConfigError, DatabaseConnectionError, QueryError, ZdbError
from .handle import Database
from .models import NOT_FOUND, FetchRequest, NotFoundType

__version__ = "0.1.0"

__all__ = [
    "NOT_FOUND",
    "ConfigError",
    "Database",
    "DatabaseConfig",
    "DatabaseConnectionError",
    "FetchRequest",
    "NotFoundType",
    "QueryError",
    "ZdbError",
    "__version__",
    "load_config",
]
