"""
Axion - database and HTTP companion module for web applications.

This package provides:

- A fluent query builder with chained where/or_where conditions
- An active-record `Model` base class with fillable columns and timestamps
- Connection handling for sqlite, MySQL and PostgreSQL
- CSRF, auth and guest middleware plus a controller base class
- A CLI to inspect configuration and publish application stubs
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from axion.config import Settings, get_settings
from axion.controller import Controller
from axion.domain.models import Model, ModelQuery
from axion.errors import (
    AxionError,
    ConnectionError,
    HydrationError,
    InvalidQueryError,
    QueryExecutionError,
    UnsafeDeleteError,
    UnsafeUpdateError,
    UnsupportedDriverError,
)
from axion.infrastructure.db_factory import Connection, connect
from axion.query.builder import QueryBuilder
from axion.query.executor import Page
from axion.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Connections
    "Connection",
    "connect",
    # Querying
    "Model",
    "ModelQuery",
    "Page",
    "QueryBuilder",
    # HTTP
    "Controller",
    # Errors
    "AxionError",
    "ConnectionError",
    "HydrationError",
    "InvalidQueryError",
    "QueryExecutionError",
    "UnsafeDeleteError",
    "UnsafeUpdateError",
    "UnsupportedDriverError",
    # Logging
    "configure_logging",
    "get_logger",
]
