"""
Infrastructure package for Axion.

Centralizes database connectivity concerns (driver selection, connection
opening, retries and statement timeouts). Keep this layer focused on I/O,
decoupled from SQL compilation and the ORM.
"""

from axion.infrastructure.db_factory import Connection, build_dsn, connect
from axion.infrastructure.dialects import DRIVERS, DriverSpec, get_driver

__all__ = [
    "Connection",
    "DRIVERS",
    "DriverSpec",
    "build_dsn",
    "connect",
    "get_driver",
]
