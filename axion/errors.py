"""
Exception taxonomy for Axion.

All errors raised by the package derive from `AxionError` so host applications
can map them onto a single error boundary (typically an HTTP 500 page).
"""

from __future__ import annotations

from typing import Optional


class AxionError(Exception):
    """Base class for every error raised by Axion."""


class ConnectionError(AxionError):  # noqa: A001 - mirrors the driver-agnostic name
    """
    The database connection could not be opened.

    Raised for unsupported drivers, unreachable hosts and bad credentials. The
    message always includes the underlying cause.
    """


class UnsupportedDriverError(ConnectionError):
    """DB_CONNECTION names a driver Axion does not know about."""

    def __init__(self, driver: str) -> None:
        self.driver = driver
        super().__init__(f"Unsupported DB_CONNECTION: {driver!r} (expected sqlite, mysql or pgsql)")


class InvalidQueryError(AxionError, ValueError):
    """A query could not be compiled (bad operator, identifier or empty payload)."""


class UnsafeQueryError(AxionError):
    """A destructive statement was requested without any WHERE condition."""

    operation: str = "statement"

    def __init__(self, table: str) -> None:
        self.table = table
        super().__init__(
            f"Refusing to {self.operation} every row of {table!r}: "
            "a WHERE condition is required."
        )


class UnsafeDeleteError(UnsafeQueryError):
    operation = "delete"


class UnsafeUpdateError(UnsafeQueryError):
    operation = "update"


class QueryExecutionError(AxionError):
    """
    The database rejected a statement.

    The underlying driver exception is chained as ``__cause__``.
    """

    def __init__(self, table: str, operation: str, message: str) -> None:
        self.table = table
        self.operation = operation
        super().__init__(f"{operation} on {table!r} failed: {message}")


class HydrationError(AxionError):
    """A row could not be mapped onto a typed model."""

    def __init__(self, model: str, column: str, message: Optional[str] = None) -> None:
        self.model = model
        self.column = column
        super().__init__(
            message or f"Column {column!r} is NULL but {model}.{column} is not nullable and has no default"
        )


__all__ = [
    "AxionError",
    "ConnectionError",
    "HydrationError",
    "InvalidQueryError",
    "QueryExecutionError",
    "UnsafeDeleteError",
    "UnsafeQueryError",
    "UnsafeUpdateError",
    "UnsupportedDriverError",
]
