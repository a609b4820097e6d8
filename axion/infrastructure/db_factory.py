"""
Database connection factory for Axion.

`connect()` resolves the driver and credentials from `Settings` and returns a
`Connection`: a thin handle around the DB-API connection that the caller owns
and passes explicitly to query builders and models. There is no process-wide
singleton and no pooling.

Includes retry logic for transient connection failures using tenacity:
opening is retried with exponential backoff, and a statement that fails
because the connection dropped is replayed once on a fresh connection.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Sequence, TypeVar

from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from axion.config import Settings, get_settings
from axion.errors import ConnectionError, QueryExecutionError
from axion.infrastructure.dialects import SQLITE_MEMORY, DriverSpec, get_driver
from axion.utils.logging import get_logger

log = get_logger(__name__)

T = TypeVar("T")


def build_dsn(settings: Optional[Settings] = None) -> str:
    """
    Compose a display DSN from settings. The password is never included.
    """
    settings = settings or get_settings()
    driver = settings.driver
    if driver == "sqlite":
        if settings.database == SQLITE_MEMORY:
            return f"sqlite://{SQLITE_MEMORY}"
        return f"sqlite:///{settings.sqlite_path()}"
    return (
        f"{driver}://{settings.db_username}@{settings.db_host}:{settings.resolved_port}"
        f"/{settings.database}"
    )


def _open_raw(spec: DriverSpec, settings: Settings) -> Any:
    """Open a DB-API connection, retrying transient driver errors."""
    retrying = Retrying(
        stop=stop_after_attempt(max(1, settings.db_connect_attempts)),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type(spec.transient_errors),
        reraise=True,
    )
    raw = retrying(spec.open, settings)
    spec.apply_session_timeout(raw, settings.db_statement_timeout_ms)
    return raw


class Connection:
    """
    Caller-owned handle over one DB-API connection.

    Every statement commits on its own (autocommit). Rows come back as plain
    dicts regardless of driver.

    Example
    -------
        with connect() as conn:
            rows = conn.fetch_all("SELECT * FROM users WHERE id = ?", [1],
                                  table="users", operation="select")
    """

    def __init__(
        self,
        raw: Any,
        driver: DriverSpec,
        reopen: Optional[Callable[[], Any]] = None,
        statement_timeout_ms: int = 0,
    ) -> None:
        self._raw = raw
        self.driver = driver
        self._reopen = reopen
        self.statement_timeout_ms = statement_timeout_ms
        self._closed = False

    @property
    def placeholder(self) -> str:
        return self.driver.placeholder

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def raw(self) -> Any:
        """The underlying DB-API connection (for DDL in scripts and tests)."""
        return self._raw

    def _reconnect(self, retry_state: RetryCallState) -> None:
        log.warning(
            "Database connection lost, reconnecting once",
            extra={"driver": self.driver.name, "attempt": retry_state.attempt_number},
        )
        if self._reopen is None:
            raise ConnectionError("Database connection lost and no way to reopen it")
        try:
            self._raw.close()
        except self.driver.error:
            pass  # Already gone
        try:
            self._raw = self._reopen()
        except (self.driver.error, OSError) as exc:
            raise ConnectionError(f"Database reconnection failed: {exc}") from exc

    def _run(self, work: Callable[[Any], T], table: str, operation: str) -> T:
        if self._closed:
            raise ConnectionError("Connection is closed")
        retrying = Retrying(
            stop=stop_after_attempt(2),
            retry=retry_if_exception(lambda exc: self.driver.is_connection_lost(self._raw, exc)),
            before_sleep=self._reconnect,
            reraise=True,
        )
        try:
            for attempt in retrying:
                with attempt:
                    with self.driver.statement_timeout(self._raw, self.statement_timeout_ms):
                        return work(self._raw)
        except self.driver.error as exc:
            log.error(
                "Statement failed",
                extra={"table": table, "operation": operation, "error": str(exc)},
            )
            raise QueryExecutionError(table, operation, str(exc)) from exc
        raise AssertionError("unreachable")  # pragma: no cover

    def _cursor_call(self, sql: str, params: Sequence[Any], consume: Callable[[Any], T]) -> Callable[[Any], T]:
        def work(raw: Any) -> T:
            cur = self.driver.cursor(raw)
            try:
                cur.execute(sql, tuple(params))
                return consume(cur)
            finally:
                cur.close()

        return work

    def fetch_all(
        self, sql: str, params: Sequence[Any] = (), *, table: str = "", operation: str = "select"
    ) -> List[Dict[str, Any]]:
        log.debug(sql, extra={"table": table, "operation": operation, "params": list(params)})
        return self._run(
            self._cursor_call(
                sql, params, lambda cur: [self.driver.row_to_dict(row) for row in cur.fetchall()]
            ),
            table,
            operation,
        )

    def fetch_one(
        self, sql: str, params: Sequence[Any] = (), *, table: str = "", operation: str = "select"
    ) -> Optional[Dict[str, Any]]:
        log.debug(sql, extra={"table": table, "operation": operation, "params": list(params)})

        def consume(cur: Any) -> Optional[Dict[str, Any]]:
            row = cur.fetchone()
            # Drain so mysql does not complain about unread results.
            cur.fetchall()
            return None if row is None else self.driver.row_to_dict(row)

        return self._run(self._cursor_call(sql, params, consume), table, operation)

    def execute(
        self, sql: str, params: Sequence[Any] = (), *, table: str = "", operation: str = "execute"
    ) -> int:
        """Run a write statement and return the affected-row count."""
        log.debug(sql, extra={"table": table, "operation": operation, "params": list(params)})
        return self._run(
            self._cursor_call(sql, params, lambda cur: max(cur.rowcount, 0)), table, operation
        )

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._raw.close()
        except self.driver.error:
            pass  # Best-effort cleanup

    def __enter__(self) -> "Connection":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def connect(settings: Optional[Settings] = None) -> Connection:
    """
    Open a new connection for the configured DB_CONNECTION driver.

    Parameters
    ----------
    settings : Settings | None
        Explicit settings; defaults to the cached environment settings.

    Returns
    -------
    Connection
        A caller-owned connection handle.

    Raises
    ------
    ConnectionError
        If the driver is unsupported or the connection cannot be opened.
        The message carries the underlying cause.
    """
    settings = settings or get_settings()
    try:
        spec = get_driver(settings.driver)
    except ConnectionError:
        log.error("Unsupported database driver", extra={"driver": settings.db_connection})
        raise

    try:
        raw = _open_raw(spec, settings)
    except (spec.error, OSError) as exc:
        log.error(
            "Database connection failed",
            extra={"driver": spec.name, "dsn": build_dsn(settings), "error": str(exc)},
        )
        raise ConnectionError(f"Database connection failed: {exc}") from exc

    log.debug("Database connection opened", extra={"driver": spec.name, "dsn": build_dsn(settings)})
    return Connection(
        raw,
        spec,
        reopen=lambda: _open_raw(spec, settings),
        statement_timeout_ms=settings.db_statement_timeout_ms,
    )


__all__ = ["Connection", "build_dsn", "connect"]
