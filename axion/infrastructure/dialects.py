"""
Driver descriptions for the databases Axion can talk to.

Each `DriverSpec` bundles what differs between sqlite, MySQL and PostgreSQL:
how to open a connection from `Settings`, the DB-API placeholder, how to
express "no LIMIT" before an OFFSET, how to arm a statement timeout, and which
driver exceptions mean "the connection is gone".
"""

from __future__ import annotations

import contextlib
import sqlite3
import time
from dataclasses import dataclass, field
from typing import Any, Callable, ContextManager, Dict, Iterator, Optional, Tuple, Type

import mysql.connector
import psycopg
from psycopg.rows import dict_row

from axion.config import Settings
from axion.errors import UnsupportedDriverError

SQLITE_MEMORY = ":memory:"

# sqlite calls the progress handler every N virtual machine instructions.
_SQLITE_PROGRESS_STEPS = 1_000


def _no_session_timeout(raw: Any, timeout_ms: int) -> None:
    return None


def _noop_timeout(raw: Any, timeout_ms: int) -> ContextManager[None]:
    return contextlib.nullcontext()


@dataclass(frozen=True)
class DriverSpec:
    """
    Everything driver-specific the query layer needs.

    Attributes
    ----------
    name : str
        Value of DB_CONNECTION selecting this driver.
    placeholder : str
        Positional DB-API placeholder ("?" or "%s").
    no_limit : str | None
        LIMIT literal meaning "unbounded" for engines that reject a bare OFFSET.
    error : type
        Root exception class of the DB-API driver.
    transient_errors : tuple
        Exceptions worth retrying while opening a connection.
    native_bool : bool
        The driver binds Python bools to a real boolean type; otherwise they
        bind as 0/1.
    """

    name: str
    placeholder: str
    no_limit: Optional[str]
    error: Type[BaseException]
    transient_errors: Tuple[Type[BaseException], ...]
    open: Callable[[Settings], Any]
    cursor: Callable[[Any], Any]
    is_connection_lost: Callable[[Any, BaseException], bool]
    native_bool: bool = False
    apply_session_timeout: Callable[[Any, int], None] = field(default=_no_session_timeout)
    statement_timeout: Callable[[Any, int], ContextManager[None]] = field(default=_noop_timeout)

    def row_to_dict(self, row: Any) -> Dict[str, Any]:
        return dict(row)


# --- sqlite -----------------------------------------------------------------


def _open_sqlite(settings: Settings) -> sqlite3.Connection:
    if settings.database == SQLITE_MEMORY:
        target = SQLITE_MEMORY
    else:
        path = settings.sqlite_path()
        if not path.exists():
            path.parent.mkdir(mode=0o755, parents=True, exist_ok=True)
            path.touch()
        target = str(path)
    # isolation_level=None: every statement commits on its own.
    raw = sqlite3.connect(target, isolation_level=None)
    raw.row_factory = sqlite3.Row
    return raw


@contextlib.contextmanager
def _sqlite_statement_timeout(raw: sqlite3.Connection, timeout_ms: int) -> Iterator[None]:
    if timeout_ms <= 0:
        yield
        return
    deadline = time.monotonic() + timeout_ms / 1000

    def _abort_when_late() -> int:
        # Non-zero return interrupts the running statement.
        return 1 if time.monotonic() > deadline else 0

    raw.set_progress_handler(_abort_when_late, _SQLITE_PROGRESS_STEPS)
    try:
        yield
    finally:
        raw.set_progress_handler(None, 0)


SQLITE = DriverSpec(
    name="sqlite",
    placeholder="?",
    no_limit="-1",
    error=sqlite3.Error,
    transient_errors=(),
    open=_open_sqlite,
    cursor=lambda raw: raw.cursor(),
    is_connection_lost=lambda raw, exc: False,
    statement_timeout=_sqlite_statement_timeout,
)


# --- MySQL ------------------------------------------------------------------


def _open_mysql(settings: Settings) -> Any:
    return mysql.connector.connect(
        host=settings.db_host,
        port=settings.resolved_port,
        database=settings.database,
        user=settings.db_username,
        password=settings.db_password,
        charset="utf8mb4",
        autocommit=True,
    )


def _mysql_session_timeout(raw: Any, timeout_ms: int) -> None:
    if timeout_ms <= 0:
        return
    cur = raw.cursor()
    try:
        cur.execute(f"SET SESSION max_execution_time = {int(timeout_ms)}")
    finally:
        cur.close()


MYSQL = DriverSpec(
    name="mysql",
    placeholder="%s",
    no_limit="18446744073709551615",
    error=mysql.connector.Error,
    transient_errors=(mysql.connector.errors.InterfaceError, mysql.connector.errors.OperationalError),
    open=_open_mysql,
    cursor=lambda raw: raw.cursor(dictionary=True),
    is_connection_lost=lambda raw, exc: (
        isinstance(exc, (mysql.connector.errors.InterfaceError, mysql.connector.errors.OperationalError))
        and not raw.is_connected()
    ),
    apply_session_timeout=_mysql_session_timeout,
)


# --- PostgreSQL -------------------------------------------------------------


def _open_pgsql(settings: Settings) -> psycopg.Connection:
    return psycopg.connect(
        host=settings.db_host,
        port=settings.resolved_port,
        dbname=settings.database,
        user=settings.db_username,
        password=settings.db_password,
        autocommit=True,
        row_factory=dict_row,
    )


def _pgsql_session_timeout(raw: psycopg.Connection, timeout_ms: int) -> None:
    if timeout_ms <= 0:
        return
    with raw.cursor() as cur:
        cur.execute("SELECT set_config('statement_timeout', %s, false)", (str(int(timeout_ms)),))


PGSQL = DriverSpec(
    name="pgsql",
    placeholder="%s",
    no_limit=None,
    error=psycopg.Error,
    native_bool=True,
    transient_errors=(psycopg.OperationalError, psycopg.InterfaceError),
    open=_open_pgsql,
    cursor=lambda raw: raw.cursor(),
    is_connection_lost=lambda raw, exc: (
        isinstance(exc, (psycopg.OperationalError, psycopg.InterfaceError)) and raw.closed
    ),
    apply_session_timeout=_pgsql_session_timeout,
)


DRIVERS: Dict[str, DriverSpec] = {spec.name: spec for spec in (SQLITE, MYSQL, PGSQL)}


def get_driver(name: str) -> DriverSpec:
    """Look up a driver by its DB_CONNECTION name."""
    try:
        return DRIVERS[name.strip().lower()]
    except KeyError:
        raise UnsupportedDriverError(name) from None


__all__ = ["DRIVERS", "DriverSpec", "MYSQL", "PGSQL", "SQLITE", "SQLITE_MEMORY", "get_driver"]
