"""
Query and mutation execution over a caller-owned `Connection`.

Read operations (`fetch_all`, `fetch_first`, `count`, `paginate`) return
plain dict records. Mutations (`insert`, `update`, `delete`) restrict payloads
to an allow-list of writable columns and refuse to run without a WHERE
condition where that would touch every row.
"""

from __future__ import annotations

import math
from typing import Any, Collection, Dict, List, Mapping, Optional, Sequence, TypedDict

from axion.errors import InvalidQueryError, UnsafeDeleteError, UnsafeUpdateError
from axion.infrastructure.db_factory import Connection
from axion.infrastructure.dialects import DriverSpec
from axion.query.compiler import (
    OrderBy,
    compile_count,
    compile_delete,
    compile_insert,
    compile_select,
    compile_update,
)
from axion.query.conditions import Condition
from axion.query.where import to_conditions, where_clause
from axion.utils.logging import get_logger

log = get_logger(__name__)

Record = Dict[str, Any]


class Page(TypedDict):
    """
    One page of results plus the numbers needed to render pagination links.
    """

    data: List[Any]
    total: int
    per_page: int
    current_page: int
    last_page: int


def restrict_to_fillable(
    payload: Mapping[str, Any], fillable: Optional[Collection[str]]
) -> Dict[str, Any]:
    """Drop payload keys that are not in `fillable` (None allows everything)."""
    if fillable is None:
        return dict(payload)
    return {column: value for column, value in payload.items() if column in fillable}


def bind_value(
    column: str, value: Any, integer_columns: Collection[str] = (), native_bool: bool = False
) -> Any:
    """
    Coerce a value for binding.

    Integer columns bind as `int` (an empty string becomes NULL). Booleans bind
    as 0/1 unless the driver has a native boolean type (`native_bool`). None
    binds as NULL and everything else goes to the driver as-is.
    """
    if column in integer_columns:
        if value is None or value == "":
            return None
        try:
            return int(value)
        except (TypeError, ValueError):
            raise InvalidQueryError(f"Column {column!r} expects an integer, got {value!r}") from None
    if isinstance(value, bool) and not native_bool:
        return int(value)
    return value


def _bind_all(
    values: Mapping[str, Any], integer_columns: Collection[str], driver: DriverSpec
) -> Dict[str, Any]:
    return {
        column: bind_value(column, value, integer_columns, driver.native_bool)
        for column, value in values.items()
    }


# --- reads -----------------------------------------------------------------


def fetch_all(
    connection: Connection,
    table: str,
    conditions: Sequence[Condition] = (),
    order_by: Optional[OrderBy] = None,
    limit: Optional[int] = None,
    offset: Optional[int] = None,
) -> List[Record]:
    statement = compile_select(
        table, conditions, connection.driver, order_by=order_by, limit=limit, offset=offset
    )
    return connection.fetch_all(*statement, table=table, operation="select")


def fetch_first(
    connection: Connection,
    table: str,
    conditions: Sequence[Condition] = (),
    order_by: Optional[OrderBy] = None,
) -> Optional[Record]:
    """First matching record, or None when nothing matches."""
    statement = compile_select(table, conditions, connection.driver, order_by=order_by, limit=1)
    return connection.fetch_one(*statement, table=table, operation="select")


def count(connection: Connection, table: str, conditions: Sequence[Condition] = ()) -> int:
    statement = compile_count(table, conditions, connection.driver)
    row = connection.fetch_one(*statement, table=table, operation="count")
    if not row:
        return 0
    return int(row.get("aggregate") or 0)


def paginate(
    connection: Connection,
    table: str,
    conditions: Sequence[Condition] = (),
    per_page: int = 10,
    page: int = 1,
    order_by: Optional[OrderBy] = None,
) -> Page:
    """
    Fetch one page plus the total row count.

    Runs two statements (COUNT, then SELECT) sharing the same WHERE; they are
    not atomic, so the total may drift from the page under concurrent writes.
    """
    if per_page < 1:
        raise ValueError(f"per_page must be >= 1, got {per_page}")
    if page < 1:
        raise ValueError(f"page must be >= 1, got {page}")

    total = count(connection, table, conditions)
    data = fetch_all(
        connection,
        table,
        conditions,
        order_by=order_by,
        limit=per_page,
        offset=(page - 1) * per_page,
    )
    return Page(
        data=data,
        total=total,
        per_page=per_page,
        current_page=page,
        last_page=math.ceil(total / per_page),
    )


# --- writes ----------------------------------------------------------------


def insert(
    connection: Connection,
    table: str,
    payload: Mapping[str, Any],
    fillable: Optional[Collection[str]] = None,
    integer_columns: Collection[str] = (),
) -> bool:
    values = restrict_to_fillable(payload, fillable)
    dropped = sorted(set(payload) - set(values))
    if dropped:
        log.debug("Dropped non-fillable columns", extra={"table": table, "columns": dropped})
    bound = _bind_all(values, integer_columns, connection.driver)
    statement = compile_insert(table, bound, connection.driver)
    connection.execute(*statement, table=table, operation="insert")
    return True


def update(
    connection: Connection,
    table: str,
    where: Any,
    payload: Mapping[str, Any],
    fillable: Optional[Collection[str]] = None,
    integer_columns: Collection[str] = (),
) -> int:
    """
    Update matching rows and return the affected-row count.

    An empty where raises `UnsafeUpdateError`. A payload with no writable
    columns returns 0 without running any SQL.
    """
    conditions = to_conditions(where_clause(where))
    if not conditions:
        log.error("Refused update without conditions", extra={"table": table})
        raise UnsafeUpdateError(table)

    values = restrict_to_fillable(payload, fillable)
    if not values:
        log.warning(
            "Update skipped: no writable columns in payload",
            extra={"table": table, "columns": sorted(payload)},
        )
        return 0

    bound = _bind_all(values, integer_columns, connection.driver)
    statement = compile_update(table, bound, conditions, connection.driver)
    return connection.execute(*statement, table=table, operation="update")


def delete(connection: Connection, table: str, where: Any) -> int:
    """
    Delete matching rows and return the affected-row count.

    An empty where raises `UnsafeDeleteError`; deleting every row is never
    implicit.
    """
    conditions = to_conditions(where_clause(where))
    if not conditions:
        log.error("Refused delete without conditions", extra={"table": table})
        raise UnsafeDeleteError(table)
    statement = compile_delete(table, conditions, connection.driver)
    return connection.execute(*statement, table=table, operation="delete")


__all__ = [
    "Page",
    "Record",
    "bind_value",
    "count",
    "delete",
    "fetch_all",
    "fetch_first",
    "insert",
    "paginate",
    "restrict_to_fillable",
    "update",
]
