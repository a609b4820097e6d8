"""
SQL compilation for SELECT, COUNT, INSERT, UPDATE and DELETE.

Every function is pure: it returns a `Statement` (SQL text plus positional
parameters) for the given driver and never touches a connection.
"""

from __future__ import annotations

from typing import Any, List, Mapping, NamedTuple, Optional, Sequence, Tuple

from axion.errors import InvalidQueryError
from axion.infrastructure.dialects import SQLITE, DriverSpec
from axion.query.conditions import Condition, render_conditions, validate_identifier

DIRECTIONS = ("ASC", "DESC")

OrderBy = Tuple[str, str]


class Statement(NamedTuple):
    sql: str
    params: List[Any]


def normalize_order(column: str, direction: str = "ASC") -> OrderBy:
    normalized = str(direction).strip().upper()
    if normalized not in DIRECTIONS:
        raise InvalidQueryError(f"Invalid order direction {direction!r}; use ASC or DESC")
    return validate_identifier(column), normalized


def _join(*parts: str) -> str:
    return " ".join(part for part in parts if part)


def compile_select(
    table: str,
    conditions: Sequence[Condition] = (),
    driver: DriverSpec = SQLITE,
    order_by: Optional[OrderBy] = None,
    limit: Optional[int] = None,
    offset: Optional[int] = None,
) -> Statement:
    """
    SELECT * with clauses in WHERE, ORDER BY, LIMIT, OFFSET order.
    """
    where_sql, params = render_conditions(conditions, driver.placeholder)
    parts = [f"SELECT * FROM {validate_identifier(table)}", where_sql]

    if order_by is not None:
        column, direction = normalize_order(*order_by)
        parts.append(f"ORDER BY {column} {direction}")

    if limit is not None:
        parts.append(f"LIMIT {driver.placeholder}")
        params.append(int(limit))
    elif offset is not None and driver.no_limit is not None:
        parts.append(f"LIMIT {driver.no_limit}")

    if offset is not None:
        parts.append(f"OFFSET {driver.placeholder}")
        params.append(int(offset))

    return Statement(_join(*parts), params)


def compile_count(
    table: str, conditions: Sequence[Condition] = (), driver: DriverSpec = SQLITE
) -> Statement:
    where_sql, params = render_conditions(conditions, driver.placeholder)
    return Statement(
        _join(f"SELECT COUNT(*) AS aggregate FROM {validate_identifier(table)}", where_sql), params
    )


def compile_insert(table: str, values: Mapping[str, Any], driver: DriverSpec = SQLITE) -> Statement:
    if not values:
        raise InvalidQueryError(f"Nothing to insert into {table!r}: no writable columns in payload")
    columns = [validate_identifier(column) for column in values]
    placeholders = ", ".join(driver.placeholder for _ in columns)
    sql = f"INSERT INTO {validate_identifier(table)} ({', '.join(columns)}) VALUES ({placeholders})"
    return Statement(sql, list(values.values()))


def compile_update(
    table: str,
    values: Mapping[str, Any],
    conditions: Sequence[Condition],
    driver: DriverSpec = SQLITE,
) -> Statement:
    if not values:
        raise InvalidQueryError(f"Nothing to update on {table!r}: no writable columns in payload")
    assignments = ", ".join(
        f"{validate_identifier(column)} = {driver.placeholder}" for column in values
    )
    where_sql, where_params = render_conditions(conditions, driver.placeholder)
    sql = _join(f"UPDATE {validate_identifier(table)} SET {assignments}", where_sql)
    return Statement(sql, list(values.values()) + where_params)


def compile_delete(
    table: str, conditions: Sequence[Condition], driver: DriverSpec = SQLITE
) -> Statement:
    where_sql, params = render_conditions(conditions, driver.placeholder)
    return Statement(_join(f"DELETE FROM {validate_identifier(table)}", where_sql), params)


__all__ = [
    "DIRECTIONS",
    "OrderBy",
    "Statement",
    "compile_count",
    "compile_delete",
    "compile_insert",
    "compile_select",
    "compile_update",
    "normalize_order",
]
