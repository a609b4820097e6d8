"""
Fluent query builder over plain tables.

    qb = QueryBuilder(conn)
    adults = qb.table("users").where("age", ">=", 18).order_by("name").limit(20).get()
    qb.table("users").where("id", 7).update({"role": "admin"})

`table()` starts a new query: conditions, ordering, limit and offset from the
previous query are discarded.
"""

from __future__ import annotations

from typing import Any, Collection, List, Mapping, Optional, Tuple

from axion.errors import InvalidQueryError
from axion.infrastructure.db_factory import Connection
from axion.query import executor
from axion.query.compiler import OrderBy, Statement, compile_select, normalize_order
from axion.query.conditions import MISSING, Condition, ConditionBuilder, validate_identifier
from axion.query.executor import Page, Record
from axion.query.where import ByConditions


class QueryBuilder:
    """Chainable SELECT/INSERT/UPDATE/DELETE builder returning dict records."""

    def __init__(self, connection: Connection, table: Optional[str] = None) -> None:
        self.connection = connection
        self._table: Optional[str] = None
        self._conditions = ConditionBuilder()
        self._order_by: Optional[OrderBy] = None
        self._limit: Optional[int] = None
        self._offset: Optional[int] = None
        if table is not None:
            self.table(table)

    # --- state -------------------------------------------------------------

    def table(self, name: str) -> "QueryBuilder":
        self._table = validate_identifier(name)
        self._conditions.reset()
        self._order_by = None
        self._limit = None
        self._offset = None
        return self

    def where(self, column: str, operator_or_value: Any, value: Any = MISSING) -> "QueryBuilder":
        self._conditions.where(column, operator_or_value, value)
        return self

    def or_where(self, column: str, operator_or_value: Any, value: Any = MISSING) -> "QueryBuilder":
        self._conditions.or_where(column, operator_or_value, value)
        return self

    def order_by(self, column: str, direction: str = "ASC") -> "QueryBuilder":
        self._order_by = normalize_order(column, direction)
        return self

    def limit(self, limit: int) -> "QueryBuilder":
        if limit < 0:
            raise InvalidQueryError(f"limit must be >= 0, got {limit}")
        self._limit = int(limit)
        return self

    def offset(self, offset: int) -> "QueryBuilder":
        if offset < 0:
            raise InvalidQueryError(f"offset must be >= 0, got {offset}")
        self._offset = int(offset)
        return self

    @property
    def conditions(self) -> Tuple[Condition, ...]:
        return self._conditions.conditions

    def _require_table(self) -> str:
        if self._table is None:
            raise InvalidQueryError("No table selected; call table() first")
        return self._table

    def to_sql(self) -> Statement:
        """The SELECT statement `get()` would run."""
        return compile_select(
            self._require_table(),
            self.conditions,
            self.connection.driver,
            order_by=self._order_by,
            limit=self._limit,
            offset=self._offset,
        )

    # --- reads -------------------------------------------------------------

    def get(self) -> List[Record]:
        return executor.fetch_all(
            self.connection,
            self._require_table(),
            self.conditions,
            order_by=self._order_by,
            limit=self._limit,
            offset=self._offset,
        )

    def first(self) -> Optional[Record]:
        return executor.fetch_first(
            self.connection, self._require_table(), self.conditions, order_by=self._order_by
        )

    def count(self) -> int:
        return executor.count(self.connection, self._require_table(), self.conditions)

    def paginate(self, per_page: int = 10, page: int = 1) -> Page:
        return executor.paginate(
            self.connection,
            self._require_table(),
            self.conditions,
            per_page=per_page,
            page=page,
            order_by=self._order_by,
        )

    # --- writes ------------------------------------------------------------

    def insert(self, data: Mapping[str, Any], fillable: Optional[Collection[str]] = None) -> bool:
        return executor.insert(self.connection, self._require_table(), data, fillable=fillable)

    def update(self, data: Mapping[str, Any], fillable: Optional[Collection[str]] = None) -> int:
        """Update rows matching the chained conditions; none raises UnsafeUpdateError."""
        return executor.update(
            self.connection,
            self._require_table(),
            ByConditions(self.conditions),
            data,
            fillable=fillable,
        )

    def delete(self) -> int:
        """Delete rows matching the chained conditions; none raises UnsafeDeleteError."""
        return executor.delete(self.connection, self._require_table(), ByConditions(self.conditions))


__all__ = ["QueryBuilder"]
