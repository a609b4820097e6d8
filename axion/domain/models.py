"""
Active-record style models for Axion.

A model declares its table, the columns callers may write, whether it keeps
`created_at`/`updated_at` timestamps, and which columns bind as integers.
Typed fields are ordinary Pydantic fields; rows are mapped onto them with the
"nullable-or-present" rule (see `Model.hydrate`).

    class User(Model):
        table = "users"
        fillable = frozenset({"name", "email", "role"})

        id: int
        name: str
        email: Optional[str] = None
        role: str = "member"

    with connect() as conn:
        User.create(conn, {"name": "Ada", "email": "ada@example.com"})
        admins = User.where(conn, "role", "admin").order_by("name").get()
"""
from __future__ import annotations

import types
import typing
from datetime import datetime, timezone
from typing import Any, ClassVar, Dict, FrozenSet, Generic, List, Mapping, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, ConfigDict, PrivateAttr, ValidationError
from pydantic.fields import FieldInfo

from axion.errors import AxionError, HydrationError, InvalidQueryError
from axion.infrastructure.db_factory import Connection
from axion.query import executor
from axion.query.compiler import OrderBy, normalize_order
from axion.query.conditions import MISSING, Condition, ConditionBuilder
from axion.query.executor import Page
from axion.query.where import ID_COLUMN, ByConditions, where_clause

M = TypeVar("M", bound="Model")

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
TIMESTAMP_COLUMNS = ("created_at", "updated_at")


def utc_timestamp() -> str:
    """Current UTC time as `YYYY-MM-DD HH:MM:SS`."""
    return datetime.now(timezone.utc).strftime(TIMESTAMP_FORMAT)


def _accepts_none(field: FieldInfo) -> bool:
    annotation = field.annotation
    if annotation is None or annotation is Any or annotation is type(None):
        return True
    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is types.UnionType:
        return type(None) in typing.get_args(annotation)
    return False


class Model(BaseModel):
    """
    Base class for table-backed entities.

    Class attributes
    ----------------
    table : str
        Table name.
    fillable : frozenset[str]
        Columns that `create`/`update` may write; other payload keys are dropped.
    timestamps : bool
        Stamp `created_at`/`updated_at` (UTC) on create and `updated_at` on update.
    integer_columns : frozenset[str]
        Columns bound as integers on write (an empty string becomes NULL).
    """

    table: ClassVar[str] = ""
    fillable: ClassVar[FrozenSet[str]] = frozenset()
    timestamps: ClassVar[bool] = True
    integer_columns: ClassVar[FrozenSet[str]] = frozenset({"id"})

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    _connection: Optional[Connection] = PrivateAttr(default=None)

    # --- declarations ------------------------------------------------------

    @classmethod
    def table_name(cls) -> str:
        if not cls.table:
            raise AxionError(f"{cls.__name__} does not declare a table")
        return cls.table

    @classmethod
    def writable_columns(cls) -> FrozenSet[str]:
        """`fillable` plus the timestamp columns when timestamps are on."""
        columns = frozenset(cls.fillable)
        if cls.timestamps:
            columns |= frozenset(TIMESTAMP_COLUMNS)
        return columns

    # --- hydration ---------------------------------------------------------

    @classmethod
    def hydrate(cls: Type[M], row: Mapping[str, Any], connection: Optional[Connection] = None) -> M:
        """
        Build an instance from a database row.

        Each declared field takes the same-named column unless the column is
        NULL and the field does not accept None; the field then keeps its
        declared default. Undeclared columns are kept as extra attributes; one
        whose name matches a model member (`count`, `where`, ...) stays in
        `model_extra` and is read with `get_attribute`.

        Raises
        ------
        HydrationError
            A NULL column maps onto a non-nullable field without a default, or
            a value fails field validation.
        """
        values: Dict[str, Any] = {}
        for name, field in cls.model_fields.items():
            if name not in row:
                continue
            value = row[name]
            if value is None and not _accepts_none(field):
                if field.is_required():
                    raise HydrationError(
                        cls.__name__,
                        name,
                        f"Column {cls.table}.{name} is NULL but {cls.__name__}.{name} "
                        "is not nullable and has no default",
                    )
                continue
            values[name] = value
        for column, value in row.items():
            if column not in cls.model_fields:
                values[column] = value

        try:
            instance = cls.model_validate(values)
        except ValidationError as exc:
            first = exc.errors()[0]
            column = ".".join(str(part) for part in first.get("loc", ())) or "?"
            raise HydrationError(cls.__name__, column, f"Cannot hydrate {cls.__name__}: {exc}") from exc
        instance._connection = connection
        return instance

    # --- entry points ------------------------------------------------------

    @classmethod
    def query(cls: Type[M], connection: Connection) -> "ModelQuery[M]":
        return ModelQuery(cls, connection)

    @classmethod
    def where(
        cls: Type[M], connection: Connection, column: str, operator_or_value: Any, value: Any = MISSING
    ) -> "ModelQuery[M]":
        return cls.query(connection).where(column, operator_or_value, value)

    @classmethod
    def all(cls: Type[M], connection: Connection) -> List[M]:
        return cls.query(connection).get()

    @classmethod
    def find(cls: Type[M], connection: Connection, value: Any) -> Optional[M]:
        return cls.query(connection).where(ID_COLUMN, value).first()

    @classmethod
    def find_by(cls: Type[M], connection: Connection, column: str, value: Any) -> Optional[M]:
        return cls.query(connection).where(column, value).first()

    @classmethod
    def first_where(cls: Type[M], connection: Connection, conditions: Mapping[str, Any]) -> Optional[M]:
        query = cls.query(connection)
        for column, value in conditions.items():
            query.where(column, value)
        return query.first()

    @classmethod
    def count(cls, connection: Connection) -> int:
        return cls.query(connection).count()

    @classmethod
    def paginate(cls, connection: Connection, per_page: int = 10, page: int = 1) -> Page:
        return cls.query(connection).paginate(per_page, page)

    @classmethod
    def create(cls, connection: Connection, data: Mapping[str, Any]) -> bool:
        payload = dict(data)
        if cls.timestamps:
            now = utc_timestamp()
            payload["created_at"] = now
            payload["updated_at"] = now
        return executor.insert(
            connection,
            cls.table_name(),
            payload,
            fillable=cls.writable_columns(),
            integer_columns=cls.integer_columns,
        )

    @classmethod
    def update_where(cls, connection: Connection, where: Any, data: Mapping[str, Any]) -> int:
        """
        Update rows matching `where` (id, column mapping or condition list).

        Returns the affected-row count; 0 without touching the database when
        `data` holds no fillable column.
        """
        clause = where_clause(where)
        payload = executor.restrict_to_fillable(data, cls.fillable)
        if payload and cls.timestamps:
            payload["updated_at"] = utc_timestamp()
        return executor.update(
            connection,
            cls.table_name(),
            clause,
            payload,
            fillable=cls.writable_columns(),
            integer_columns=cls.integer_columns,
        )

    @classmethod
    def update_by(cls, connection: Connection, column: str, value: Any, data: Mapping[str, Any]) -> int:
        return cls.update_where(connection, {column: value}, data)

    @classmethod
    def delete(cls, connection: Connection, where: Any) -> int:
        """Delete rows matching `where`; an empty where raises UnsafeDeleteError."""
        return executor.delete(connection, cls.table_name(), where_clause(where))

    # --- relations ---------------------------------------------------------

    def _resolve_connection(self, connection: Optional[Connection]) -> Connection:
        resolved = connection or self._connection
        if resolved is None:
            raise AxionError(
                f"{type(self).__name__} was not loaded from a connection; pass connection="
            )
        return resolved

    def get_attribute(self, name: str, default: Any = None) -> Any:
        """
        Column value by name, declared field or extra.

        Reaches extra columns whose names are shadowed by model members
        (`count`, `table`, `delete`, ...).
        """
        if name in type(self).model_fields:
            return getattr(self, name)
        return (self.model_extra or {}).get(name, default)

    def belongs_to(
        self,
        related: Type[M],
        foreign_key: str,
        owner_key: str = "id",
        connection: Optional[Connection] = None,
    ) -> Optional[M]:
        """The `related` row whose `owner_key` equals this row's `foreign_key`."""
        value = self.get_attribute(foreign_key, MISSING)
        if value is MISSING:
            return None
        return related.where(self._resolve_connection(connection), owner_key, value).first()

    def has_one(
        self,
        related: Type[M],
        foreign_key: str,
        local_key: str = "id",
        connection: Optional[Connection] = None,
    ) -> Optional[M]:
        value = self.get_attribute(local_key, MISSING)
        if value is MISSING:
            return None
        return related.where(self._resolve_connection(connection), foreign_key, value).first()

    def has_many(
        self,
        related: Type[M],
        foreign_key: str,
        local_key: str = "id",
        connection: Optional[Connection] = None,
    ) -> List[M]:
        value = self.get_attribute(local_key, MISSING)
        if value is MISSING:
            return []
        return related.where(self._resolve_connection(connection), foreign_key, value).get()


class ModelQuery(Generic[M]):
    """Chained conditions bound to a model class and a connection."""

    def __init__(self, model: Type[M], connection: Connection) -> None:
        self.model = model
        self.connection = connection
        self._conditions = ConditionBuilder()
        self._order_by: Optional[OrderBy] = None
        self._limit: Optional[int] = None
        self._offset: Optional[int] = None

    @property
    def conditions(self) -> Tuple[Condition, ...]:
        return self._conditions.conditions

    def where(self, column: str, operator_or_value: Any, value: Any = MISSING) -> "ModelQuery[M]":
        self._conditions.where(column, operator_or_value, value)
        return self

    def or_where(self, column: str, operator_or_value: Any, value: Any = MISSING) -> "ModelQuery[M]":
        self._conditions.or_where(column, operator_or_value, value)
        return self

    def order_by(self, column: str, direction: str = "ASC") -> "ModelQuery[M]":
        self._order_by = normalize_order(column, direction)
        return self

    def limit(self, limit: int) -> "ModelQuery[M]":
        if limit < 0:
            raise InvalidQueryError(f"limit must be >= 0, got {limit}")
        self._limit = int(limit)
        return self

    def offset(self, offset: int) -> "ModelQuery[M]":
        if offset < 0:
            raise InvalidQueryError(f"offset must be >= 0, got {offset}")
        self._offset = int(offset)
        return self

    def _hydrate_all(self, rows: List[Dict[str, Any]]) -> List[M]:
        return [self.model.hydrate(row, self.connection) for row in rows]

    def get(self) -> List[M]:
        rows = executor.fetch_all(
            self.connection,
            self.model.table_name(),
            self.conditions,
            order_by=self._order_by,
            limit=self._limit,
            offset=self._offset,
        )
        return self._hydrate_all(rows)

    def first(self) -> Optional[M]:
        row = executor.fetch_first(
            self.connection, self.model.table_name(), self.conditions, order_by=self._order_by
        )
        return None if row is None else self.model.hydrate(row, self.connection)

    def count(self) -> int:
        return executor.count(self.connection, self.model.table_name(), self.conditions)

    def paginate(self, per_page: int = 10, page: int = 1) -> Page:
        result = executor.paginate(
            self.connection,
            self.model.table_name(),
            self.conditions,
            per_page=per_page,
            page=page,
            order_by=self._order_by,
        )
        result["data"] = self._hydrate_all(result["data"])
        return result

    def update(self, data: Mapping[str, Any]) -> int:
        return self.model.update_where(self.connection, ByConditions(self.conditions), data)

    def delete(self) -> int:
        return self.model.delete(self.connection, ByConditions(self.conditions))


__all__ = ["Model", "ModelQuery", "TIMESTAMP_FORMAT", "utc_timestamp"]
