"""
The three `where` shapes accepted by update and delete.

- `ById(value)`: a scalar, meaning `id = value`
- `ByColumns({...})`: AND-joined equality on each column
- `ByConditions((...))`: explicit conditions with operators

`where_clause()` turns raw caller input into one of them and `to_conditions()`
flattens any of them into a condition sequence for rendering.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Tuple, Union

from axion.errors import InvalidQueryError
from axion.query.conditions import (
    Condition,
    ConditionBuilder,
    Conjunction,
    make_condition,
    validate_identifier,
)

ID_COLUMN = "id"


@dataclass(frozen=True)
class ById:
    value: Any


@dataclass(frozen=True)
class ByColumns:
    columns: Mapping[str, Any]


@dataclass(frozen=True)
class ByConditions:
    conditions: Tuple[Condition, ...]


WhereClause = Union[ById, ByColumns, ByConditions]


def _condition_from_item(item: Any) -> Condition:
    if isinstance(item, Condition):
        return item
    if isinstance(item, Mapping):
        missing = [key for key in ("column", "value") if key not in item]
        if missing:
            raise InvalidQueryError(f"Where condition {item!r} is missing {', '.join(missing)}")
        return make_condition(
            Conjunction.AND, item["column"], item.get("operator", "="), item["value"]
        )
    if isinstance(item, (tuple, list)):
        if len(item) == 3:
            return make_condition(Conjunction.AND, item[0], item[1], item[2])
        if len(item) == 2:
            return make_condition(Conjunction.AND, item[0], item[1])
    raise InvalidQueryError(f"Cannot interpret {item!r} as a where condition")


def where_clause(raw: Any) -> WhereClause:
    """
    Classify raw `where` input.

    Strings and numbers are ids, mappings are column equalities, condition
    builders and sequences of `(column, operator, value)` tuples are explicit
    conditions.
    """
    if isinstance(raw, (ById, ByColumns, ByConditions)):
        return raw
    if raw is None or isinstance(raw, (str, bytes, int, float)):
        return ById(raw)
    if isinstance(raw, Mapping):
        for column in raw:
            validate_identifier(column)
        return ByColumns(dict(raw))
    if isinstance(raw, ConditionBuilder):
        return ByConditions(raw.conditions)
    if isinstance(raw, (tuple, list)):
        return ByConditions(tuple(_condition_from_item(item) for item in raw))
    raise InvalidQueryError(f"Unsupported where clause: {raw!r}")


def to_conditions(where: WhereClause) -> Tuple[Condition, ...]:
    if isinstance(where, ById):
        if where.value is None or where.value == "":
            return ()
        return (Condition(Conjunction.AND, ID_COLUMN, "=", where.value),)
    if isinstance(where, ByColumns):
        return tuple(
            Condition(Conjunction.AND, column, "=", value) for column, value in where.columns.items()
        )
    if isinstance(where, ByConditions):
        return tuple(where.conditions)
    raise InvalidQueryError(f"Unsupported where clause: {where!r}")


__all__ = [
    "ById",
    "ByColumns",
    "ByConditions",
    "ID_COLUMN",
    "WhereClause",
    "to_conditions",
    "where_clause",
]
