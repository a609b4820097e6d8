"""
WHERE-clause building blocks.

A `Condition` is one `(conjunction, column, operator, value)` entry. A
`ConditionBuilder` accumulates them in call order through `where()` /
`or_where()` and renders them as a WHERE fragment whose values are always
bound parameters.
"""

from __future__ import annotations

import enum
import re
from typing import Any, Iterable, List, NamedTuple, Sequence, Tuple

from axion.errors import InvalidQueryError

OPERATORS = frozenset({"=", "!=", "<>", "<", "<=", ">", ">=", "LIKE", "NOT LIKE"})

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


# Distinguishes `where("a", None)` (value None) from `where("a", "=")`.
MISSING: Any = _Missing()


class Conjunction(str, enum.Enum):
    AND = "AND"
    OR = "OR"


class Condition(NamedTuple):
    conjunction: Conjunction
    column: str
    operator: str
    value: Any


def validate_identifier(name: str) -> str:
    """
    Accept `column` or `table.column` style names only.

    Identifiers are interpolated into SQL text, values never are.
    """
    if not isinstance(name, str) or not _IDENTIFIER.match(name):
        raise InvalidQueryError(f"Invalid SQL identifier: {name!r}")
    return name


def normalize_operator(operator: str) -> str:
    normalized = " ".join(str(operator).split()).upper()
    if normalized not in OPERATORS:
        raise InvalidQueryError(
            f"Unsupported operator {operator!r}. Allowed: {', '.join(sorted(OPERATORS))}"
        )
    return normalized


def make_condition(
    conjunction: Conjunction, column: str, operator_or_value: Any, value: Any = MISSING
) -> Condition:
    """
    Build a condition from the two- or three-argument call form.

    Two arguments: the operator is `=` and the second argument is the value.
    Three arguments: the second argument is the operator.
    """
    validate_identifier(column)
    if value is MISSING:
        return Condition(conjunction, column, "=", operator_or_value)
    return Condition(conjunction, column, normalize_operator(operator_or_value), value)


def render_conditions(
    conditions: Sequence[Condition], placeholder: str = "?"
) -> Tuple[str, List[Any]]:
    """
    Render conditions as `WHERE ...` plus the ordered parameter list.

    The first condition's conjunction is dropped; an empty sequence renders
    as an empty string.
    """
    if not conditions:
        return "", []
    clauses: List[str] = []
    params: List[Any] = []
    for index, cond in enumerate(conditions):
        prefix = "" if index == 0 else f"{Conjunction(cond.conjunction).value} "
        clauses.append(f"{prefix}{validate_identifier(cond.column)} {cond.operator} {placeholder}")
        params.append(cond.value)
    return "WHERE " + " ".join(clauses), params


class ConditionBuilder:
    """Ordered, mutable list of conditions with a fluent interface."""

    def __init__(self, conditions: Iterable[Condition] = ()) -> None:
        self._conditions: List[Condition] = list(conditions)

    @property
    def conditions(self) -> Tuple[Condition, ...]:
        return tuple(self._conditions)

    def where(self, column: str, operator_or_value: Any, value: Any = MISSING) -> "ConditionBuilder":
        self._conditions.append(make_condition(Conjunction.AND, column, operator_or_value, value))
        return self

    def or_where(self, column: str, operator_or_value: Any, value: Any = MISSING) -> "ConditionBuilder":
        self._conditions.append(make_condition(Conjunction.OR, column, operator_or_value, value))
        return self

    def reset(self) -> None:
        self._conditions.clear()

    def render(self, placeholder: str = "?") -> Tuple[str, List[Any]]:
        return render_conditions(self._conditions, placeholder)

    def __repr__(self) -> str:
        return f"ConditionBuilder({self._conditions!r})"


__all__ = [
    "Condition",
    "ConditionBuilder",
    "Conjunction",
    "MISSING",
    "OPERATORS",
    "make_condition",
    "normalize_operator",
    "render_conditions",
    "validate_identifier",
]
