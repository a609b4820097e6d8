from __future__ import annotations

import pytest

from axion.errors import InvalidQueryError
from axion.infrastructure.dialects import MYSQL, PGSQL, SQLITE
from axion.query.compiler import (
    compile_count,
    compile_delete,
    compile_insert,
    compile_select,
    compile_update,
)
from axion.query.conditions import ConditionBuilder


def _adults():
    return ConditionBuilder().where("age", ">", 18).conditions


def test_select_clause_order():
    statement = compile_select(
        "users", _adults(), SQLITE, order_by=("name", "desc"), limit=10, offset=20
    )
    assert statement.sql == "SELECT * FROM users WHERE age > ? ORDER BY name DESC LIMIT ? OFFSET ?"
    assert statement.params == [18, 10, 20]


def test_select_without_conditions():
    statement = compile_select("users")
    assert statement.sql == "SELECT * FROM users"
    assert statement.params == []


def test_order_direction_defaults_to_asc():
    statement = compile_select("users", order_by=("id", "asc"))
    assert statement.sql.endswith("ORDER BY id ASC")


def test_invalid_order_direction_rejected():
    with pytest.raises(InvalidQueryError):
        compile_select("users", order_by=("id", "sideways"))


@pytest.mark.parametrize(
    ("driver", "expected"),
    [
        (SQLITE, "SELECT * FROM users LIMIT -1 OFFSET ?"),
        (MYSQL, "SELECT * FROM users LIMIT 18446744073709551615 OFFSET %s"),
        (PGSQL, "SELECT * FROM users OFFSET %s"),
    ],
)
def test_offset_without_limit(driver, expected):
    assert compile_select("users", driver=driver, offset=5).sql == expected


def test_count_shares_where_rendering():
    statement = compile_count("users", _adults(), PGSQL)
    assert statement.sql == "SELECT COUNT(*) AS aggregate FROM users WHERE age > %s"
    assert statement.params == [18]


def test_insert():
    statement = compile_insert("users", {"name": "Ada", "email": None})
    assert statement.sql == "INSERT INTO users (name, email) VALUES (?, ?)"
    assert statement.params == ["Ada", None]


def test_insert_requires_columns():
    with pytest.raises(InvalidQueryError):
        compile_insert("users", {})


def test_update_binds_set_values_before_where_values():
    conditions = ConditionBuilder().where("id", 3).conditions
    statement = compile_update("users", {"name": "x", "bio": "y"}, conditions)
    assert statement.sql == "UPDATE users SET name = ?, bio = ? WHERE id = ?"
    assert statement.params == ["x", "y", 3]


def test_delete():
    conditions = ConditionBuilder().where("role", "guest").or_where("age", "<", 13).conditions
    statement = compile_delete("users", conditions, MYSQL)
    assert statement.sql == "DELETE FROM users WHERE role = %s OR age < %s"
    assert statement.params == ["guest", 13]


@pytest.mark.parametrize("table", ["users; DROP TABLE x", "", "1users"])
def test_invalid_table_rejected(table):
    with pytest.raises(InvalidQueryError):
        compile_select(table)


def test_insert_rejects_bad_column_names():
    with pytest.raises(InvalidQueryError):
        compile_insert("users", {"name) VALUES ('x'); --": "y"})
