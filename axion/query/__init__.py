"""
Query package for Axion.

Re-exports the condition builder, where shapes, SQL compiler, executor
functions and the fluent `QueryBuilder` so callers can import from
`axion.query` directly.
"""

from axion.query.builder import QueryBuilder
from axion.query.compiler import (
    Statement,
    compile_count,
    compile_delete,
    compile_insert,
    compile_select,
    compile_update,
)
from axion.query.conditions import Condition, ConditionBuilder, Conjunction, render_conditions
from axion.query.executor import Page, Record
from axion.query.where import ByColumns, ByConditions, ById, WhereClause, where_clause

__all__ = [
    # Conditions
    "Condition",
    "ConditionBuilder",
    "Conjunction",
    "render_conditions",
    # Where shapes
    "ByColumns",
    "ByConditions",
    "ById",
    "WhereClause",
    "where_clause",
    # Compiler
    "Statement",
    "compile_count",
    "compile_delete",
    "compile_insert",
    "compile_select",
    "compile_update",
    # Execution
    "Page",
    "QueryBuilder",
    "Record",
]
