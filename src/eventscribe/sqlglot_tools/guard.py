"""Read-only SQL guard for model-generated statements.

The SQL Planner's output is untrusted text, so every statement passes this
guard before it reaches a database:
- Trailing semicolons are stripped
- Stacked statements are rejected
- Only query roots (SELECT / set operations) are accepted
- Embedded DML/DDL nodes are rejected
- Referenced tables must belong to the configured allow-list
"""

from __future__ import annotations

from collections.abc import Iterable

import sqlglot
from sqlglot import exp
from sqlglot.errors import SqlglotError

from eventscribe.errors import UnsafeQueryError

SQLALCHEMY_TO_SQLGLOT: dict[str, str] = {
    "postgresql": "postgres",
    "postgres": "postgres",
    "mysql": "mysql",
    "mariadb": "mysql",
    "sqlite": "sqlite",
    "mssql": "tsql",
    "oracle": "oracle",
}


def _optional_exp(name: str) -> type[exp.Expression] | None:
    candidate = getattr(exp, name, None)
    if isinstance(candidate, type) and issubclass(candidate, exp.Expression):
        return candidate
    return None


_FORBIDDEN_NAMES = (
    "Insert",
    "Update",
    "Delete",
    "Merge",
    "Drop",
    "Alter",
    "Create",
    # sqlglot renamed this node in newer versions.
    "Truncate",
    "TruncateTable",
    "Grant",
    "Revoke",
    "Command",
)

FORBIDDEN_STATEMENT_TYPES: tuple[type[exp.Expression], ...] = tuple(
    statement_type
    for statement_type in (_optional_exp(name) for name in _FORBIDDEN_NAMES)
    if statement_type is not None
)


def map_sqlalchemy_to_sqlglot(sa_dialect_name: str) -> str:
    """Map a SQLAlchemy dialect name to a sqlglot dialect.

    Returns an empty string (sqlglot's generic dialect) when unknown.
    """
    return SQLALCHEMY_TO_SQLGLOT.get(sa_dialect_name.lower(), "")


def strip_trailing_semicolon(sql: str) -> str:
    s = sql.strip()
    while s.endswith(";"):
        s = s[:-1].rstrip()
    return s


def referenced_tables(expression: exp.Expression) -> set[str]:
    """Lower-cased names of physical tables referenced by a parsed statement."""
    cte_names = {cte.alias_or_name.lower() for cte in expression.find_all(exp.CTE)}
    return {
        table.name.lower()
        for table in expression.find_all(exp.Table)
        if table.name and table.name.lower() not in cte_names
    }


def prepare_read_only_statement(
    sql: str,
    *,
    dialect: str = "mysql",
    allowed_tables: Iterable[str] | None = None,
) -> str:
    """Return the cleaned statement or raise UnsafeQueryError.

    Args:
        sql: Candidate statement, possibly with a trailing semicolon
        dialect: sqlglot dialect used for parsing ("" for generic SQL)
        allowed_tables: Table names the statement may touch; empty or None
            disables the allow-list check

    Returns:
        The statement without trailing semicolons, otherwise unchanged
    """
    cleaned = strip_trailing_semicolon(sql)
    if not cleaned:
        msg = "SQL cannot be empty"
        raise UnsafeQueryError(msg)

    try:
        statements = [s for s in sqlglot.parse(cleaned, read=dialect or None) if s is not None]
    except SqlglotError as exc:
        msg = f"SQL could not be parsed: {exc}"
        raise UnsafeQueryError(msg) from exc

    if not statements:
        msg = "SQL cannot be empty"
        raise UnsafeQueryError(msg)
    if len(statements) > 1:
        msg = "Stacked statements are not permitted"
        raise UnsafeQueryError(msg)

    expression = statements[0]
    if not isinstance(expression, exp.Query):
        msg = "Only SELECT queries are permitted"
        raise UnsafeQueryError(msg)

    forbidden = sorted(
        {
            node.key.upper()
            for statement_type in FORBIDDEN_STATEMENT_TYPES
            for node in expression.find_all(statement_type)
        }
    )
    if forbidden:
        msg = f"Forbidden SQL statement(s) detected: {', '.join(forbidden)}"
        raise UnsafeQueryError(msg)

    allowed = {t.lower() for t in allowed_tables or ()}
    if allowed:
        outside = sorted(referenced_tables(expression) - allowed)
        if outside:
            msg = f"Table(s) outside the allowed schema: {', '.join(outside)}"
            raise UnsafeQueryError(msg)

    return cleaned
