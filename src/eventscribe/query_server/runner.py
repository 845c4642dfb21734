"""Execution flow behind the read_only_query tool.

This module provides a small, dependency-injected runner that:
- Applies the read-only SQL guard
- Executes via SQLAlchemy with row and cell truncation safeguards
- Returns a typed result payload instead of raising on SQL errors
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
import time

from fastmcp.utilities.logging import get_logger
import sqlalchemy as sa
from sqlalchemy.exc import SQLAlchemyError

from eventscribe.errors import UnsafeQueryError
from eventscribe.query_server.models import CellValue, QueryRunResult
from eventscribe.sqlglot_tools import strip_trailing_semicolon
from eventscribe.sqlglot_tools.guard import prepare_read_only_statement

_logger = get_logger(__name__)


def _truncate_value(val: object, max_chars: int) -> CellValue:
    """Truncate a single cell value to a JSON-safe representation."""
    if val is None:
        return None
    if isinstance(val, int | float | bool):
        return val
    s = val.isoformat() if hasattr(val, "isoformat") else str(val)
    if len(s) > max_chars:
        return s[: max_chars - 1] + "…"
    return s


def _truncate_rows(
    rows: Iterable[sa.RowMapping],
    columns: list[str],
    max_rows: int,
    max_chars: int,
) -> list[dict[str, CellValue]]:
    out: list[dict[str, CellValue]] = []
    for i, row in enumerate(rows):
        if i >= max_rows:
            break
        out.append({col: _truncate_value(row[col], max_chars) for col in columns})
    return out


@dataclass(slots=True)
class ExecutionLimits:
    """Execution limits used to bound row count and cell size."""

    row_limit: int
    max_cell_chars: int


def _error_result(sql: str, dialect: str, limits: ExecutionLimits, error: str) -> QueryRunResult:
    return QueryRunResult(
        sql=sql,
        execution={
            "dialect": dialect,
            "elapsed_ms": 0.0,
            "row_limit": limits.row_limit,
            "rows_returned": 0,
            "truncated": False,
        },
        status="error",
        execution_error=error,
    )


def run_read_only_query(
    *,
    sql: str,
    engine: sa.Engine,
    dialect: str,
    limits: ExecutionLimits,
    allowed_tables: frozenset[str] = frozenset(),
) -> QueryRunResult:
    """Guard and execute one statement, returning rows or a typed error."""
    _logger.info(
        "run_read_only_query: start (dialect=%s, row_limit=%d)", dialect, limits.row_limit
    )
    try:
        sql_to_run = prepare_read_only_statement(
            sql, dialect=dialect, allowed_tables=allowed_tables
        )
    except UnsafeQueryError as exc:
        _logger.warning("Rejected statement: %s", exc)
        return _error_result(strip_trailing_semicolon(sql), dialect, limits, str(exc))

    start = time.perf_counter()
    try:
        with engine.connect() as conn:
            result = conn.execute(sa.text(sql_to_run))
            cols = list(result.keys())
            raw_rows = result.mappings().fetchmany(limits.row_limit + 1)  # sentinel row
            returned = min(len(raw_rows), limits.row_limit)
            truncated = len(raw_rows) > limits.row_limit
            rows = _truncate_rows(raw_rows, cols, limits.row_limit, limits.max_cell_chars)
    except SQLAlchemyError as exc:
        _logger.warning("Execution error: %s", exc)
        return _error_result(sql_to_run, dialect, limits, str(exc))
    elapsed_ms = (time.perf_counter() - start) * 1000.0

    _logger.info(
        "Execution finished (elapsed_ms=%.1f, rows_returned=%d, truncated=%s)",
        elapsed_ms,
        returned,
        truncated,
    )
    return QueryRunResult(
        sql=sql_to_run,
        execution={
            "dialect": dialect,
            "elapsed_ms": elapsed_ms,
            "row_limit": limits.row_limit,
            "rows_returned": returned,
            "truncated": truncated,
        },
        results=rows,
    )
