"""Context Fetcher: run the planned statements and collect their rows.

Statements run strictly in plan order. A statement that does not start with
"select" is skipped without being sent; a statement that fails is skipped
without aborting the fetch. Results for a table that was already fetched are
kept under a numbered key (`events#2`) rather than overwriting earlier rows.
"""

from __future__ import annotations

import re
from typing import Protocol

from fastmcp.utilities.logging import get_logger

from eventscribe.errors import QueryError
from eventscribe.models import FetchedContext, Row

_logger = get_logger(__name__)

UNKNOWN_TABLE_KEY = "unknown_table"
MAX_SQL_DISPLAY = 200

_FROM_TABLE = re.compile(r"\bfrom\s+([`\"\[]?[\w.$]+)", re.IGNORECASE)


class SqlExecutor(Protocol):
    async def execute(self, sql: str) -> list[Row]: ...


def is_select_statement(sql: str) -> bool:
    return sql.strip().lower().startswith("select")


def derive_table_key(sql: str) -> str:
    """First identifier after FROM, lower-cased and unquoted."""
    match = _FROM_TABLE.search(sql)
    if not match:
        return UNKNOWN_TABLE_KEY
    name = match.group(1).strip('`"[]').lower()
    return name or UNKNOWN_TABLE_KEY


def _unique_key(context: FetchedContext, key: str) -> str:
    if key not in context:
        return key
    n = 2
    while f"{key}#{n}" in context:
        n += 1
    return f"{key}#{n}"


def _preview(sql: str) -> str:
    return sql[:MAX_SQL_DISPLAY] + ("..." if len(sql) > MAX_SQL_DISPLAY else "")


async def fetch_context(executor: SqlExecutor, queries: list[str]) -> FetchedContext:
    """Execute `queries` in order and return the rows keyed by table."""
    context: FetchedContext = {}
    for sql in queries:
        if not is_select_statement(sql):
            _logger.warning("Skipping non-SELECT query generated by AI: %s", _preview(sql))
            continue
        try:
            rows = await executor.execute(sql)
        except QueryError as exc:
            _logger.warning("Skipping query that failed (%s): %s", exc, _preview(sql))
            continue
        key = _unique_key(context, derive_table_key(sql))
        context[key] = rows
        _logger.info("Fetched %d rows into '%s'", len(rows), key)
    return context
