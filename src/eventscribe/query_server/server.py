"""Companion FastMCP server acting as the Query Executor.

Exposes the two capabilities the description pipeline consumes:
- resource `mysql://schemas`: CREATE TABLE statements for every reflected table
- tool `read_only_query(sql)`: guarded SELECT returning a JSON row array as text
"""

from __future__ import annotations

import json
from typing import Annotated

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from fastmcp.utilities.logging import get_logger
from pydantic import Field
import sqlalchemy as sa
from sqlalchemy.schema import CreateTable

from eventscribe.query_server.runner import ExecutionLimits, run_read_only_query
from eventscribe.services.config_service import DEFAULT_QUERY_TOOL, DEFAULT_SCHEMA_RESOURCE
from eventscribe.sqlglot_tools import map_sqlalchemy_to_sqlglot

_logger = get_logger(__name__)

MAX_QUERY_DISPLAY = 200


def render_schema_ddl(engine: sa.Engine) -> str:
    """Reflect the database and render one CREATE TABLE per table."""
    reflected = sa.MetaData()
    reflected.reflect(bind=engine)
    statements = [
        str(CreateTable(table).compile(engine)).strip() + ";"
        for table in reflected.sorted_tables
    ]
    return "\n\n".join(statements)


def create_query_server(
    engine: sa.Engine,
    *,
    limits: ExecutionLimits,
    allowed_tables: frozenset[str] = frozenset(),
    schema_resource_uri: str = DEFAULT_SCHEMA_RESOURCE,
    query_tool: str = DEFAULT_QUERY_TOOL,
) -> FastMCP:
    """Build a query server bound to `engine`."""
    dialect = map_sqlalchemy_to_sqlglot(engine.dialect.name)
    mcp = FastMCP(
        name="EventScribe-Query-Server",
        instructions=(
            "Read-only access to the event management database: read the schema "
            "resource, then run SELECT statements with the query tool."
        ),
    )

    @mcp.resource(schema_resource_uri, mime_type="text/plain")
    def database_schema() -> str:  # pyright: ignore[reportUnusedFunction]
        """CREATE TABLE statements for all tables in the database."""
        return render_schema_ddl(engine)

    @mcp.tool(name=query_tool)
    async def read_only_query(
        sql: Annotated[str, Field(description="A single SELECT statement to execute")],
    ) -> str:  # pyright: ignore[reportUnusedFunction]
        """Run one read-only SELECT and return its rows as a JSON array."""
        preview = sql[:MAX_QUERY_DISPLAY] + ("..." if len(sql) > MAX_QUERY_DISPLAY else "")
        _logger.info("%s: %s", query_tool, preview)

        result = run_read_only_query(
            sql=sql,
            engine=engine,
            dialect=dialect,
            limits=limits,
            allowed_tables=allowed_tables,
        )
        if result.status == "error":
            raise ToolError(result.execution_error or "Query failed")
        return json.dumps(result.results)

    _ = (database_schema, read_only_query)
    return mcp
