"""Companion MCP server exposing the event database to the pipeline.

Exports the server factory and the dependency-injected runner.
"""

from __future__ import annotations

from .models import QueryRunResult
from .runner import ExecutionLimits, run_read_only_query
from .server import create_query_server, render_schema_ddl

__all__ = [
    "ExecutionLimits",
    "QueryRunResult",
    "create_query_server",
    "render_schema_ddl",
    "run_read_only_query",
]
