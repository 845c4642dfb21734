"""Query Executor Adapter package.

Wraps the remote MCP server that reads the database schema and runs
read-only SQL on behalf of the pipeline.
"""

from __future__ import annotations

from .client import McpTarget, QueryExecutor

__all__ = [
    "McpTarget",
    "QueryExecutor",
]
