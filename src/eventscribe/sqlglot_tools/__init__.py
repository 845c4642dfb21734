"""SQLGlot-backed guard for model-generated SQL.

Pure functions shared by the Query Executor Adapter and the companion query
server so both ends of the MCP boundary enforce the same read-only policy.
"""

from __future__ import annotations

from .guard import (
    map_sqlalchemy_to_sqlglot,
    prepare_read_only_statement,
    referenced_tables,
    strip_trailing_semicolon,
)

__all__ = [
    "map_sqlalchemy_to_sqlglot",
    "prepare_read_only_statement",
    "referenced_tables",
    "strip_trailing_semicolon",
]
