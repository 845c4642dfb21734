"""Query Executor Adapter over a FastMCP client.

One `QueryExecutor` wraps one MCP session for one request. The orchestrator
constructs it, connects, threads it through the pipeline stages and closes it
in a `finally` block; there is no module-level client.
"""

from __future__ import annotations

import asyncio
from contextlib import AsyncExitStack
import json
from typing import Any

from fastmcp import Client, FastMCP
from fastmcp.client.transports import ClientTransport
from fastmcp.utilities.logging import get_logger
from mcp.types import TextContent, TextResourceContents

from eventscribe.errors import (
    ConfigurationError,
    QueryError,
    QueryExecutorConnectionError,
    SchemaUnavailableError,
)
from eventscribe.models import Row
from eventscribe.services.config_service import (
    DEFAULT_QUERY_TOOL,
    DEFAULT_SCHEMA_RESOURCE,
    ConfigService,
)
from eventscribe.sqlglot_tools import prepare_read_only_statement

_logger = get_logger(__name__)

McpTarget = str | FastMCP | ClientTransport


class QueryExecutor:
    """Per-request MCP session exposing schema reads and read-only SQL."""

    def __init__(
        self,
        target: McpTarget | None,
        *,
        schema_resource_uri: str = DEFAULT_SCHEMA_RESOURCE,
        query_tool: str = DEFAULT_QUERY_TOOL,
        timeout_seconds: float = 30.0,
        dialect: str = "mysql",
        allowed_tables: frozenset[str] = frozenset(),
    ) -> None:
        self._target = target
        self.schema_resource_uri = schema_resource_uri
        self.query_tool = query_tool
        self.timeout_seconds = timeout_seconds
        self.dialect = dialect
        self.allowed_tables = allowed_tables
        self._client: Client[Any] | None = None
        self._stack: AsyncExitStack | None = None

    @classmethod
    def from_config(cls) -> QueryExecutor:
        """Build an unconnected executor from environment configuration."""
        return cls(
            ConfigService.get_mcp_server_url(),
            schema_resource_uri=ConfigService.schema_resource_uri(),
            query_tool=ConfigService.query_tool_name(),
            timeout_seconds=ConfigService.query_timeout_seconds(),
            dialect=ConfigService.sql_dialect(),
            allowed_tables=ConfigService.allowed_tables(),
        )

    @property
    def connected(self) -> bool:
        return self._client is not None

    def _require_client(self) -> Client[Any]:
        if self._client is None:
            msg = "Query Executor is not connected"
            raise QueryExecutorConnectionError(msg)
        return self._client

    async def connect(self) -> None:
        """Open the MCP session.

        Raises:
            ConfigurationError: If no endpoint was configured
            QueryExecutorConnectionError: If the session cannot be established
        """
        if self._target is None or (isinstance(self._target, str) and not self._target.strip()):
            msg = "Configuration Error: no Query Executor endpoint configured."
            raise ConfigurationError(msg)
        if self._client is not None:
            return

        stack = AsyncExitStack()
        self._stack = stack
        client: Client[Any] = Client(self._target, timeout=self.timeout_seconds)
        try:
            async with asyncio.timeout(self.timeout_seconds):
                await stack.enter_async_context(client)
        except TimeoutError as exc:
            msg = f"Timed out after {self.timeout_seconds:.0f}s connecting to the Query Executor"
            raise QueryExecutorConnectionError(msg) from exc
        except Exception as exc:  # noqa: BLE001 - transport errors vary by backend
            msg = f"Could not connect to the Query Executor: {exc}"
            raise QueryExecutorConnectionError(msg) from exc
        self._client = client
        _logger.info("MCP client connected")

    async def read_schema(self) -> str:
        """Read the schema resource as text.

        Raises:
            SchemaUnavailableError: If the resource is missing or not textual
        """
        client = self._require_client()
        try:
            async with asyncio.timeout(self.timeout_seconds):
                contents = await client.read_resource(self.schema_resource_uri)
        except TimeoutError as exc:
            msg = "Timed out reading the database schema"
            raise SchemaUnavailableError(msg) from exc
        except Exception as exc:  # noqa: BLE001 - surfaced as a typed error
            msg = f"Could not fetch the database schema: {exc}"
            raise SchemaUnavailableError(msg) from exc

        first = contents[0] if contents else None
        if not isinstance(first, TextResourceContents) or not first.text.strip():
            msg = "Could not fetch a valid text schema from the MCP resource."
            raise SchemaUnavailableError(msg)
        return first.text

    async def execute(self, sql: str) -> list[Row]:
        """Run one read-only statement and return its rows.

        The statement is checked by the SQL guard before it is sent.

        Raises:
            UnsafeQueryError: If the guard rejects the statement
            QueryError: If the remote reports an error or the payload is malformed
        """
        statement = prepare_read_only_statement(
            sql, dialect=self.dialect, allowed_tables=self.allowed_tables
        )
        client = self._require_client()
        try:
            async with asyncio.timeout(self.timeout_seconds):
                result = await client.call_tool_mcp(self.query_tool, {"sql": statement})
        except TimeoutError as exc:
            msg = f"Query timed out after {self.timeout_seconds:.0f}s"
            raise QueryError(msg) from exc
        except Exception as exc:  # noqa: BLE001 - surfaced as a typed error
            msg = f"Query call failed: {exc}"
            raise QueryError(msg) from exc

        content = result.content
        first = content[0] if content else None
        if result.isError:
            detail = first.text if isinstance(first, TextContent) else "unknown error"
            msg = f"Query Executor reported an error: {detail}"
            raise QueryError(msg)
        if not isinstance(first, TextContent):
            msg = "Query Executor returned no text content"
            raise QueryError(msg)

        try:
            payload = json.loads(first.text)
        except json.JSONDecodeError as exc:
            msg = "Query Executor returned content that is not valid JSON"
            raise QueryError(msg) from exc
        if not isinstance(payload, list) or not all(isinstance(r, dict) for r in payload):
            msg = "Query Executor returned a payload that is not a row array"
            raise QueryError(msg)
        return payload

    async def close(self) -> None:
        """Close the session. Safe to call repeatedly or after a failed connect."""
        stack, self._stack = self._stack, None
        self._client = None
        if stack is None:
            return
        try:
            await stack.aclose()
        except Exception as exc:  # noqa: BLE001 - close must not mask the run's outcome
            _logger.warning("Error while closing MCP client: %s", exc)
            return
        _logger.info("MCP client connection closed")
