from __future__ import annotations

import asyncio

from fastmcp import FastMCP
import pytest

from conftest import SCHEMA_TEXT, connected_executor, make_executor
from eventscribe.errors import (
    ConfigurationError,
    QueryError,
    QueryExecutorConnectionError,
    SchemaUnavailableError,
    UnsafeQueryError,
)
from eventscribe.executor import QueryExecutor


@pytest.mark.asyncio
async def test_read_schema_returns_ddl(query_server: FastMCP) -> None:
    async with connected_executor(query_server) as executor:
        schema = await executor.read_schema()

    assert "CREATE TABLE events" in schema
    assert "CREATE TABLE sponsors" in schema


@pytest.mark.asyncio
async def test_execute_returns_rows(query_server: FastMCP) -> None:
    async with connected_executor(query_server) as executor:
        rows = await executor.execute("SELECT title, location FROM events ORDER BY id;")

    assert [row["title"] for row in rows] == [
        "TechCon 2024",
        "AI Workshop Series",
        "Startup Pitch Night",
    ]
    assert rows[0]["location"] == "San Francisco Convention Center"


@pytest.mark.asyncio
async def test_execute_empty_result_is_empty_list(query_server: FastMCP) -> None:
    async with connected_executor(query_server) as executor:
        rows = await executor.execute("SELECT * FROM events WHERE title = 'Nothing Here'")

    assert rows == []


@pytest.mark.asyncio
async def test_remote_error_raises_query_error(query_server: FastMCP) -> None:
    async with connected_executor(query_server) as executor:
        with pytest.raises(QueryError, match="reported an error"):
            await executor.execute("SELECT no_such_column FROM events")


@pytest.mark.asyncio
async def test_unsafe_sql_never_reaches_the_server(query_server: FastMCP) -> None:
    async with connected_executor(query_server) as executor:
        with pytest.raises(UnsafeQueryError):
            await executor.execute("DROP TABLE events")
        rows = await executor.execute("SELECT id FROM events")

    assert len(rows) == 3


@pytest.mark.asyncio
async def test_unknown_schema_resource(query_server: FastMCP) -> None:
    async with connected_executor(
        query_server, schema_resource_uri="mysql://nothing-here"
    ) as executor:
        with pytest.raises(SchemaUnavailableError):
            await executor.read_schema()


@pytest.mark.asyncio
async def test_calls_before_connect_fail(query_server: FastMCP) -> None:
    executor = make_executor(query_server)

    with pytest.raises(QueryExecutorConnectionError):
        await executor.read_schema()
    with pytest.raises(QueryExecutorConnectionError):
        await executor.execute("SELECT 1")


@pytest.mark.asyncio
@pytest.mark.parametrize("target", [None, "", "   "])
async def test_missing_target_is_a_configuration_error(target: str | None) -> None:
    executor = QueryExecutor(target)

    with pytest.raises(ConfigurationError):
        await executor.connect()
    await executor.close()


@pytest.mark.asyncio
async def test_close_is_idempotent(query_server: FastMCP) -> None:
    executor = make_executor(query_server)
    await executor.connect()
    assert executor.connected

    await executor.close()
    await executor.close()

    assert not executor.connected


def test_from_config_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EVENTSCRIBE_MCP_SERVER_URL", "http://localhost:8001/mcp")
    monkeypatch.setenv("EVENTSCRIBE_QUERY_TIMEOUT", "5")
    monkeypatch.setenv("EVENTSCRIBE_ALLOWED_TABLES", "events, Speakers")

    executor = QueryExecutor.from_config()

    assert executor.timeout_seconds == 5.0
    assert executor.allowed_tables == frozenset({"events", "speakers"})
    assert executor.schema_resource_uri == "mysql://schemas"
    assert executor.query_tool == "read_only_query"
    assert not executor.connected


def test_from_config_requires_endpoint(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("EVENTSCRIBE_MCP_SERVER_URL", raising=False)

    with pytest.raises(ConfigurationError):
        QueryExecutor.from_config()


def _slow_server(delay: float) -> FastMCP:
    server = FastMCP(name="Slow-Query-Server")

    @server.resource("mysql://schemas", mime_type="text/plain")
    async def database_schema() -> str:
        await asyncio.sleep(delay)
        return SCHEMA_TEXT

    @server.tool(name="read_only_query")
    async def read_only_query(sql: str) -> str:
        await asyncio.sleep(delay)
        return "[]"

    _ = (database_schema, read_only_query)
    return server


@pytest.mark.asyncio
async def test_slow_query_times_out_as_query_error() -> None:
    async with connected_executor(_slow_server(2.0), timeout_seconds=0.1) as executor:
        with pytest.raises(QueryError):
            await executor.execute("SELECT * FROM events")


@pytest.mark.asyncio
async def test_slow_schema_times_out_as_schema_unavailable() -> None:
    async with connected_executor(_slow_server(2.0), timeout_seconds=0.1) as executor:
        with pytest.raises(SchemaUnavailableError):
            await executor.read_schema()


@pytest.mark.asyncio
async def test_untokenizable_sql_is_rejected_before_sending(query_server: FastMCP) -> None:
    async with connected_executor(query_server) as executor:
        with pytest.raises(UnsafeQueryError, match="could not be parsed"):
            await executor.execute("SELECT * FROM events WHERE title = 'TechCon")
