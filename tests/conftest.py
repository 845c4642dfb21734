"""Shared fixtures: a seeded SQLite database, the companion query server and
scripted stand-ins for the model and the Query Executor."""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from fastmcp import FastMCP
from pydantic_ai.messages import ModelMessage, ModelResponse, TextPart
from pydantic_ai.models.function import AgentInfo, FunctionModel
import pytest
import sqlalchemy as sa

from eventscribe.db import seed_sample_data
from eventscribe.errors import QueryError
from eventscribe.executor import QueryExecutor
from eventscribe.generation import BackoffPolicy, GenerationAdapter
from eventscribe.models import Row
from eventscribe.query_server import ExecutionLimits, create_query_server

EVENT_TABLES = frozenset({"events", "speakers", "sessions", "sponsors"})

SCHEMA_TEXT = "CREATE TABLE events (id INT, title VARCHAR(255));"


@pytest.fixture
def seeded_engine(tmp_path: Path) -> Iterator[sa.Engine]:
    engine = sa.create_engine(f"sqlite+pysqlite:///{tmp_path / 'events.db'}")
    seed_sample_data(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def query_server(seeded_engine: sa.Engine) -> FastMCP:
    return create_query_server(
        seeded_engine,
        limits=ExecutionLimits(row_limit=50, max_cell_chars=200),
        allowed_tables=EVENT_TABLES,
    )


def make_executor(server: FastMCP, **overrides: Any) -> QueryExecutor:
    options: dict[str, Any] = {
        "dialect": "sqlite",
        "allowed_tables": EVENT_TABLES,
        "timeout_seconds": 10,
    }
    options.update(overrides)
    return QueryExecutor(server, **options)


@asynccontextmanager
async def connected_executor(server: FastMCP, **overrides: Any) -> AsyncIterator[QueryExecutor]:
    executor = make_executor(server, **overrides)
    await executor.connect()
    try:
        yield executor
    finally:
        await executor.close()


# ---- scripted model ----------------------------------------------------------
class ScriptedModel:
    """FunctionModel driver replaying canned replies; exceptions are raised."""

    def __init__(self, replies: list[str | Exception]) -> None:
        self.replies = list(replies)
        self.prompts: list[str] = []

    def respond(self, messages: list[ModelMessage], _info: AgentInfo) -> ModelResponse:
        prompt = ""
        for part in messages[-1].parts:
            if part.part_kind == "user-prompt" and isinstance(part.content, str):
                prompt = part.content
        self.prompts.append(prompt)
        if not self.replies:
            msg = "ScriptedModel ran out of replies"
            raise AssertionError(msg)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return ModelResponse(parts=[TextPart(reply)])

    @property
    def calls(self) -> int:
        return len(self.prompts)


@dataclass
class SleepRecorder:
    delays: list[float] = field(default_factory=list)

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def make_generator(script: ScriptedModel, sleep: SleepRecorder | None = None) -> GenerationAdapter:
    return GenerationAdapter(
        FunctionModel(script.respond),
        policy=BackoffPolicy(max_attempts=3),
        sleep=sleep or SleepRecorder(),
    )


# ---- fake Query Executor -----------------------------------------------------
class FakeExecutor:
    """In-process Query Executor with per-operation failure injection."""

    def __init__(
        self,
        *,
        tables: dict[str, list[Row]] | None = None,
        schema: str | None = SCHEMA_TEXT,
        connect_error: Exception | None = None,
        schema_error: Exception | None = None,
        failing_sql: frozenset[str] = frozenset(),
    ) -> None:
        self.tables = tables if tables is not None else {}
        self.schema = schema
        self.connect_error = connect_error
        self.schema_error = schema_error
        self.failing_sql = failing_sql
        self.executed: list[str] = []
        self.connect_calls = 0
        self.close_calls = 0

    async def connect(self) -> None:
        self.connect_calls += 1
        if self.connect_error is not None:
            raise self.connect_error

    async def read_schema(self) -> str:
        if self.schema_error is not None:
            raise self.schema_error
        assert self.schema is not None
        return self.schema

    async def execute(self, sql: str) -> list[Row]:
        self.executed.append(sql)
        if sql in self.failing_sql:
            msg = f"no such column in: {sql}"
            raise QueryError(msg)
        table = sql.lower().split("from ")[1].split(" ")[0]
        return list(self.tables.get(table, []))

    async def close(self) -> None:
        self.close_calls += 1


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()
