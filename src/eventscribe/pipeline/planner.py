"""SQL Planner: ask the model which SELECT statements gather relevant context."""

from __future__ import annotations

import re
from typing import Protocol

from fastmcp.utilities.logging import get_logger
from pydantic import TypeAdapter, ValidationError

from eventscribe.errors import PlanningError

_logger = get_logger(__name__)

_FENCE_OPEN = re.compile(r"^\s*```[a-zA-Z]*\s*")
_FENCE_CLOSE = re.compile(r"\s*```\s*$")
_PLAN_ADAPTER: TypeAdapter[list[str]] = TypeAdapter(list[str])


class TextGenerator(Protocol):
    async def generate(self, prompt: str) -> str: ...


def build_planning_prompt(user_request: str, schema: str) -> str:
    return (
        "You are an automated SQL generation bot. Your only purpose is to generate a "
        "JSON array of SQL query strings. Do not ask for more information. Do not add "
        "any conversational text.\n\n"
        "DATABASE SCHEMA:\n"
        f"```sql\n{schema}\n```\n\n"
        f'USER REQUEST: "{user_request}"\n\n'
        "Task: Based on the schema and the user request, generate a JSON array of all "
        "SQL SELECT queries needed to gather the relevant information from all the "
        "database tables that have a relationship with the information asked for by "
        "the user (note that the title asked for by the user may be just a part of "
        "the full title).\n\n"
        "IMPORTANT: Your response MUST be a valid JSON array of strings and nothing else."
    )


def strip_code_fences(text: str) -> str:
    """Remove a leading ```lang marker and a trailing ``` marker."""
    return _FENCE_CLOSE.sub("", _FENCE_OPEN.sub("", text.strip(), count=1), count=1).strip()


def parse_query_plan(raw: str) -> list[str]:
    """Parse model output into a QueryPlan.

    Raises:
        PlanningError: If the output is not a JSON array of strings
    """
    try:
        return _PLAN_ADAPTER.validate_json(strip_code_fences(raw))
    except ValidationError as exc:
        _logger.error("RAW LLM response for SQL plan: %s", raw)
        msg = "AI failed to generate valid JSON for SQL queries."
        raise PlanningError(msg) from exc


class SqlPlanner:
    """Turn a user request plus the schema text into candidate SQL."""

    def __init__(self, generator: TextGenerator) -> None:
        self._generator = generator

    async def plan(self, user_request: str, schema: str) -> list[str]:
        _logger.info("Asking LLM to generate SQL queries")
        raw = await self._generator.generate(build_planning_prompt(user_request, schema))
        queries = parse_query_plan(raw)
        _logger.info("LLM generated %d queries", len(queries))
        return queries
