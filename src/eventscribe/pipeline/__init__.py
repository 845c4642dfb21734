"""Agentic description pipeline: planner, fetcher, composer and orchestrator."""

from __future__ import annotations

from .composer import compose_ai_only_prompt, compose_description_prompt
from .fetcher import derive_table_key, fetch_context, is_select_statement
from .orchestrator import EventDescriptionPipeline
from .planner import SqlPlanner, parse_query_plan, strip_code_fences
from .state import PipelineRunState, PipelineStage

__all__ = [
    "EventDescriptionPipeline",
    "PipelineRunState",
    "PipelineStage",
    "SqlPlanner",
    "compose_ai_only_prompt",
    "compose_description_prompt",
    "derive_table_key",
    "fetch_context",
    "is_select_statement",
    "parse_query_plan",
    "strip_code_fences",
]
