"""eventscribe package for AI-assisted event descriptions.

Gathers context from the event database through a Model Context Protocol
(FastMCP) client and generates grounded marketing copy with an LLM.
"""

from eventscribe.errors import (
    ConfigurationError,
    EventScribeError,
    GenerationError,
    GenerationRetriesExhaustedError,
    InvalidRequestError,
    NoRelevantDataError,
    PipelineError,
    PlanningError,
    QueryError,
    QueryExecutorConnectionError,
    SchemaUnavailableError,
    UnsafeQueryError,
)
from eventscribe.executor import QueryExecutor
from eventscribe.generation import GenerationAdapter
from eventscribe.models import FetchedContext, GenerationResult
from eventscribe.pipeline import EventDescriptionPipeline

__all__ = [  # noqa: RUF022
    # Pipeline
    "EventDescriptionPipeline",
    "GenerationAdapter",
    "QueryExecutor",
    # Models
    "FetchedContext",
    "GenerationResult",
    # Errors
    "ConfigurationError",
    "EventScribeError",
    "GenerationError",
    "GenerationRetriesExhaustedError",
    "InvalidRequestError",
    "NoRelevantDataError",
    "PipelineError",
    "PlanningError",
    "QueryError",
    "QueryExecutorConnectionError",
    "SchemaUnavailableError",
    "UnsafeQueryError",
]
