"""Exception hierarchy for the event description pipeline.

Every failure the pipeline can raise derives from `EventScribeError` so that
request handlers can catch the whole family at a single point.

Exception Categories:
- Configuration errors for missing endpoints or credentials
- Query Executor errors for MCP connection, schema and statement failures
- Planning and composition errors raised by the agentic stages
- Generation errors raised by the LLM adapter
- `PipelineError`, the wrapper produced by the orchestrator
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from eventscribe.pipeline.state import PipelineStage


class EventScribeError(Exception):
    """Base exception for all EventScribe operations."""


class ConfigurationError(EventScribeError, ValueError):
    """Raised when a required endpoint or API key is missing.

    Fatal for the current request and never retried.
    """


class InvalidRequestError(EventScribeError, ValueError):
    """Raised when the user prompt is empty after trimming."""


class QueryExecutorConnectionError(EventScribeError):
    """Raised when the MCP session to the Query Executor cannot be established.

    Covers unreachable endpoints, handshake failures and connect timeouts.
    """


class SchemaUnavailableError(EventScribeError):
    """Raised when the schema resource does not return a textual payload."""


class PlanningError(EventScribeError):
    """Raised when the model's SQL plan is not a JSON array of strings."""


class QueryError(EventScribeError):
    """Raised when a single statement fails or returns a malformed payload.

    The Context Fetcher absorbs this error per statement; it never aborts
    the whole fetch.
    """


class UnsafeQueryError(QueryError):
    """Raised when a statement fails the read-only SQL guard."""


class NoRelevantDataError(EventScribeError):
    """Raised when the fetched context holds no usable rows."""

    DEFAULT_MESSAGE = (
        "The AI agent did not find any specific data in the database for your "
        "request. Please try a more specific event name or topic."
    )

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.DEFAULT_MESSAGE)


class GenerationError(EventScribeError):
    """Raised when the text-generation call fails without being retryable."""


class GenerationRetriesExhaustedError(GenerationError):
    """Raised when every attempt failed with a transient overload."""

    def __init__(self, attempts: int) -> None:
        super().__init__("AI content generation failed after multiple retries.")
        self.attempts = attempts


class PipelineError(EventScribeError):
    """Typed pipeline failure produced by the orchestrator's single catch point.

    Attributes:
        reason: Message of the original error
        stage: Last stage the pipeline reached before failing
        original: The exception that ended the run
    """

    def __init__(self, reason: str, *, stage: PipelineStage, original: BaseException) -> None:
        super().__init__(reason)
        self.reason = reason
        self.stage = stage
        self.original = original

    @property
    def is_no_relevant_data(self) -> bool:
        return isinstance(self.original, NoRelevantDataError)

    @property
    def allows_degraded_fallback(self) -> bool:
        """Whether a caller may substitute an AI-only response for this failure."""
        return not isinstance(
            self.original, NoRelevantDataError | ConfigurationError | InvalidRequestError
        )
