"""Pipeline Orchestrator for event description generation.

One `run` call walks the stages in order:
- Connect a fresh Query Executor session
- Read the schema resource
- Ask the model for a SQL plan
- Fetch context with the planned statements
- Compose the grounded prompt and generate the description

Any failure is caught once, recorded on the run state and re-raised as a
`PipelineError` carrying the original message. The executor is closed in a
`finally` block on every path, including cancellation.
"""

from __future__ import annotations

from collections.abc import Callable

from fastmcp.utilities.logging import get_logger

from eventscribe.errors import InvalidRequestError, PipelineError
from eventscribe.executor import QueryExecutor
from eventscribe.generation import GenerationAdapter
from eventscribe.models import GenerationResult
from eventscribe.pipeline.composer import (
    compose_ai_only_prompt,
    compose_description_prompt,
)
from eventscribe.pipeline.fetcher import fetch_context
from eventscribe.pipeline.planner import SqlPlanner
from eventscribe.pipeline.state import PipelineRunState, PipelineStage
from eventscribe.services.config_service import ConfigService

_logger = get_logger(__name__)

MAX_PROMPT_DISPLAY = 200

ExecutorFactory = Callable[[], QueryExecutor]


def _preview(text: str) -> str:
    return text[:MAX_PROMPT_DISPLAY] + ("..." if len(text) > MAX_PROMPT_DISPLAY else "")


class EventDescriptionPipeline:
    """Agentic context-gathering and generation pipeline.

    Holds only factories and stateless collaborators, so one instance can
    serve concurrent requests: each `run` builds its own executor.
    """

    def __init__(
        self,
        *,
        executor_factory: ExecutorFactory,
        generator: GenerationAdapter,
        planner: SqlPlanner | None = None,
    ) -> None:
        self._executor_factory = executor_factory
        self.generator = generator
        self._planner = planner or SqlPlanner(generator)

    @classmethod
    def from_config(cls) -> EventDescriptionPipeline:
        """Build a pipeline from environment configuration.

        Raises:
            ConfigurationError: If the MCP endpoint or the API key is missing
        """
        ConfigService.get_mcp_server_url()
        generator = GenerationAdapter.from_config(
            ConfigService.get_llm_config(),
            max_attempts=ConfigService.generation_max_attempts(),
        )
        return cls(executor_factory=QueryExecutor.from_config, generator=generator)

    async def run(self, user_prompt: str) -> GenerationResult:
        """Generate a description grounded on database context.

        Raises:
            PipelineError: Wrapping whichever stage failed
        """
        state = PipelineRunState()
        executor: QueryExecutor | None = None
        _logger.info("Starting event description workflow: %s", _preview(user_prompt))
        try:
            executor = self._executor_factory()
            user_request = user_prompt.strip()
            if not user_request:
                msg = "Prompt is required"
                raise InvalidRequestError(msg)

            await executor.connect()
            state.advance(PipelineStage.CONNECTED)

            schema = await executor.read_schema()
            state.advance(PipelineStage.SCHEMA_FETCHED)

            queries = await self._planner.plan(user_request, schema)
            state.advance(PipelineStage.PLANNED)

            context = await fetch_context(executor, queries)
            state.advance(PipelineStage.CONTEXT_FETCHED)

            prompt = compose_description_prompt(user_request, context)
            state.advance(PipelineStage.COMPOSED)

            description = await self.generator.generate(prompt)
            state.advance(PipelineStage.GENERATED)

            result = GenerationResult(description=description, context=context)
            state.advance(PipelineStage.DONE)
        except Exception as exc:
            reason = str(exc) or exc.__class__.__name__
            failed_at = state.fail(reason)
            _logger.warning(
                "Event description workflow failed after stage '%s': %s",
                failed_at.value,
                reason,
            )
            raise PipelineError(reason, stage=failed_at, original=exc) from exc
        finally:
            if executor is not None:
                await executor.close()

        _logger.info(
            "Event description workflow finished (elapsed_ms=%.1f, tables=%d)",
            state.elapsed_ms,
            len(result.context),
        )
        return result

    async def generate_ai_only(self, user_prompt: str) -> str:
        """Degraded path: describe the event without any database context."""
        _logger.info("Generating with AI only (no database context)")
        return await self.generator.generate(compose_ai_only_prompt(user_prompt.strip()))
