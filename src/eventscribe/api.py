"""Thin request handler in front of the description pipeline.

Validates the inbound payload, runs the pipeline and turns failures into a
user-facing message that carries the error's reason. When the degraded mode
is enabled, recoverable pipeline failures are answered with an AI-only
description instead.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping

from fastmcp.utilities.logging import get_logger
from pydantic import ValidationError

from eventscribe.errors import ConfigurationError, GenerationError, PipelineError
from eventscribe.models import GenerateFailure, GenerateRequest, GenerateResponse
from eventscribe.pipeline.composer import AI_ONLY_CONTEXT_MESSAGE
from eventscribe.pipeline.orchestrator import EventDescriptionPipeline
from eventscribe.services.config_service import ConfigService

_logger = get_logger(__name__)

PipelineFactory = Callable[[], EventDescriptionPipeline]

HandlerResult = tuple[int, GenerateResponse | GenerateFailure]


async def handle_generate_request(
    payload: Mapping[str, object],
    *,
    pipeline_factory: PipelineFactory = EventDescriptionPipeline.from_config,
    fallback_enabled: bool | None = None,
) -> HandlerResult:
    """Validate `payload`, run the pipeline and return (status, body)."""
    try:
        request = GenerateRequest.model_validate(payload)
    except ValidationError as exc:
        details = [f"{'.'.join(str(p) for p in e['loc'])}: {e['msg']}" for e in exc.errors()]
        return 400, GenerateFailure(error="Invalid input data", details=details)

    try:
        pipeline = pipeline_factory()
    except ConfigurationError as exc:
        _logger.error("Configuration error: %s", exc)
        return 500, GenerateFailure(error=str(exc))

    try:
        result = await pipeline.run(request.prompt)
    except PipelineError as exc:
        if fallback_enabled is None:
            fallback_enabled = ConfigService.ai_only_fallback_enabled()
        if fallback_enabled and exc.allows_degraded_fallback:
            _logger.warning("Falling back to AI-only generation: %s", exc.reason)
            return await _ai_only_response(pipeline, request.prompt)
        status = 422 if exc.is_no_relevant_data else 500
        return status, GenerateFailure(error=f"Failed to generate description: {exc.reason}")

    return 200, GenerateResponse(description=result.description, context=result.context)


async def _ai_only_response(pipeline: EventDescriptionPipeline, prompt: str) -> HandlerResult:
    try:
        description = await pipeline.generate_ai_only(prompt)
    except GenerationError as exc:
        _logger.error("AI-only generation error: %s", exc)
        return 500, GenerateFailure(
            error=f"Failed to generate description. Please check your AI API configuration. ({exc})"
        )
    return 200, GenerateResponse(
        description=description,
        context={"message": AI_ONLY_CONTEXT_MESSAGE},
        mode="ai_only",
    )
