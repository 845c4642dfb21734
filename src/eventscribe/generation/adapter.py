"""Generation Adapter backed by a PydanticAI agent.

Every call goes through `call_with_backoff`, so planning, final generation
and the AI-only fallback share one retry policy: transient overloads
(HTTP 503/529) are retried, anything else fails immediately.
"""

from __future__ import annotations

import asyncio
from typing import Final

from fastmcp.utilities.logging import get_logger
from pydantic_ai import Agent
from pydantic_ai.exceptions import AgentRunError, ModelHTTPError
from pydantic_ai.models import Model

from eventscribe.errors import GenerationError, GenerationRetriesExhaustedError
from eventscribe.generation.retry import (
    BackoffPolicy,
    RetriesExhaustedError,
    SleepFn,
    call_with_backoff,
)
from eventscribe.services.config_service import LLMConfig

_logger = get_logger(__name__)

OVERLOADED_STATUS_CODES: Final[frozenset[int]] = frozenset({503, 529})


def is_overloaded_error(exc: BaseException) -> bool:
    """True for the provider's transient "service overloaded" signal."""
    return isinstance(exc, ModelHTTPError) and exc.status_code in OVERLOADED_STATUS_CODES


def build_model(llm: LLMConfig) -> Model | str:
    """Resolve a PydanticAI model for the configured provider.

    Google models get the API key passed explicitly; other providers are
    addressed as `provider:model` and read their own credentials.
    """
    if llm.provider == "google-gla":
        from pydantic_ai.models.google import GoogleModel
        from pydantic_ai.providers.google import GoogleProvider

        return GoogleModel(llm.model, provider=GoogleProvider(api_key=llm.api_key))
    return f"{llm.provider}:{llm.model}" if ":" not in llm.model else llm.model


class GenerationAdapter:
    """Prompt-in, text-out wrapper with retry on transient overloads."""

    def __init__(
        self,
        model: Model | str,
        *,
        policy: BackoffPolicy | None = None,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self._agent: Agent[None, str] = Agent(model, output_type=str)
        self.policy = policy or BackoffPolicy()
        self._sleep = sleep

    @classmethod
    def from_config(cls, llm: LLMConfig, *, max_attempts: int = 3) -> GenerationAdapter:
        return cls(build_model(llm), policy=BackoffPolicy(max_attempts=max_attempts))

    async def _generate_once(self, prompt: str) -> str:
        result = await self._agent.run(prompt)
        return result.output

    async def generate(self, prompt: str) -> str:
        """Generate text for `prompt`.

        Raises:
            GenerationRetriesExhaustedError: If every attempt was overloaded
            GenerationError: For any non-retryable failure or an empty response
        """
        try:
            text = await call_with_backoff(
                lambda: self._generate_once(prompt),
                should_retry=is_overloaded_error,
                policy=self.policy,
                sleep=self._sleep,
            )
        except RetriesExhaustedError as exc:
            _logger.error("Generation failed after %d attempts", exc.attempts)
            raise GenerationRetriesExhaustedError(exc.attempts) from exc.last_exception
        except AgentRunError as exc:
            msg = f"AI content generation failed: {exc}"
            raise GenerationError(msg) from exc
        except Exception as exc:  # noqa: BLE001 - transport and SDK errors vary by provider
            _logger.error("Unexpected generation failure: %s", exc)
            msg = f"AI content generation failed: {exc}"
            raise GenerationError(msg) from exc

        if not text.strip():
            msg = "AI content generation returned an empty response."
            raise GenerationError(msg)
        return text.strip()
