"""Generation Adapter package: LLM calls with retry-with-backoff."""

from __future__ import annotations

from .adapter import GenerationAdapter, build_model, is_overloaded_error
from .retry import BackoffPolicy, RetriesExhaustedError, call_with_backoff

__all__ = [
    "BackoffPolicy",
    "GenerationAdapter",
    "RetriesExhaustedError",
    "build_model",
    "call_with_backoff",
    "is_overloaded_error",
]
