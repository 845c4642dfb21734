"""Retry-with-backoff as a reusable higher-order operation.

`call_with_backoff` runs an async operation under a tenacity policy: only
errors accepted by the caller's predicate are retried, the wait before retry
`n` is `exp_base ** n` seconds (2 s, 4 s, ... with the defaults), and running
out of attempts raises `RetriesExhaustedError` chained to the last failure.
Errors the predicate rejects propagate unchanged on the first occurrence.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
import logging
from typing import TypeVar

from fastmcp.utilities.logging import get_logger
from tenacity import (
    AsyncRetrying,
    RetryError,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

_logger = get_logger(__name__)

T = TypeVar("T")

SleepFn = Callable[[float], Awaitable[None]]


@dataclass(frozen=True, slots=True)
class BackoffPolicy:
    """Attempt bound and exponential schedule for a retried call."""

    max_attempts: int = 3
    exp_base: float = 2.0
    max_delay: float = 60.0


class RetriesExhaustedError(Exception):
    """Raised when every allowed attempt failed with a retryable error."""

    def __init__(self, attempts: int, last_exception: BaseException | None) -> None:
        super().__init__(f"Operation failed after {attempts} attempts: {last_exception}")
        self.attempts = attempts
        self.last_exception = last_exception


async def call_with_backoff(
    operation: Callable[[], Awaitable[T]],
    *,
    should_retry: Callable[[BaseException], bool],
    policy: BackoffPolicy | None = None,
    sleep: SleepFn = asyncio.sleep,
) -> T:
    """Run `operation`, retrying errors accepted by `should_retry`.

    Args:
        operation: Zero-argument coroutine factory, called once per attempt
        should_retry: Predicate selecting transient errors
        policy: Attempt bound and backoff schedule
        sleep: Awaitable sleep, injectable for tests

    Raises:
        RetriesExhaustedError: If the last allowed attempt also failed transiently
    """
    policy = policy or BackoffPolicy()
    retrying = AsyncRetrying(
        stop=stop_after_attempt(policy.max_attempts),
        # multiplier == base gives base ** attempt: 2, 4, 8, ...
        wait=wait_exponential(
            multiplier=policy.exp_base, exp_base=policy.exp_base, max=policy.max_delay
        ),
        retry=retry_if_exception(should_retry),
        before_sleep=before_sleep_log(_logger, logging.WARNING),
        sleep=sleep,
    )
    try:
        async for attempt in retrying:
            with attempt:
                result = await operation()
    except RetryError as exc:
        last = exc.last_attempt.exception()
        raise RetriesExhaustedError(policy.max_attempts, last) from last
    return result
