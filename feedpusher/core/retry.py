"""Retry strategies for best-effort network calls, built from ``RetryPolicy``."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from feedpusher.models.config import RetryPolicy

logger = logging.getLogger(__name__)

T = TypeVar("T")


def build_retrying(
    policy: RetryPolicy,
    retry_on: type[BaseException] | tuple[type[BaseException], ...],
) -> AsyncRetrying:
    """Return a tenacity ``AsyncRetrying`` that re-raises the last error."""
    return AsyncRetrying(
        stop=stop_after_attempt(policy.attempts),
        wait=wait_exponential(
            multiplier=policy.initial_delay_seconds,
            max=policy.max_delay_seconds,
        ),
        retry=retry_if_exception_type(retry_on),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )


async def call_with_retry(
    policy: RetryPolicy,
    retry_on: type[BaseException] | tuple[type[BaseException], ...],
    func: Callable[[], Awaitable[T]],
) -> T:
    """Await ``func()`` under *policy*; the final failure propagates."""
    async for attempt in build_retrying(policy, retry_on):
        with attempt:
            return await func()
    raise AssertionError("unreachable")  # pragma: no cover
