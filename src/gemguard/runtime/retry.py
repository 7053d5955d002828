"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: runtime/retry.py.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from ..clock import Clock, SystemClock
from ..errors import GeminiError, GeminiRetryableError, classify_error
from .contracts import RetryPolicy

T = TypeVar("T")

logger = logging.getLogger("gemguard.runtime.retry")


def backoff_delay(attempt: int, policy: RetryPolicy) -> float:
    """Delay before retry number `attempt + 1`."""
    return max(0.0, policy.backoff_s * (policy.backoff_multiplier ** attempt))


async def call_with_retry(
    fn: Callable[[], Awaitable[T]],
    *,
    policy: RetryPolicy,
    clock: Clock | None = None,
) -> T:
    """
    Execute callable under the bounded retry policy.

    Only `GeminiRetryableError` failures are retried; everything else
    surfaces on the first attempt.
    """
    clock = clock or SystemClock()
    retries = max(0, policy.max_retries)
    last: Exception | None = None
    for attempt in range(retries + 1):
        try:
            return await fn()
        except Exception as error:
            classified = classify_error(error)
            last = classified
            if isinstance(classified, GeminiRetryableError) and attempt < retries:
                delay = backoff_delay(attempt, policy)
                logger.warning(
                    "Retryable failure (attempt %d/%d), retrying in %.1fs: %s",
                    attempt + 1,
                    retries + 1,
                    delay,
                    classified,
                )
                await clock.sleep(delay)
                continue
            if classified is error:
                raise
            raise classified from error
    raise GeminiError("Retry loop exhausted") from last
