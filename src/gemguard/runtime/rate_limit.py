"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: runtime/rate_limit.py.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass

from ..clock import Clock, SystemClock
from .contracts import RateLimitPolicy

logger = logging.getLogger("gemguard.runtime.rate_limit")


@dataclass(frozen=True, slots=True)
class RateDecision:
    """Outcome of one advisory rate check."""

    allowed: bool
    wait_s: float = 0.0


@dataclass(frozen=True, slots=True)
class RateGovernorStats:
    """Data type for rate governor stats."""

    recent_requests: int
    last_request_at_s: float | None
    next_request_allowed_at_s: float | None


class RateGovernor:
    """
    Advisory sliding-window governor.

    It never blocks or queues; callers consult `can_make_request` and decide
    what to do with a denial.
    """

    def __init__(self, policy: RateLimitPolicy | None = None, *, clock: Clock | None = None) -> None:
        self._policy = policy or RateLimitPolicy()
        self._clock = clock or SystemClock()
        self._timestamps: deque[float] = deque()
        self._last_request_at_s: float | None = None

    def _prune(self, now: float) -> None:
        horizon = now - self._policy.window_s
        while self._timestamps and self._timestamps[0] <= horizon:
            self._timestamps.popleft()

    def can_make_request(self) -> RateDecision:
        now = self._clock.now()
        if self._last_request_at_s is not None:
            elapsed = now - self._last_request_at_s
            if elapsed < self._policy.min_interval_s:
                wait_s = self._policy.min_interval_s - elapsed
                logger.info("Rate limit: %.1fs until the next request is allowed", wait_s)
                return RateDecision(allowed=False, wait_s=wait_s)

        self._prune(now)
        if len(self._timestamps) >= self._policy.max_requests_per_minute:
            logger.info(
                "Per-minute ceiling reached (%d requests)",
                self._policy.max_requests_per_minute,
            )
            return RateDecision(allowed=False, wait_s=self._policy.window_s)

        return RateDecision(allowed=True)

    def record_request(self) -> None:
        now = self._clock.now()
        self._timestamps.append(now)
        self._last_request_at_s = now

    def stats(self) -> RateGovernorStats:
        self._prune(self._clock.now())
        last = self._last_request_at_s
        return RateGovernorStats(
            recent_requests=len(self._timestamps),
            last_request_at_s=last,
            next_request_allowed_at_s=None if last is None else last + self._policy.min_interval_s,
        )
