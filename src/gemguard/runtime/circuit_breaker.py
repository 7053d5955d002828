"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: runtime/circuit_breaker.py.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from ..clock import Clock, SystemClock
from .contracts import CircuitBreakerPolicy

logger = logging.getLogger("gemguard.runtime.circuit_breaker")


class BreakerState(str, Enum):
    ONLINE = "online"
    OFFLINE = "offline"


@dataclass(slots=True)
class _FailureState:
    """Data type for failure state."""

    consecutive_failures: int = 0
    last_failure_at_s: float | None = None
    is_offline: bool = False


@dataclass(frozen=True, slots=True)
class BreakerStatus:
    """Read-only view of the breaker for status banners."""

    state: BreakerState
    consecutive_failures: int
    next_retry_at_s: float | None
    retry_in_s: float


class OfflineCircuitBreaker:
    """
    Consecutive-failure breaker that routes calls to offline templates.

    Recovery is lazy: the cooldown is only evaluated when
    `should_use_offline_mode` is called.
    """

    def __init__(
        self,
        policy: CircuitBreakerPolicy | None = None,
        *,
        clock: Clock | None = None,
    ) -> None:
        self._policy = policy or CircuitBreakerPolicy()
        self._clock = clock or SystemClock()
        self._state = _FailureState()

    @property
    def policy(self) -> CircuitBreakerPolicy:
        return self._policy

    @property
    def state(self) -> BreakerState:
        return BreakerState.OFFLINE if self._state.is_offline else BreakerState.ONLINE

    @property
    def consecutive_failures(self) -> int:
        return self._state.consecutive_failures

    def record_failure(self) -> None:
        self._state.consecutive_failures += 1
        self._state.last_failure_at_s = self._clock.now()
        if (
            not self._state.is_offline
            and self._state.consecutive_failures >= self._policy.failure_threshold
        ):
            self._state.is_offline = True
            logger.warning(
                "Offline mode enabled after %d consecutive failures",
                self._state.consecutive_failures,
            )

    def record_success(self) -> None:
        was_offline = self._state.is_offline
        self._state.consecutive_failures = 0
        self._state.is_offline = False
        if was_offline:
            logger.info("Gemini API back online")

    def should_use_offline_mode(self) -> bool:
        state = self._state
        if state.is_offline and state.last_failure_at_s is not None:
            if self._clock.now() - state.last_failure_at_s >= self._policy.cooldown_s:
                logger.info("Offline cooldown elapsed; the API will be tried again")
                state.is_offline = False
                state.consecutive_failures = 0
        return state.is_offline

    def force_online(self) -> None:
        logger.info("Offline mode cleared manually")
        self._state = _FailureState()

    def status(self) -> BreakerStatus:
        last = self._state.last_failure_at_s
        next_retry = None if last is None else last + self._policy.cooldown_s
        retry_in = 0.0 if next_retry is None else max(0.0, next_retry - self._clock.now())
        return BreakerStatus(
            state=self.state,
            consecutive_failures=self._state.consecutive_failures,
            next_retry_at_s=next_retry,
            retry_in_s=retry_in,
        )
