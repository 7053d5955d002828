"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: runtime/__init__.py.
"""

from .circuit_breaker import BreakerState, BreakerStatus, OfflineCircuitBreaker
from .contracts import (
    CachePolicy,
    CircuitBreakerPolicy,
    QueuePolicy,
    RateLimitPolicy,
    RetryPolicy,
)
from .queue import QueueItem, RequestQueue
from .rate_limit import RateDecision, RateGovernor, RateGovernorStats
from .retry import backoff_delay, call_with_retry

__all__ = [
    "CachePolicy",
    "CircuitBreakerPolicy",
    "QueuePolicy",
    "RateLimitPolicy",
    "RetryPolicy",
    "BreakerState",
    "BreakerStatus",
    "OfflineCircuitBreaker",
    "QueueItem",
    "RequestQueue",
    "RateDecision",
    "RateGovernor",
    "RateGovernorStats",
    "backoff_delay",
    "call_with_retry",
]
