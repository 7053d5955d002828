"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Typed runtime policies for governed Gemini execution.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Retry semantics applied inside one executor slot."""

    max_retries: int = 1
    backoff_s: float = 10.0
    backoff_multiplier: float = 2.0


@dataclass(frozen=True, slots=True)
class RateLimitPolicy:
    """Sliding-window ceiling plus minimum spacing between requests."""

    max_requests_per_minute: int = 15
    min_interval_s: float = 4.0
    window_s: float = 60.0


@dataclass(frozen=True, slots=True)
class CircuitBreakerPolicy:
    """
    Consecutive-failure policy for offline mode.

    `count_upstream_failures` makes errors surfaced by the executor count
    toward the threshold. Off by default: only governor denials count.
    """

    failure_threshold: int = 3
    cooldown_s: float = 300.0
    count_upstream_failures: bool = False


@dataclass(frozen=True, slots=True)
class QueuePolicy:
    """Executor concurrency and post-request spacing."""

    max_concurrent_requests: int = 2
    request_delay_s: float = 4.0


@dataclass(frozen=True, slots=True)
class CachePolicy:
    """Response cache controls."""

    enabled: bool = True
    ttl_s: float = 300.0
    image_ttl_s: float = 120.0
    max_entries: int = 100
    evict_count: int = 10
    prompt_prefix_chars: int = 200
    fuzzy_match: bool = True
    similarity_threshold: float = 0.85
