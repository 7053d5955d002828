"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Client settings and explicit environment loading.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from .runtime.contracts import (
    CachePolicy,
    CircuitBreakerPolicy,
    QueuePolicy,
    RateLimitPolicy,
    RetryPolicy,
)

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"
DEFAULT_MODEL = "gemini-1.5-flash"


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_optional_float(name: str) -> float | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return float(value)


@dataclass(frozen=True, slots=True)
class GeminiSettings:
    """Explicit settings consumed by the transport and runtime policies."""

    api_key: str | None = None
    model: str = DEFAULT_MODEL
    vision_model: str = DEFAULT_MODEL
    base_url: str = DEFAULT_BASE_URL
    request_timeout_s: float | None = None

    temperature: float = 0.7
    max_output_tokens: int = 1000
    top_p: float = 0.95
    top_k: int = 64

    max_concurrent_requests: int = 2
    request_delay_s: float = 4.0
    max_retries: int = 1
    retry_backoff_s: float = 10.0

    max_requests_per_minute: int = 15
    min_request_interval_s: float = 4.0

    failure_threshold: int = 3
    offline_cooldown_s: float = 300.0
    count_upstream_failures: bool = False

    cache_enabled: bool = True
    cache_ttl_s: float = 300.0
    image_cache_ttl_s: float = 120.0
    cache_max_entries: int = 100
    similarity_threshold: float = 0.85

    @staticmethod
    def from_env() -> "GeminiSettings":
        """Load settings from environment variables."""
        return GeminiSettings(
            api_key=os.getenv("GEMINI_API_KEY"),
            model=os.getenv("GEMINI_MODEL", DEFAULT_MODEL),
            vision_model=os.getenv("GEMINI_VISION_MODEL", DEFAULT_MODEL),
            base_url=os.getenv("GEMINI_API_BASE_URL", DEFAULT_BASE_URL),
            request_timeout_s=_env_optional_float("GEMINI_REQUEST_TIMEOUT_S"),
            temperature=float(os.getenv("GEMINI_TEMPERATURE", "0.7")),
            max_output_tokens=int(os.getenv("GEMINI_MAX_OUTPUT_TOKENS", "1000")),
            top_p=float(os.getenv("GEMINI_TOP_P", "0.95")),
            top_k=int(os.getenv("GEMINI_TOP_K", "64")),
            max_concurrent_requests=int(os.getenv("GEMINI_MAX_CONCURRENT_REQUESTS", "2")),
            request_delay_s=float(os.getenv("GEMINI_REQUEST_DELAY_S", "4")),
            max_retries=int(os.getenv("GEMINI_MAX_RETRIES", "1")),
            retry_backoff_s=float(os.getenv("GEMINI_RETRY_BACKOFF_S", "10")),
            max_requests_per_minute=int(os.getenv("GEMINI_MAX_REQUESTS_PER_MINUTE", "15")),
            min_request_interval_s=float(os.getenv("GEMINI_MIN_REQUEST_INTERVAL_S", "4")),
            failure_threshold=int(os.getenv("GEMINI_OFFLINE_FAILURE_THRESHOLD", "3")),
            offline_cooldown_s=float(os.getenv("GEMINI_OFFLINE_COOLDOWN_S", "300")),
            count_upstream_failures=_env_bool("GEMINI_COUNT_UPSTREAM_FAILURES", False),
            cache_enabled=_env_bool("GEMINI_CACHE_ENABLED", True),
            cache_ttl_s=float(os.getenv("GEMINI_CACHE_TTL_S", "300")),
            image_cache_ttl_s=float(os.getenv("GEMINI_IMAGE_CACHE_TTL_S", "120")),
            cache_max_entries=int(os.getenv("GEMINI_CACHE_MAX_ENTRIES", "100")),
            similarity_threshold=float(os.getenv("GEMINI_SIMILARITY_THRESHOLD", "0.85")),
        )

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(max_retries=self.max_retries, backoff_s=self.retry_backoff_s)

    def rate_limit_policy(self) -> RateLimitPolicy:
        return RateLimitPolicy(
            max_requests_per_minute=self.max_requests_per_minute,
            min_interval_s=self.min_request_interval_s,
        )

    def circuit_breaker_policy(self) -> CircuitBreakerPolicy:
        return CircuitBreakerPolicy(
            failure_threshold=self.failure_threshold,
            cooldown_s=self.offline_cooldown_s,
            count_upstream_failures=self.count_upstream_failures,
        )

    def queue_policy(self) -> QueuePolicy:
        return QueuePolicy(
            max_concurrent_requests=self.max_concurrent_requests,
            request_delay_s=self.request_delay_s,
        )

    def cache_policy(self) -> CachePolicy:
        return CachePolicy(
            enabled=self.cache_enabled,
            ttl_s=self.cache_ttl_s,
            image_ttl_s=self.image_cache_ttl_s,
            max_entries=self.cache_max_entries,
            similarity_threshold=self.similarity_threshold,
        )
