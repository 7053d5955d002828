"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Governed asyncio client for the Gemini generative-language API.
"""

from .cache import (
    CacheStats,
    InMemoryResponseCache,
    RedisResponseCache,
    ResponseCacheBackend,
    request_fingerprint,
)
from .client import AVAILABLE_MODELS, ClientStatus, GeminiClient
from .clients import GeminiTransport, HTTPReply
from .clock import Clock, ManualClock, SystemClock
from .errors import (
    GeminiError,
    GeminiNetworkError,
    GeminiRetryableError,
    InvalidCredentialError,
    MalformedResponseError,
    MissingCredentialError,
    ModelUnavailableError,
    RateLimitedError,
    ServiceOverloadedError,
    UpstreamError,
)
from .offline import OfflineResponder
from .runtime import (
    BreakerState,
    CachePolicy,
    CircuitBreakerPolicy,
    OfflineCircuitBreaker,
    QueuePolicy,
    RateDecision,
    RateGovernor,
    RateLimitPolicy,
    RequestQueue,
    RetryPolicy,
)
from .settings import GeminiSettings
from .types import (
    ChatMessage,
    ConnectionCheck,
    GenerationOptions,
    GenerationResult,
    LiveResponse,
    ModelInfo,
    SafetyRating,
    SyntheticResponse,
    TokenCount,
    Usage,
)

__all__ = [
    "GeminiClient",
    "ClientStatus",
    "AVAILABLE_MODELS",
    "GeminiSettings",
    "GeminiTransport",
    "HTTPReply",
    "Clock",
    "SystemClock",
    "ManualClock",
    "ResponseCacheBackend",
    "InMemoryResponseCache",
    "RedisResponseCache",
    "CacheStats",
    "request_fingerprint",
    "RateGovernor",
    "RateDecision",
    "OfflineCircuitBreaker",
    "BreakerState",
    "RequestQueue",
    "OfflineResponder",
    "CachePolicy",
    "CircuitBreakerPolicy",
    "QueuePolicy",
    "RateLimitPolicy",
    "RetryPolicy",
    "GenerationOptions",
    "GenerationResult",
    "LiveResponse",
    "SyntheticResponse",
    "ChatMessage",
    "SafetyRating",
    "Usage",
    "TokenCount",
    "ModelInfo",
    "ConnectionCheck",
    "GeminiError",
    "GeminiRetryableError",
    "GeminiNetworkError",
    "MissingCredentialError",
    "InvalidCredentialError",
    "ModelUnavailableError",
    "RateLimitedError",
    "ServiceOverloadedError",
    "MalformedResponseError",
    "UpstreamError",
]
