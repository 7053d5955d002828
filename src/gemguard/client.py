"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Gemini client facade composing cache, governor, breaker and executor.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import TypeVar

from .cache import CacheStats, InMemoryResponseCache, ResponseCacheBackend, request_fingerprint
from .clients import GeminiTransport, conversation_contents, image_part, text_part, user_content
from .clock import Clock, SystemClock
from .errors import (
    GeminiError,
    InvalidCredentialError,
    MissingCredentialError,
    RateLimitedError,
)
from .offline import OfflineResponder
from .runtime import (
    BreakerStatus,
    CachePolicy,
    CircuitBreakerPolicy,
    OfflineCircuitBreaker,
    QueuePolicy,
    RateGovernor,
    RateGovernorStats,
    RateLimitPolicy,
    RequestQueue,
    RetryPolicy,
    call_with_retry,
)
from .settings import GeminiSettings
from .types import (
    ChatMessage,
    ConnectionCheck,
    GenerationOptions,
    GenerationResult,
    LiveResponse,
    ModelInfo,
    TokenCount,
)

T = TypeVar("T")

logger = logging.getLogger("gemguard.client")

MIN_API_KEY_LENGTH = 10
CONNECTION_PROBE_PROMPT = "Say 'Hello' if you can hear me."
OFFLINE_CONNECTION_MESSAGE = "Offline mode is active; the API was not contacted"

AVAILABLE_MODELS: tuple[ModelInfo, ...] = (
    ModelInfo(
        name="gemini-1.5-flash",
        display_name="Gemini 1.5 Flash",
        description="Fast and efficient model for text and images",
        capabilities=("text", "vision"),
    ),
    ModelInfo(
        name="gemini-1.5-pro",
        display_name="Gemini 1.5 Pro",
        description="Most capable model for complex tasks",
        capabilities=("text", "vision"),
    ),
)


@dataclass(frozen=True, slots=True)
class ClientStatus:
    """Aggregated view backing offline and rate-limit banners."""

    model: str
    has_api_key: bool
    cache: CacheStats
    rate: RateGovernorStats
    breaker: BreakerStatus
    queue_pending: int
    queue_active: int


class GeminiClient:
    """
    Governed Gemini client.

    Each instance owns its own cache, governor, breaker and queue, so two
    clients in one process never share state. Any component can be injected
    for testing or for sharing on purpose.

    Breaker bookkeeping: a governor denial always counts as a failure and a
    successful network call always resets the breaker. Errors surfaced by
    the executor only count when
    `CircuitBreakerPolicy.count_upstream_failures` is enabled.
    """

    def __init__(
        self,
        settings: GeminiSettings | None = None,
        *,
        api_key: str | None = None,
        model: str | None = None,
        transport: GeminiTransport | None = None,
        cache: ResponseCacheBackend | None = None,
        governor: RateGovernor | None = None,
        breaker: OfflineCircuitBreaker | None = None,
        queue: RequestQueue | None = None,
        offline: OfflineResponder | None = None,
        clock: Clock | None = None,
        cache_policy: CachePolicy | None = None,
        rate_limit_policy: RateLimitPolicy | None = None,
        circuit_breaker_policy: CircuitBreakerPolicy | None = None,
        queue_policy: QueuePolicy | None = None,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self.settings = settings or GeminiSettings()
        self._api_key = api_key if api_key is not None else self.settings.api_key
        self._model = model or self.settings.model
        self._clock = clock or SystemClock()

        self._cache_policy = cache_policy or self.settings.cache_policy()
        self._retry_policy = retry_policy or self.settings.retry_policy()

        self._transport = transport or GeminiTransport(
            base_url=self.settings.base_url,
            timeout_s=self.settings.request_timeout_s,
        )
        self._cache = cache or InMemoryResponseCache(self._cache_policy, clock=self._clock)
        self._governor = governor or RateGovernor(
            rate_limit_policy or self.settings.rate_limit_policy(), clock=self._clock
        )
        self._breaker = breaker or OfflineCircuitBreaker(
            circuit_breaker_policy or self.settings.circuit_breaker_policy(), clock=self._clock
        )
        self._queue = queue or RequestQueue(
            queue_policy or self.settings.queue_policy(), clock=self._clock
        )
        self._offline = offline or OfflineResponder()

    @property
    def model(self) -> str:
        return self._model

    @property
    def cache(self) -> ResponseCacheBackend:
        return self._cache

    @property
    def governor(self) -> RateGovernor:
        return self._governor

    @property
    def breaker(self) -> OfflineCircuitBreaker:
        return self._breaker

    @property
    def queue(self) -> RequestQueue:
        return self._queue

    def set_api_key(self, api_key: str | None) -> None:
        self._api_key = api_key

    def set_model(self, model: str) -> None:
        self._model = model

    def validate_api_key(self, api_key: str | None = None) -> str:
        """Return the usable key or raise the matching credential error."""
        key = api_key if api_key is not None else self._api_key
        if not key:
            raise MissingCredentialError()
        if len(key) < MIN_API_KEY_LENGTH:
            raise InvalidCredentialError()
        return key

    def _resolve_options(self, options: GenerationOptions | None) -> GenerationOptions:
        if options is not None:
            return options
        return GenerationOptions(
            temperature=self.settings.temperature,
            max_output_tokens=self.settings.max_output_tokens,
            top_p=self.settings.top_p,
            top_k=self.settings.top_k,
        )

    async def _lookup(self, key: str, prompt: str, *, fuzzy: bool) -> LiveResponse | None:
        if not self._cache_policy.enabled:
            return None
        cached = await self._cache.get(key)
        if cached is not None:
            return cached
        if fuzzy and self._cache_policy.fuzzy_match:
            return await self._cache.find_similar(
                prompt, threshold=self._cache_policy.similarity_threshold
            )
        return None

    def _check_rate(self) -> None:
        decision = self._governor.can_make_request()
        if decision.allowed:
            return
        self._breaker.record_failure()
        wait_s = decision.wait_s
        raise RateLimitedError(
            f"Rate limit: wait {math.ceil(wait_s)} seconds and try again. "
            "API limits were exceeded.",
            wait_s=wait_s,
        )

    async def _execute(
        self,
        call: Callable[[], Awaitable[T]],
        *,
        governed: bool = True,
    ) -> T:
        """Run `call` through the queue with retry; governed calls update governor and breaker."""

        async def attempt() -> T:
            if governed:
                self._governor.record_request()
            return await call()

        async def operation() -> T:
            return await call_with_retry(attempt, policy=self._retry_policy, clock=self._clock)

        try:
            result = await self._queue.enqueue(operation)
        except GeminiError as error:
            if governed and self._breaker.policy.count_upstream_failures:
                self._breaker.record_failure()
            logger.warning("Gemini request failed: %s", error)
            raise
        if governed:
            self._breaker.record_success()
        return result

    async def generate_text(
        self,
        prompt: str,
        options: GenerationOptions | None = None,
    ) -> GenerationResult:
        """Generate text for one prompt, governed by cache, rate and breaker."""
        options = self._resolve_options(options)
        if self._breaker.should_use_offline_mode():
            logger.info("Offline mode: serving a local templated response")
            return self._offline.respond_to_prompt(prompt, options)

        api_key = self.validate_api_key()
        model = options.model or self._model
        key = request_fingerprint(
            prompt,
            has_image=False,
            temperature=options.temperature,
            model=model,
            prefix_chars=self._cache_policy.prompt_prefix_chars,
        )
        cached = await self._lookup(key, prompt, fuzzy=True)
        if cached is not None:
            return cached

        self._check_rate()
        contents = [user_content(text_part(prompt))]
        result = await self._execute(
            lambda: self._transport.generate_content(
                api_key=api_key, model=model, contents=contents, options=options
            )
        )
        if self._cache_policy.enabled:
            await self._cache.set(key, result, ttl_s=self._cache_policy.ttl_s)
        return result

    async def generate_text_from_image(
        self,
        prompt: str,
        image: bytes | str,
        options: GenerationOptions | None = None,
    ) -> GenerationResult:
        """
        Generate text for a prompt plus one inline image.

        `image` is raw bytes or an already base64-encoded string. Image
        results skip fuzzy lookup and are cached with the shorter image TTL.
        """
        options = self._resolve_options(options)
        if self._breaker.should_use_offline_mode():
            logger.info("Offline mode: serving a local visual-search response")
            return self._offline.visual_search(options.products)

        api_key = self.validate_api_key()
        model = options.model or self.settings.vision_model
        key = request_fingerprint(
            prompt,
            has_image=True,
            temperature=options.temperature,
            model=model,
            prefix_chars=self._cache_policy.prompt_prefix_chars,
        )
        cached = await self._lookup(key, prompt, fuzzy=False)
        if cached is not None:
            return cached

        self._check_rate()
        contents = [user_content(text_part(prompt), image_part(image, options.mime_type))]
        result = await self._execute(
            lambda: self._transport.generate_content(
                api_key=api_key,
                model=model,
                contents=contents,
                options=options,
                include_candidate_count=False,
            )
        )
        if self._cache_policy.enabled:
            await self._cache.set(key, result, ttl_s=self._cache_policy.image_ttl_s)
        return result

    async def generate_conversation(
        self,
        messages: Sequence[ChatMessage],
        options: GenerationOptions | None = None,
    ) -> LiveResponse:
        """Multi-turn generation; queued and retried, but neither cached nor governed."""
        options = self._resolve_options(options)
        api_key = self.validate_api_key()
        model = options.model or self._model
        contents = conversation_contents(messages)
        return await self._execute(
            lambda: self._transport.generate_content(
                api_key=api_key,
                model=model,
                contents=contents,
                options=options,
                include_candidate_count=False,
            ),
            governed=False,
        )

    async def count_tokens(self, text: str, model: str | None = None) -> TokenCount:
        api_key = self.validate_api_key()
        resolved = model or self._model
        return await self._execute(
            lambda: self._transport.count_tokens(api_key=api_key, model=resolved, text=text),
            governed=False,
        )

    async def test_connection(self) -> ConnectionCheck:
        """Probe the API with a tiny prompt; failures are reported, not raised."""
        try:
            self.validate_api_key()
            result = await self.generate_text(
                CONNECTION_PROBE_PROMPT,
                GenerationOptions(max_output_tokens=10, temperature=0.0),
            )
        except GeminiError as error:
            return ConnectionCheck(success=False, message=str(error), error=error)
        if result.is_offline:
            return ConnectionCheck(
                success=False,
                message=OFFLINE_CONNECTION_MESSAGE,
                response=result.text,
            )
        return ConnectionCheck(
            success=True,
            message="Connection successful",
            response=result.text,
        )

    def available_models(self) -> list[ModelInfo]:
        return list(AVAILABLE_MODELS)

    def force_online(self) -> None:
        self._breaker.force_online()

    async def clear_cache(self) -> None:
        await self._cache.clear()

    async def status(self) -> ClientStatus:
        return ClientStatus(
            model=self._model,
            has_api_key=bool(self._api_key),
            cache=await self._cache.stats(),
            rate=self._governor.stats(),
            breaker=self._breaker.status(),
            queue_pending=self._queue.pending_count,
            queue_active=self._queue.active_count,
        )

    async def aclose(self) -> None:
        await self._queue.aclose()
