"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: cache/redis.py.
"""

from __future__ import annotations

import hashlib
import json
import logging
import time
from typing import Any

from ..runtime.contracts import CachePolicy
from ..types import LiveResponse, SafetyRating, Usage
from .base import CacheStats, ResponseCacheBackend, fingerprint_prompt
from .similarity import is_similar

logger = logging.getLogger("gemguard.cache.redis")

DEFAULT_NAMESPACE = "gemguard:cache:"


def response_to_row(value: LiveResponse) -> dict[str, Any]:
    """Serialize a live response into a JSON-compatible row."""
    return {
        "text": value.text,
        "finish_reason": value.finish_reason,
        "safety_ratings": [
            {"category": r.category, "probability": r.probability, "blocked": r.blocked}
            for r in value.safety_ratings
        ],
        "usage": {
            "prompt_tokens": value.usage.prompt_tokens,
            "candidates_tokens": value.usage.candidates_tokens,
            "total_tokens": value.usage.total_tokens,
        },
        "model": value.model,
    }


def response_from_row(row: dict[str, Any]) -> LiveResponse:
    """Inverse of `response_to_row`, tolerant of missing fields."""
    ratings = [
        SafetyRating(
            category=item.get("category", ""),
            probability=item.get("probability"),
            blocked=bool(item.get("blocked", False)),
        )
        for item in (row.get("safety_ratings") or [])
        if isinstance(item, dict)
    ]
    usage_row = row.get("usage") if isinstance(row.get("usage"), dict) else {}
    return LiveResponse(
        text=row.get("text", ""),
        finish_reason=row.get("finish_reason"),
        safety_ratings=ratings,
        usage=Usage(
            prompt_tokens=usage_row.get("prompt_tokens"),
            candidates_tokens=usage_row.get("candidates_tokens"),
            total_tokens=usage_row.get("total_tokens"),
        ),
        model=row.get("model"),
    )


class RedisResponseCache(ResponseCacheBackend):
    """
    Redis-backed cache for sharing responses across processes.

    Expiry is delegated to Redis (`SETEX`), so an expired row is simply
    absent. Capacity is bounded by the server's eviction policy rather than
    `CachePolicy.max_entries`.
    """

    backend_id = "redis"

    def __init__(
        self,
        redis_client,
        policy: CachePolicy | None = None,
        *,
        namespace: str = DEFAULT_NAMESPACE,
    ) -> None:
        self._redis = redis_client
        self._policy = policy or CachePolicy()
        self._namespace = namespace

    @classmethod
    def from_url(cls, url: str, policy: CachePolicy | None = None) -> "RedisResponseCache":
        import redis.asyncio as redis

        return cls(redis.from_url(url, decode_responses=True), policy)

    def _redis_key(self, key: str) -> str:
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return f"{self._namespace}{digest}"

    async def _load(self, redis_key: str) -> dict[str, Any] | None:
        blob = await self._redis.get(redis_key)
        if blob is None:
            return None
        if isinstance(blob, bytes):
            blob = blob.decode("utf-8")
        try:
            row = json.loads(blob)
        except ValueError:
            logger.warning("Dropping undecodable cache row %s", redis_key)
            await self._redis.delete(redis_key)
            return None
        return row if isinstance(row, dict) else None

    async def get(self, key: str) -> LiveResponse | None:
        row = await self._load(self._redis_key(key))
        if row is None or not isinstance(row.get("value"), dict):
            return None
        return response_from_row(row["value"])

    async def set(self, key: str, value: LiveResponse, *, ttl_s: float | None = None) -> None:
        ttl = self._policy.ttl_s if ttl_s is None else ttl_s
        payload = {
            "prompt": fingerprint_prompt(key) or "",
            "created_at_s": time.time(),
            "value": response_to_row(value),
        }
        await self._redis.setex(
            self._redis_key(key),
            int(max(1, ttl)),
            json.dumps(payload, ensure_ascii=True),
        )

    async def delete(self, key: str) -> None:
        await self._redis.delete(self._redis_key(key))

    async def find_similar(
        self, prompt: str, *, threshold: float | None = None
    ) -> LiveResponse | None:
        limit = self._policy.similarity_threshold if threshold is None else threshold
        async for redis_key in self._redis.scan_iter(match=f"{self._namespace}*"):
            row = await self._load(redis_key)
            if row is None:
                continue
            fragment = row.get("prompt")
            if not isinstance(fragment, str) or not fragment:
                continue
            if is_similar(prompt, fragment, limit) and isinstance(row.get("value"), dict):
                return response_from_row(row["value"])
        return None

    async def clear(self) -> None:
        keys = [key async for key in self._redis.scan_iter(match=f"{self._namespace}*")]
        if keys:
            await self._redis.delete(*keys)

    async def stats(self) -> CacheStats:
        count = 0
        async for _ in self._redis.scan_iter(match=f"{self._namespace}*"):
            count += 1
        return CacheStats(total_entries=count, valid_entries=count)
