"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: cache/inmemory.py.
"""

from __future__ import annotations

import logging

from ..clock import Clock, SystemClock
from ..runtime.contracts import CachePolicy
from ..types import LiveResponse
from .base import CacheEntry, CacheStats, ResponseCacheBackend, fingerprint_prompt
from .similarity import is_similar

logger = logging.getLogger("gemguard.cache")


class InMemoryResponseCache(ResponseCacheBackend):
    """
    Process-local cache with TTL expiry and insertion-order eviction.

    When the entry count reaches `max_entries`, the `evict_count` oldest
    insertions are dropped before the new row is stored. Reads do not
    refresh position, so this is not an LRU.
    """

    backend_id = "inmemory"

    def __init__(self, policy: CachePolicy | None = None, *, clock: Clock | None = None) -> None:
        self._policy = policy or CachePolicy()
        self._clock = clock or SystemClock()
        self._rows: dict[str, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._rows)

    def _is_expired(self, row: CacheEntry, now: float) -> bool:
        return now >= row.expires_at_s

    async def get(self, key: str) -> LiveResponse | None:
        row = self._rows.get(key)
        if row is None:
            return None
        if self._is_expired(row, self._clock.now()):
            self._rows.pop(key, None)
            return None
        logger.debug("Cache hit for key %.50s", key)
        return row.value

    async def set(self, key: str, value: LiveResponse, *, ttl_s: float | None = None) -> None:
        if key not in self._rows and len(self._rows) >= self._policy.max_entries:
            oldest = list(self._rows)[: max(1, self._policy.evict_count)]
            for stale in oldest:
                del self._rows[stale]
            logger.debug("Evicted %d oldest cache entries", len(oldest))

        now = self._clock.now()
        self._rows[key] = CacheEntry(
            value=value,
            expires_at_s=now + (self._policy.ttl_s if ttl_s is None else ttl_s),
            created_at_s=now,
            prompt=fingerprint_prompt(key) or "",
        )

    async def delete(self, key: str) -> None:
        self._rows.pop(key, None)

    async def find_similar(
        self, prompt: str, *, threshold: float | None = None
    ) -> LiveResponse | None:
        limit = self._policy.similarity_threshold if threshold is None else threshold
        now = self._clock.now()
        for row in self._rows.values():
            if self._is_expired(row, now) or not row.prompt:
                continue
            if is_similar(prompt, row.prompt, limit):
                logger.debug("Similar cached response found (threshold=%.2f)", limit)
                return row.value
        return None

    async def clear(self) -> None:
        self._rows.clear()
        logger.info("Response cache cleared")

    async def stats(self) -> CacheStats:
        now = self._clock.now()
        valid = sum(1 for row in self._rows.values() if not self._is_expired(row, now))
        return CacheStats(total_entries=len(self._rows), valid_entries=valid)
