"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: cache/base.py.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Protocol

from ..types import LiveResponse

DEFAULT_PROMPT_PREFIX_CHARS = 200


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """One cached response row with expiration metadata."""
    value: LiveResponse
    expires_at_s: float
    created_at_s: float
    prompt: str = ""


@dataclass(frozen=True, slots=True)
class CacheStats:
    """Snapshot of cache occupancy."""
    total_entries: int
    valid_entries: int


def request_fingerprint(
    prompt: str,
    *,
    has_image: bool,
    temperature: float,
    model: str,
    prefix_chars: int = DEFAULT_PROMPT_PREFIX_CHARS,
) -> str:
    """
    Build the cache key for one request.

    Only a prefix of the prompt participates, so prompts sharing a long
    common prefix map to the same key.
    """
    payload = {
        "prompt": (prompt or "")[:prefix_chars],
        "has_image": bool(has_image),
        "temperature": temperature,
        "model": model,
    }
    return json.dumps(payload, ensure_ascii=False, sort_keys=True)


def fingerprint_prompt(key: str) -> str | None:
    """Recover the prompt fragment from a fingerprint, or None if unparseable."""
    try:
        row = json.loads(key)
    except ValueError:
        return None
    if not isinstance(row, dict):
        return None
    prompt = row.get("prompt")
    return prompt if isinstance(prompt, str) else None


class ResponseCacheBackend(Protocol):
    """Protocol implemented by cache backends used by the client facade."""
    backend_id: str

    async def get(self, key: str) -> LiveResponse | None: ...

    async def set(self, key: str, value: LiveResponse, *, ttl_s: float | None = None) -> None: ...

    async def delete(self, key: str) -> None: ...

    async def find_similar(
        self, prompt: str, *, threshold: float | None = None
    ) -> LiveResponse | None: ...

    async def clear(self) -> None: ...

    async def stats(self) -> CacheStats: ...
