"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: cache/__init__.py.
"""

from .base import (
    CacheEntry,
    CacheStats,
    ResponseCacheBackend,
    fingerprint_prompt,
    request_fingerprint,
)
from .inmemory import InMemoryResponseCache
from .redis import RedisResponseCache
from .similarity import is_similar, levenshtein_distance, similarity

__all__ = [
    "CacheEntry",
    "CacheStats",
    "ResponseCacheBackend",
    "InMemoryResponseCache",
    "RedisResponseCache",
    "request_fingerprint",
    "fingerprint_prompt",
    "levenshtein_distance",
    "similarity",
    "is_similar",
]
