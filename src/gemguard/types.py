"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

This module defines the request and response types shared across the client.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, TypeAlias

JSONPrimitive: TypeAlias = str | int | float | bool | None
JSONValue: TypeAlias = JSONPrimitive | list["JSONValue"] | dict[str, "JSONValue"]
JSONObject: TypeAlias = dict[str, JSONValue]

Role = Literal["user", "assistant"]
SyntheticKind = Literal[
    "description",
    "tags",
    "recommendations",
    "visual_search",
    "generic",
]


@dataclass(frozen=True, slots=True)
class GenerationOptions:
    """
    Per-call generation controls.

    `product`, `user_profile` and `products` are context for offline
    templates only; they are never sent upstream.
    """

    model: str | None = None
    temperature: float = 0.7
    max_output_tokens: int = 1000
    top_p: float = 0.95
    top_k: int = 64
    candidate_count: int = 1
    mime_type: str = "image/jpeg"
    product: JSONObject | None = None
    user_profile: JSONObject | None = None
    products: list[JSONObject] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class ChatMessage:
    """One turn of a multi-turn conversation."""
    role: Role
    content: str


@dataclass(frozen=True, slots=True)
class SafetyRating:
    """Upstream safety classification for one harm category."""
    category: str
    probability: str | None = None
    blocked: bool = False


@dataclass(frozen=True, slots=True)
class Usage:
    """Token usage counters returned by upstream responses."""
    prompt_tokens: int | None = None
    candidates_tokens: int | None = None
    total_tokens: int | None = None


@dataclass(frozen=True, slots=True)
class LiveResponse:
    """Answer obtained from the network (possibly served from cache)."""
    text: str
    finish_reason: str | None = None
    safety_ratings: list[SafetyRating] = field(default_factory=list)
    usage: Usage = field(default_factory=Usage)
    model: str | None = None

    @property
    def is_offline(self) -> Literal[False]:
        return False


@dataclass(frozen=True, slots=True)
class SyntheticResponse:
    """Templated answer produced locally while the breaker is offline."""
    text: str
    kind: SyntheticKind = "generic"
    finish_reason: str | None = "STOP"
    matched_products: list[JSONObject] = field(default_factory=list)
    confidence: float | None = None

    @property
    def is_offline(self) -> Literal[True]:
        return True


GenerationResult: TypeAlias = LiveResponse | SyntheticResponse


@dataclass(frozen=True, slots=True)
class TokenCount:
    """Result of a countTokens call."""
    total_tokens: int = 0
    total_billable_characters: int = 0


@dataclass(frozen=True, slots=True)
class ModelInfo:
    """Static description of a selectable model."""
    name: str
    display_name: str
    description: str
    capabilities: tuple[str, ...] = ("text",)


@dataclass(frozen=True, slots=True)
class ConnectionCheck:
    """Outcome of a connectivity probe."""
    success: bool
    message: str
    response: str | None = None
    error: Any = None
