"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Pydantic models for the generateContent/countTokens wire format.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _WireModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class WirePart(_WireModel):
    text: str | None = None


class WireContent(_WireModel):
    role: str | None = None
    parts: list[WirePart] = Field(default_factory=list)


class WireSafetyRating(_WireModel):
    category: str = ""
    probability: str | None = None
    blocked: bool = False


class WireCandidate(_WireModel):
    content: WireContent | None = None
    finish_reason: str | None = Field(default=None, alias="finishReason")
    safety_ratings: list[WireSafetyRating] = Field(default_factory=list, alias="safetyRatings")


class WireUsageMetadata(_WireModel):
    prompt_token_count: int | None = Field(default=None, alias="promptTokenCount")
    candidates_token_count: int | None = Field(default=None, alias="candidatesTokenCount")
    total_token_count: int | None = Field(default=None, alias="totalTokenCount")


class GenerateContentResponse(_WireModel):
    candidates: list[WireCandidate] = Field(default_factory=list)
    usage_metadata: WireUsageMetadata | None = Field(default=None, alias="usageMetadata")

    def first_text(self) -> str | None:
        """Text of the first part of the first candidate, if present."""
        if not self.candidates:
            return None
        content = self.candidates[0].content
        if content is None or not content.parts:
            return None
        return content.parts[0].text or None


class CountTokensResponse(_WireModel):
    total_tokens: int = Field(default=0, alias="totalTokens")
    total_billable_characters: int = Field(default=0, alias="totalBillableCharacters")


class WireErrorDetail(_WireModel):
    code: int | None = None
    message: str | None = None
    status: str | None = None


class WireErrorEnvelope(_WireModel):
    error: WireErrorDetail | None = None
