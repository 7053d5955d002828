"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

HTTP transport for the Gemini generative-language REST API.
"""

from __future__ import annotations

import asyncio
import base64
import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from ..errors import (
    GeminiError,
    GeminiNetworkError,
    InvalidCredentialError,
    MalformedResponseError,
    ModelUnavailableError,
    RateLimitedError,
    ServiceOverloadedError,
    UpstreamError,
)
from ..settings import DEFAULT_BASE_URL
from ..types import (
    ChatMessage,
    GenerationOptions,
    JSONObject,
    LiveResponse,
    SafetyRating,
    TokenCount,
    Usage,
)
from .wire import CountTokensResponse, GenerateContentResponse, WireErrorEnvelope

logger = logging.getLogger("gemguard.clients.gemini")

SAFETY_SETTINGS: tuple[JSONObject, ...] = tuple(
    {"category": category, "threshold": "BLOCK_MEDIUM_AND_ABOVE"}
    for category in (
        "HARM_CATEGORY_HARASSMENT",
        "HARM_CATEGORY_HATE_SPEECH",
        "HARM_CATEGORY_SEXUALLY_EXPLICIT",
        "HARM_CATEGORY_DANGEROUS_CONTENT",
    )
)


@dataclass(frozen=True, slots=True)
class HTTPReply:
    """Raw HTTP status and body returned by a post function."""

    status: int
    body: bytes = b""
    reason: str = ""


PostFn = Callable[[str, bytes, float | None], HTTPReply]


def text_part(text: str) -> JSONObject:
    return {"text": text}


def image_part(image: bytes | str, mime_type: str) -> JSONObject:
    """Inline image part; raw bytes are base64-encoded, strings pass through."""
    data = base64.b64encode(image).decode("ascii") if isinstance(image, bytes) else image
    return {"inline_data": {"mime_type": mime_type, "data": data}}


def user_content(*parts: JSONObject) -> JSONObject:
    return {"parts": list(parts)}


def conversation_contents(messages: Sequence[ChatMessage]) -> list[JSONObject]:
    """Map chat turns onto Gemini roles (`assistant` becomes `model`)."""
    return [
        {
            "role": "model" if message.role == "assistant" else "user",
            "parts": [text_part(message.content)],
        }
        for message in messages
    ]


def build_generate_payload(
    contents: list[JSONObject],
    options: GenerationOptions,
    *,
    include_candidate_count: bool = True,
) -> JSONObject:
    generation_config: JSONObject = {
        "temperature": options.temperature,
        "maxOutputTokens": options.max_output_tokens,
        "topP": options.top_p,
        "topK": options.top_k,
    }
    if include_candidate_count:
        generation_config["candidateCount"] = options.candidate_count
    return {
        "contents": contents,
        "generationConfig": generation_config,
        "safetySettings": [dict(row) for row in SAFETY_SETTINGS],
    }


def error_for_status(status: int, message: str) -> GeminiError:
    """Classify one non-2xx reply into the error taxonomy."""
    if status == 429:
        return RateLimitedError()
    if status == 401:
        return InvalidCredentialError()
    if status == 404:
        return ModelUnavailableError()
    if status == 503:
        return ServiceOverloadedError()
    if "overloaded" in message.lower():
        return RateLimitedError()
    return UpstreamError(message, status_code=status)


def _decode_json(body: bytes) -> Any:
    return json.loads(body.decode("utf-8"))


def _error_message(reply: HTTPReply) -> str:
    try:
        envelope = WireErrorEnvelope.model_validate(_decode_json(reply.body))
    except (ValueError, ValidationError):
        envelope = None
    if envelope is not None and envelope.error is not None and envelope.error.message:
        return envelope.error.message
    return f"HTTP {reply.status}: {reply.reason}".rstrip(": ")


def to_live_response(parsed: GenerateContentResponse, *, model: str | None) -> LiveResponse:
    text = parsed.first_text()
    if text is None:
        raise MalformedResponseError()
    candidate = parsed.candidates[0]
    usage = parsed.usage_metadata
    return LiveResponse(
        text=text,
        finish_reason=candidate.finish_reason,
        safety_ratings=[
            SafetyRating(category=r.category, probability=r.probability, blocked=r.blocked)
            for r in candidate.safety_ratings
        ],
        usage=Usage(
            prompt_tokens=usage.prompt_token_count if usage else None,
            candidates_tokens=usage.candidates_token_count if usage else None,
            total_tokens=usage.total_token_count if usage else None,
        ),
        model=model,
    )


class GeminiTransport:
    """
    Stateless POST-and-classify transport.

    The blocking HTTP call runs in a worker thread. Tests and alternative
    stacks can inject `post`, which receives `(url, body, timeout_s)`.
    """

    def __init__(
        self,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout_s: float | None = None,
        post: PostFn | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout_s = timeout_s
        self._post = post or self.http_post

    def build_url(self, endpoint: str, *, model: str, api_key: str) -> str:
        query = urllib.parse.urlencode({"key": api_key})
        return f"{self._base_url}/{model}:{endpoint}?{query}"

    async def generate_content(
        self,
        *,
        api_key: str,
        model: str,
        contents: list[JSONObject],
        options: GenerationOptions,
        include_candidate_count: bool = True,
    ) -> LiveResponse:
        payload = build_generate_payload(
            contents, options, include_candidate_count=include_candidate_count
        )
        row = await self._post_json(
            self.build_url("generateContent", model=model, api_key=api_key),
            payload,
            model=model,
        )
        try:
            parsed = GenerateContentResponse.model_validate(row)
        except ValidationError as exc:
            raise MalformedResponseError() from exc
        return to_live_response(parsed, model=model)

    async def count_tokens(self, *, api_key: str, model: str, text: str) -> TokenCount:
        row = await self._post_json(
            self.build_url("countTokens", model=model, api_key=api_key),
            {"contents": [user_content(text_part(text))]},
            model=model,
        )
        try:
            parsed = CountTokensResponse.model_validate(row)
        except ValidationError as exc:
            raise MalformedResponseError() from exc
        return TokenCount(
            total_tokens=parsed.total_tokens,
            total_billable_characters=parsed.total_billable_characters,
        )

    async def _post_json(self, url: str, payload: JSONObject, *, model: str) -> Any:
        body = json.dumps(payload).encode("utf-8")
        reply = await asyncio.to_thread(self._post, url, body, self._timeout_s)

        if not 200 <= reply.status < 300:
            message = _error_message(reply)
            logger.error(
                "Gemini API error (status=%d, model=%s): %s",
                reply.status,
                model,
                message,
            )
            raise error_for_status(reply.status, message)

        try:
            return _decode_json(reply.body)
        except ValueError as exc:
            raise MalformedResponseError() from exc

    def http_post(self, url: str, body: bytes, timeout_s: float | None) -> HTTPReply:
        req = urllib.request.Request(
            url,
            data=body,
            method="POST",
            headers={"Content-Type": "application/json", "Accept": "application/json"},
        )
        kwargs: dict[str, Any] = {} if timeout_s is None else {"timeout": timeout_s}
        try:
            with urllib.request.urlopen(req, **kwargs) as resp:  # noqa: S310
                return HTTPReply(status=resp.status, body=resp.read(), reason=resp.reason or "")
        except urllib.error.HTTPError as e:
            try:
                error_body = e.read()
            except OSError:
                error_body = b""
            return HTTPReply(status=e.code, body=error_body or b"", reason=str(e.reason or ""))
        except urllib.error.URLError as e:
            raise GeminiNetworkError(f"Network error calling Gemini API: {e.reason}") from e
