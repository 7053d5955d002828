from __future__ import annotations

import asyncio
import json
import urllib.error
import urllib.parse

import pytest

from gemguard import (
    ChatMessage,
    GeminiNetworkError,
    GenerationOptions,
    HTTPReply,
    InvalidCredentialError,
    LiveResponse,
    MalformedResponseError,
    ModelUnavailableError,
    RateLimitedError,
    ServiceOverloadedError,
    UpstreamError,
)
from gemguard.clients import GeminiTransport
from gemguard.clients.gemini import (
    build_generate_payload,
    conversation_contents,
    error_for_status,
    image_part,
    text_part,
    user_content,
)


def run_async(coro):
    return asyncio.run(coro)


def _ok_body(text: str = "hello") -> bytes:
    return json.dumps(
        {
            "candidates": [
                {
                    "content": {"role": "model", "parts": [{"text": text}]},
                    "finishReason": "STOP",
                    "safetyRatings": [
                        {"category": "HARM_CATEGORY_HARASSMENT", "probability": "NEGLIGIBLE"}
                    ],
                }
            ],
            "usageMetadata": {
                "promptTokenCount": 4,
                "candidatesTokenCount": 2,
                "totalTokenCount": 6,
            },
        }
    ).encode("utf-8")


class _RecordingPost:
    def __init__(self, *replies: HTTPReply) -> None:
        self.replies = list(replies)
        self.calls: list[tuple[str, dict, float | None]] = []

    def __call__(self, url: str, body: bytes, timeout_s: float | None) -> HTTPReply:
        self.calls.append((url, json.loads(body), timeout_s))
        return self.replies.pop(0)


def test_payload_carries_generation_config_and_safety_settings():
    payload = build_generate_payload(
        [user_content(text_part("hi"))],
        GenerationOptions(temperature=0.2, max_output_tokens=50),
    )
    assert payload["contents"] == [{"parts": [{"text": "hi"}]}]
    assert payload["generationConfig"] == {
        "temperature": 0.2,
        "maxOutputTokens": 50,
        "topP": 0.95,
        "topK": 64,
        "candidateCount": 1,
    }
    assert len(payload["safetySettings"]) == 4
    assert {row["threshold"] for row in payload["safetySettings"]} == {"BLOCK_MEDIUM_AND_ABOVE"}


def test_image_payload_omits_candidate_count_and_encodes_bytes():
    payload = build_generate_payload(
        [user_content(text_part("what is this"), image_part(b"\x89PNG", "image/png"))],
        GenerationOptions(),
        include_candidate_count=False,
    )
    assert "candidateCount" not in payload["generationConfig"]
    inline = payload["contents"][0]["parts"][1]["inline_data"]
    assert inline == {"mime_type": "image/png", "data": "iVBORw=="}
    assert image_part("already-b64", "image/jpeg")["inline_data"]["data"] == "already-b64"


def test_conversation_maps_assistant_to_model_role():
    contents = conversation_contents(
        [ChatMessage(role="user", content="hi"), ChatMessage(role="assistant", content="hello")]
    )
    assert [c["role"] for c in contents] == ["user", "model"]
    assert contents[1]["parts"] == [{"text": "hello"}]


@pytest.mark.parametrize(
    ("status", "message", "expected"),
    [
        (429, "quota", RateLimitedError),
        (401, "bad key", InvalidCredentialError),
        (404, "no model", ModelUnavailableError),
        (503, "The model is overloaded", ServiceOverloadedError),
        (500, "The model is overloaded", RateLimitedError),
        (500, "boom", UpstreamError),
        (400, "bad request", UpstreamError),
    ],
)
def test_error_for_status_follows_classification_order(status, message, expected):
    error = error_for_status(status, message)
    assert type(error) is expected


def test_generate_content_posts_to_model_endpoint_and_parses_reply():
    post = _RecordingPost(HTTPReply(200, _ok_body("a mug")))
    transport = GeminiTransport(base_url="https://api.test/v1beta/models/", timeout_s=9.0, post=post)

    result = run_async(
        transport.generate_content(
            api_key="secret key+1",
            model="gemini-1.5-flash",
            contents=[user_content(text_part("describe"))],
            options=GenerationOptions(),
        )
    )

    assert isinstance(result, LiveResponse)
    assert result.text == "a mug"
    assert result.finish_reason == "STOP"
    assert result.usage.total_tokens == 6
    assert result.safety_ratings[0].category == "HARM_CATEGORY_HARASSMENT"
    assert result.is_offline is False

    url, body, timeout_s = post.calls[0]
    parsed = urllib.parse.urlsplit(url)
    assert parsed.path == "/v1beta/models/gemini-1.5-flash:generateContent"
    assert urllib.parse.parse_qs(parsed.query) == {"key": ["secret key+1"]}
    assert body["contents"][0]["parts"][0]["text"] == "describe"
    assert timeout_s == 9.0


def test_error_envelope_message_reaches_upstream_error():
    body = json.dumps({"error": {"code": 400, "message": "Request payload too large"}}).encode()
    transport = GeminiTransport(post=_RecordingPost(HTTPReply(400, body, "Bad Request")))

    with pytest.raises(UpstreamError) as exc_info:
        run_async(
            transport.generate_content(
                api_key="k" * 12,
                model="gemini-1.5-flash",
                contents=[],
                options=GenerationOptions(),
            )
        )
    assert str(exc_info.value) == "Request payload too large"
    assert exc_info.value.status_code == 400


def test_non_json_error_body_falls_back_to_reason():
    transport = GeminiTransport(post=_RecordingPost(HTTPReply(502, b"<html>", "Bad Gateway")))
    with pytest.raises(UpstreamError, match="HTTP 502: Bad Gateway"):
        run_async(
            transport.generate_content(
                api_key="k" * 12, model="m", contents=[], options=GenerationOptions()
            )
        )


@pytest.mark.parametrize(
    "body",
    [
        b"not json",
        json.dumps({"candidates": []}).encode(),
        json.dumps({"candidates": [{"content": {"parts": []}}]}).encode(),
        json.dumps({"candidates": "nope"}).encode(),
    ],
)
def test_malformed_success_bodies_raise(body):
    transport = GeminiTransport(post=_RecordingPost(HTTPReply(200, body)))
    with pytest.raises(MalformedResponseError):
        run_async(
            transport.generate_content(
                api_key="k" * 12, model="m", contents=[], options=GenerationOptions()
            )
        )


def test_count_tokens_uses_count_endpoint():
    body = json.dumps({"totalTokens": 7, "totalBillableCharacters": 30}).encode()
    post = _RecordingPost(HTTPReply(200, body))
    transport = GeminiTransport(post=post)

    count = run_async(transport.count_tokens(api_key="k" * 12, model="gemini-1.5-pro", text="hi"))

    assert count.total_tokens == 7
    assert count.total_billable_characters == 30
    url, sent, _ = post.calls[0]
    assert ":countTokens?" in url
    assert sent == {"contents": [{"parts": [{"text": "hi"}]}]}


def test_http_post_converts_url_errors_to_network_errors(monkeypatch):
    def refuse(*args, **kwargs):
        raise urllib.error.URLError("connection refused")

    monkeypatch.setattr("urllib.request.urlopen", refuse)
    transport = GeminiTransport()

    with pytest.raises(GeminiNetworkError, match="connection refused"):
        transport.http_post("https://api.test/m:generateContent", b"{}", None)
