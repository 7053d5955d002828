from __future__ import annotations

import base64
import json

import pytest

from gemguard import (
    GeminiClient,
    GeminiTransport,
    HTTPReply,
    ManualClock,
    QueuePolicy,
)
from gemguard.errors import (
    GeminiNetworkError,
    InvalidCredentialError,
    ModelUnavailableError,
    RateLimitedError,
    ServiceOverloadedError,
    UpstreamError,
)
from gemguard.server import error_status

pytest.importorskip("fastapi")
pytest.importorskip("httpx")

from fastapi.testclient import TestClient  # noqa: E402

from gemguard.server import create_app  # noqa: E402


def _reply(text: str) -> HTTPReply:
    body = {"candidates": [{"content": {"parts": [{"text": text}]}, "finishReason": "STOP"}]}
    return HTTPReply(200, json.dumps(body).encode("utf-8"))


def _client(api_key: str | None = "server-key-123456") -> tuple[GeminiClient, ManualClock, list]:
    calls: list[str] = []

    def post(url: str, body: bytes, timeout_s: float | None) -> HTTPReply:
        calls.append(url)
        return _reply("served")

    clock = ManualClock()
    client = GeminiClient(
        api_key=api_key,
        transport=GeminiTransport(base_url="https://api.test/models", post=post),
        clock=clock,
        queue_policy=QueuePolicy(request_delay_s=0.0),
    )
    return client, clock, calls


@pytest.mark.parametrize(
    ("error", "status"),
    [
        (RateLimitedError(wait_s=3.0), 429),
        (InvalidCredentialError(), 401),
        (ModelUnavailableError(), 404),
        (ServiceOverloadedError(), 503),
        (GeminiNetworkError("down"), 502),
        (UpstreamError("boom", status_code=500), 502),
    ],
)
def test_error_status_mapping(error, status):
    assert error_status(error) == status


def test_generate_returns_live_payload():
    client, _, calls = _client()
    app = create_app(client)

    with TestClient(app) as http:
        response = http.post(
            "/v1/generate",
            json={"prompt": "Describe a linen shirt", "options": {"temperature": 0.3}},
        )

    assert response.status_code == 200
    payload = response.json()
    assert payload["text"] == "served"
    assert payload["is_offline"] is False
    assert payload["finish_reason"] == "STOP"
    assert len(calls) == 1


def test_rate_limited_request_maps_to_429_with_retry_after():
    client, _, _ = _client()
    app = create_app(client)

    with TestClient(app) as http:
        assert http.post("/v1/generate", json={"prompt": "First prompt here"}).status_code == 200
        response = http.post("/v1/generate", json={"prompt": "Completely different ask"})

    assert response.status_code == 429
    assert response.headers["Retry-After"] == "4"
    assert response.json()["error"] == "RateLimitedError"


def test_missing_key_maps_to_401():
    client, _, calls = _client(api_key=None)
    with TestClient(create_app(client)) as http:
        response = http.post("/v1/generate", json={"prompt": "hello"})
    assert response.status_code == 401
    assert response.json()["error"] == "MissingCredentialError"
    assert calls == []


def test_image_endpoint_validates_base64_and_generates():
    client, _, calls = _client()
    image = base64.b64encode(b"fake-jpeg-bytes").decode("ascii")

    with TestClient(create_app(client)) as http:
        bad = http.post(
            "/v1/generate/image", json={"prompt": "What is it?", "image_base64": "%%%"}
        )
        good = http.post(
            "/v1/generate/image", json={"prompt": "What is it?", "image_base64": image}
        )

    assert bad.status_code == 422
    assert good.status_code == 200
    assert good.json()["text"] == "served"
    assert len(calls) == 1


def test_conversation_endpoint():
    client, _, calls = _client()
    with TestClient(create_app(client)) as http:
        response = http.post(
            "/v1/conversation",
            json={
                "messages": [
                    {"role": "user", "content": "Hi"},
                    {"role": "assistant", "content": "Hello"},
                    {"role": "user", "content": "Any deals today?"},
                ]
            },
        )
    assert response.status_code == 200
    assert response.json()["text"] == "served"
    assert len(calls) == 1


def test_status_offline_reset_and_cache_clear():
    client, _, _ = _client()
    for _ in range(3):
        client.breaker.record_failure()

    with TestClient(create_app(client)) as http:
        offline = http.post("/v1/generate", json={"prompt": "Suggest tags for boots"})
        status = http.get("/v1/status").json()
        reset = http.post("/v1/offline/reset").json()
        cleared = http.delete("/v1/cache")

    assert offline.json()["is_offline"] is True
    assert offline.json()["kind"] == "tags"
    assert status["breaker"]["state"] == "offline"
    assert status["breaker"]["consecutive_failures"] == 3
    assert status["has_api_key"] is True
    assert reset["state"] == "online"
    assert cleared.status_code == 204


def test_unknown_option_fields_are_rejected():
    client, _, _ = _client()
    with TestClient(create_app(client)) as http:
        response = http.post(
            "/v1/generate", json={"prompt": "hi", "options": {"temprature": 0.1}}
        )
    assert response.status_code == 422


def test_serve_hands_app_to_uvicorn(monkeypatch):
    uvicorn = pytest.importorskip("uvicorn")
    from gemguard.server import serve

    seen = {}

    def fake_run(app, **kwargs):
        seen["app"] = app
        seen.update(kwargs)

    monkeypatch.setattr(uvicorn, "run", fake_run)
    client, _, _ = _client()
    serve(client, port=9001, log_level="warning")

    assert seen["host"] == "127.0.0.1"
    assert seen["port"] == 9001
    assert seen["log_level"] == "warning"
    assert any(route.path == "/v1/status" for route in seen["app"].routes)
