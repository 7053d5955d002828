"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Optional FastAPI surface exposing the client facade and its status.
"""

from __future__ import annotations

import base64
import binascii
import math
from dataclasses import asdict
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from .client import GeminiClient
from .errors import (
    GeminiError,
    InvalidCredentialError,
    MissingCredentialError,
    ModelUnavailableError,
    RateLimitedError,
    ServiceOverloadedError,
)
from .types import ChatMessage, GenerationOptions, GenerationResult


class OptionsBody(BaseModel):
    model_config = ConfigDict(extra="forbid")

    model: str | None = None
    temperature: float = 0.7
    max_output_tokens: int = 1000
    top_p: float = 0.95
    top_k: int = 64
    mime_type: str = "image/jpeg"
    product: dict[str, Any] | None = None
    user_profile: dict[str, Any] | None = None
    products: list[dict[str, Any]] = Field(default_factory=list)

    def to_options(self) -> GenerationOptions:
        return GenerationOptions(**self.model_dump())


class GenerateBody(BaseModel):
    prompt: str = Field(min_length=1)
    options: OptionsBody | None = None


class ImageGenerateBody(GenerateBody):
    image_base64: str = Field(min_length=1)


class MessageBody(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class ConversationBody(BaseModel):
    messages: list[MessageBody] = Field(min_length=1)
    options: OptionsBody | None = None


def result_payload(result: GenerationResult) -> dict[str, Any]:
    row = asdict(result)
    row["is_offline"] = result.is_offline
    return row


def error_status(error: GeminiError) -> int:
    if isinstance(error, RateLimitedError):
        return 429
    if isinstance(error, (MissingCredentialError, InvalidCredentialError)):
        return 401
    if isinstance(error, ModelUnavailableError):
        return 404
    if isinstance(error, ServiceOverloadedError):
        return 503
    return 502


def create_app(client: GeminiClient, *, title: str = "gemguard"):
    """Build a FastAPI app bound to one client instance."""
    try:
        from fastapi import FastAPI, HTTPException, Request
        from fastapi.responses import JSONResponse
    except ImportError:
        raise ImportError(
            "FastAPI is required for the HTTP surface. "
            "Install it with: pip install 'gemguard[server]'"
        )

    app = FastAPI(title=title, description="Governed Gemini generation API")

    @app.exception_handler(GeminiError)
    async def gemini_error_handler(request: Request, exc: GeminiError):
        _ = request
        headers: dict[str, str] = {}
        if isinstance(exc, RateLimitedError) and exc.wait_s is not None:
            headers["Retry-After"] = str(max(1, math.ceil(exc.wait_s)))
        return JSONResponse(
            {"error": type(exc).__name__, "message": str(exc)},
            status_code=error_status(exc),
            headers=headers,
        )

    def _options(body: OptionsBody | None) -> GenerationOptions | None:
        return body.to_options() if body is not None else None

    @app.post("/v1/generate")
    async def generate(body: GenerateBody):
        result = await client.generate_text(body.prompt, _options(body.options))
        return result_payload(result)

    @app.post("/v1/generate/image")
    async def generate_image(body: ImageGenerateBody):
        try:
            base64.b64decode(body.image_base64, validate=True)
        except (binascii.Error, ValueError):
            raise HTTPException(status_code=422, detail="image_base64 is not valid base64")
        result = await client.generate_text_from_image(
            body.prompt, body.image_base64, _options(body.options)
        )
        return result_payload(result)

    @app.post("/v1/conversation")
    async def conversation(body: ConversationBody):
        messages = [ChatMessage(role=m.role, content=m.content) for m in body.messages]
        result = await client.generate_conversation(messages, _options(body.options))
        return result_payload(result)

    @app.get("/v1/status")
    async def status():
        return asdict(await client.status())

    @app.post("/v1/offline/reset")
    async def reset_offline():
        client.force_online()
        return asdict(client.breaker.status())

    @app.delete("/v1/cache", status_code=204)
    async def clear_cache():
        await client.clear_cache()

    return app


def serve(client: GeminiClient, *, host: str = "127.0.0.1", port: int = 8080, **kwargs: Any) -> None:
    """
    Run the HTTP surface with uvicorn.

    Args:
        **kwargs: Additional arguments passed to ``uvicorn.run()``.
    """
    try:
        import uvicorn
    except ImportError:
        raise ImportError(
            "uvicorn is required to serve gemguard. "
            "Install it with: pip install 'gemguard[server]'"
        )

    uvicorn.run(create_app(client), host=host, port=port, **kwargs)
