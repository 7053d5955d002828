"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: clients/__init__.py.
"""

from .gemini import (
    SAFETY_SETTINGS,
    GeminiTransport,
    HTTPReply,
    PostFn,
    build_generate_payload,
    conversation_contents,
    error_for_status,
    image_part,
    text_part,
    user_content,
)

__all__ = [
    "SAFETY_SETTINGS",
    "GeminiTransport",
    "HTTPReply",
    "PostFn",
    "build_generate_payload",
    "conversation_contents",
    "error_for_status",
    "image_part",
    "text_part",
    "user_content",
]
