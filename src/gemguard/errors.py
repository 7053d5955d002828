"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Error taxonomy surfaced by the Gemini client.
"""

from __future__ import annotations

MISSING_CREDENTIAL_MESSAGE = "Gemini API key is required. Please set it in Settings."
INVALID_CREDENTIAL_MESSAGE = "Invalid API key. Please check your Gemini API key."
MODEL_UNAVAILABLE_MESSAGE = "The selected model is not available."
RATE_LIMITED_MESSAGE = "API request limit exceeded. Please wait a few minutes and try again."
OVERLOADED_MESSAGE = (
    "Gemini AI service is currently overloaded. "
    "Please wait 10-15 seconds and try again."
)
MALFORMED_RESPONSE_MESSAGE = "Invalid response format from Gemini API"


class GeminiError(Exception):
    """Base error for every failure raised by this package."""


class GeminiRetryableError(GeminiError):
    """Failure that may succeed when the same call is attempted again."""


class MissingCredentialError(GeminiError):
    """Raised when no API key is configured."""

    def __init__(self, message: str = MISSING_CREDENTIAL_MESSAGE) -> None:
        super().__init__(message)


class InvalidCredentialError(GeminiError):
    """Raised for malformed keys and upstream 401 responses."""

    def __init__(self, message: str = INVALID_CREDENTIAL_MESSAGE) -> None:
        super().__init__(message)


class ModelUnavailableError(GeminiError):
    """Raised when the upstream model endpoint returns 404."""

    def __init__(self, message: str = MODEL_UNAVAILABLE_MESSAGE) -> None:
        super().__init__(message)


class RateLimitedError(GeminiError):
    """
    Raised when a call is refused by the local governor or by upstream 429.

    `wait_s` is the suggested wait before retrying; `None` when upstream did
    not say.
    """

    def __init__(self, message: str = RATE_LIMITED_MESSAGE, *, wait_s: float | None = None) -> None:
        super().__init__(message)
        self.wait_s = wait_s


class ServiceOverloadedError(GeminiRetryableError):
    """Upstream 503. Retried once by the executor before surfacing."""

    def __init__(self, message: str = OVERLOADED_MESSAGE) -> None:
        super().__init__(message)


class GeminiNetworkError(GeminiRetryableError):
    """Connection-level failure before any HTTP status was received."""


class MalformedResponseError(GeminiError):
    """Raised when a 2xx body lacks the expected candidate text."""

    def __init__(self, message: str = MALFORMED_RESPONSE_MESSAGE) -> None:
        super().__init__(message)


class UpstreamError(GeminiError):
    """Any other upstream failure, carrying the server-provided message."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def classify_error(error: Exception) -> GeminiError:
    """Normalize arbitrary exceptions into the package taxonomy."""
    if isinstance(error, GeminiError):
        return error
    if isinstance(error, (ConnectionError, TimeoutError, OSError)):
        return GeminiNetworkError(str(error) or type(error).__name__)
    return UpstreamError(str(error) or type(error).__name__)
