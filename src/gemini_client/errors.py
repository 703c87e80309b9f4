from __future__ import annotations

from typing import Any


class GoogleGenerativeAIError(Exception):
    """Base class for every error raised by the client."""

    def __init__(self, message: str):
        super().__init__(f"[GoogleGenerativeAI Error]: {message}")


class GoogleGenerativeAIRequestInputError(GoogleGenerativeAIError):
    """Raised before any network call when request parameters are malformed."""


class GoogleGenerativeAIResponseError(GoogleGenerativeAIError):
    """The call succeeded but the response was blocked or unusable."""

    def __init__(self, message: str, response: dict | None = None):
        super().__init__(message)
        self.response = response


class GoogleGenerativeAIFetchError(GoogleGenerativeAIError):
    """The service returned a non-success status or the transport failed."""

    def __init__(
        self,
        message: str,
        status: int | None = None,
        status_text: str | None = None,
        error_details: list[dict[str, Any]] | None = None,
        body: str | None = None,
    ):
        super().__init__(message)
        self.status = status
        self.status_text = status_text
        self.error_details = error_details
        self.body = body


class GoogleGenerativeAIAbortError(GoogleGenerativeAIError):
    """The request did not complete before its timeout."""
