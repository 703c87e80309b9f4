from __future__ import annotations

from typing import Any

from loguru import logger

from gemini_client.errors import GoogleGenerativeAIResponseError

_BAD_FINISH_REASONS = {
    "SAFETY",
    "RECITATION",
    "LANGUAGE",
    "BLOCKLIST",
    "PROHIBITED_CONTENT",
    "SPII",
    "OTHER",
}


def had_bad_finish_reason(candidate: dict[str, Any]) -> bool:
    return candidate.get("finishReason") in _BAD_FINISH_REASONS


def format_blocked_reason(payload: dict[str, Any]) -> str:
    """Describe why a response carries no usable text."""
    candidates = payload.get("candidates") or []
    prompt_feedback = payload.get("promptFeedback") or {}
    if not candidates and prompt_feedback:
        message = f"Response was blocked due to {prompt_feedback.get('blockReason')}"
        if prompt_feedback.get("blockReasonMessage"):
            message += f": {prompt_feedback['blockReasonMessage']}"
        return message
    if candidates:
        candidate = candidates[0]
        message = f"Candidate was blocked due to {candidate.get('finishReason')}"
        if candidate.get("finishMessage"):
            message += f": {candidate['finishMessage']}"
        return message
    return "Response contained no candidates"


class GenerateContentResponse:
    """Read-only view over a ``generateContent`` payload with text helpers."""

    def __init__(self, payload: dict[str, Any]):
        self._payload = payload

    @property
    def candidates(self) -> list[dict[str, Any]]:
        return self._payload.get("candidates") or []

    @property
    def prompt_feedback(self) -> dict[str, Any] | None:
        return self._payload.get("promptFeedback")

    @property
    def usage_metadata(self) -> dict[str, Any] | None:
        return self._payload.get("usageMetadata")

    def to_dict(self) -> dict[str, Any]:
        return self._payload

    def _first_usable_candidate(self) -> dict[str, Any] | None:
        candidates = self.candidates
        if len(candidates) > 1:
            logger.warning(
                f"This response had {len(candidates)} candidates. Returning text from the first candidate only."
            )
        if candidates:
            if had_bad_finish_reason(candidates[0]):
                raise GoogleGenerativeAIResponseError(format_blocked_reason(self._payload), self._payload)
            return candidates[0]
        if self.prompt_feedback:
            raise GoogleGenerativeAIResponseError(format_blocked_reason(self._payload), self._payload)
        return None

    def text(self) -> str:
        candidate = self._first_usable_candidate()
        if candidate is None:
            return ""
        parts = (candidate.get("content") or {}).get("parts") or []
        return "".join(part["text"] for part in parts if part.get("text"))

    def function_calls(self) -> list[dict[str, Any]]:
        candidate = self._first_usable_candidate()
        if candidate is None:
            return []
        parts = (candidate.get("content") or {}).get("parts") or []
        return [part["functionCall"] for part in parts if part.get("functionCall")]

    def __repr__(self) -> str:
        return f"GenerateContentResponse(candidates={len(self.candidates)})"
