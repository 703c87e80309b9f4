from __future__ import annotations

import json
from typing import Any, AsyncIterator, Callable

from loguru import logger

from gemini_client.errors import GoogleGenerativeAIError
from gemini_client.response_helpers import GenerateContentResponse

# Candidate fields where the latest chunk wins.
_CANDIDATE_OVERWRITE_KEYS = (
    "finishReason",
    "finishMessage",
    "safetyRatings",
    "citationMetadata",
    "groundingMetadata",
)


def _parse_event(data_lines: list[str]) -> dict[str, Any]:
    raw = "\n".join(data_lines)
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as ex:
        raise GoogleGenerativeAIError(f"Error parsing JSON response: {raw[:200]!r}") from ex
    if isinstance(payload, dict) and payload.get("error"):
        error = payload["error"]
        raise GoogleGenerativeAIError(f"Error in stream: {error.get('message', error)}")
    return payload


async def iter_sse_events(lines: AsyncIterator[str]) -> AsyncIterator[dict[str, Any]]:
    """Yield the JSON payload of each ``data:`` event in a server-sent event stream."""
    data_lines: list[str] = []
    async for line in lines:
        line = line.rstrip("\r")
        if not line:
            if data_lines:
                yield _parse_event(data_lines)
                data_lines = []
            continue
        if line.startswith("data:"):
            data_lines.append(line[5:].removeprefix(" "))
    if data_lines:
        yield _parse_event(data_lines)


def _merge_part(parts: list[dict[str, Any]], part: dict[str, Any]) -> None:
    if set(part) == {"text"} and parts and set(parts[-1]) == {"text"}:
        parts[-1] = {"text": parts[-1]["text"] + part["text"]}
    else:
        parts.append(dict(part))


def aggregate_responses(responses: list[dict[str, Any]]) -> dict[str, Any]:
    """Fold streamed chunks into the single response a non-streaming call would return."""
    aggregated: dict[str, Any] = {}
    candidates: dict[int, dict[str, Any]] = {}

    for response in responses:
        if response.get("promptFeedback"):
            aggregated["promptFeedback"] = response["promptFeedback"]
        if response.get("usageMetadata"):
            aggregated["usageMetadata"] = response["usageMetadata"]
        if response.get("modelVersion"):
            aggregated["modelVersion"] = response["modelVersion"]

        for candidate in response.get("candidates") or []:
            index = candidate.get("index", 0)
            target = candidates.setdefault(index, {"index": index})
            for key in _CANDIDATE_OVERWRITE_KEYS:
                if key in candidate:
                    target[key] = candidate[key]

            content = candidate.get("content") or {}
            if content.get("parts"):
                merged = target.setdefault("content", {"role": content.get("role", "model"), "parts": []})
                for part in content["parts"]:
                    _merge_part(merged["parts"], part)

    if candidates:
        aggregated["candidates"] = [candidates[i] for i in sorted(candidates)]
    return aggregated


class GenerateContentStreamResult:
    """Lazy, single-use async iterator of response chunks.

    Chunks arrive in the order the server sends them. ``await response()``
    drains whatever is left and returns the aggregate of every chunk.
    """

    def __init__(
        self,
        chunks: AsyncIterator[dict[str, Any]],
        on_complete: Callable[[GenerateContentResponse], None] | None = None,
    ):
        self._chunks = chunks
        self._on_complete = on_complete
        self._iterator: AsyncIterator[GenerateContentResponse] | None = None
        self._received: list[dict[str, Any]] = []
        self._response: GenerateContentResponse | None = None

    def __aiter__(self) -> AsyncIterator[GenerateContentResponse]:
        if self._iterator is not None:
            raise GoogleGenerativeAIError("The response stream can only be iterated once.")
        self._iterator = self._iterate()
        return self._iterator

    async def _iterate(self) -> AsyncIterator[GenerateContentResponse]:
        async for payload in self._chunks:
            self._received.append(payload)
            yield GenerateContentResponse(payload)
        self._complete()

    def _complete(self) -> None:
        self._response = GenerateContentResponse(aggregate_responses(self._received))
        logger.debug(f"Stream complete: chunks={len(self._received)}")
        if self._on_complete is not None:
            self._on_complete(self._response)

    @property
    def done(self) -> bool:
        return self._response is not None

    async def response(self) -> GenerateContentResponse:
        if self._response is None:
            iterator = self._iterator if self._iterator is not None else self.__aiter__()
            async for _ in iterator:
                pass
        if self._response is None:
            raise GoogleGenerativeAIError("The response stream ended before completing.")
        return self._response
