from __future__ import annotations

import asyncio
import copy
from typing import Any

import httpx
from loguru import logger

from gemini_client.chat_session_helpers import validate_chat_history
from gemini_client.content_api import generate_content, generate_content_stream
from gemini_client.errors import GoogleGenerativeAIError
from gemini_client.request import RequestOptions
from gemini_client.request_helpers import MessageLike, format_new_content
from gemini_client.response_helpers import GenerateContentResponse, format_blocked_reason, had_bad_finish_reason
from gemini_client.stream_reader import GenerateContentStreamResult

# Model-level settings forwarded with every turn.
_REQUEST_KEYS = (
    "generationConfig",
    "safetySettings",
    "tools",
    "toolConfig",
    "systemInstruction",
    "cachedContent",
)


class ChatSession:
    """A multi-turn conversation with a model.

    History holds every successful turn in order. Sends on one session are
    serialized: a new message is only sent once the previous one, including
    a pending stream, has finished.
    """

    def __init__(
        self,
        api_key: str,
        model: str,
        params: dict[str, Any] | None = None,
        request_options: RequestOptions | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
    ):
        params = dict(params or {})
        history = params.pop("history", None) or []
        validate_chat_history(history)

        self.model = model
        self.params = params
        self._api_key = api_key
        self._request_options = request_options or RequestOptions()
        self._http_client = http_client
        self._history: list[dict[str, Any]] = copy.deepcopy(history)
        self._lock = asyncio.Lock()
        self._pending_stream: GenerateContentStreamResult | None = None

    def get_history(self) -> list[dict[str, Any]]:
        return copy.deepcopy(self._history)

    def _build_request(self, new_content: dict[str, Any]) -> dict[str, Any]:
        body = {key: self.params[key] for key in _REQUEST_KEYS if self.params.get(key) is not None}
        body["contents"] = [*self._history, new_content]
        return body

    def _append_turn(self, new_content: dict[str, Any], response: GenerateContentResponse) -> None:
        candidates = response.candidates
        if candidates and not had_bad_finish_reason(candidates[0]):
            reply = candidates[0].get("content") or {}
            if reply.get("parts"):
                self._history.append(new_content)
                self._history.append({"role": "model", **reply})
                return
        logger.warning(
            f"Chat turn was not added to history: {format_blocked_reason(response.to_dict())}. "
            "Inspect the response object for details."
        )

    async def _finish_pending_stream(self) -> None:
        pending, self._pending_stream = self._pending_stream, None
        if pending is None or pending.done:
            return
        try:
            await pending.response()
        except GoogleGenerativeAIError as ex:
            # Already raised to whoever consumed the stream.
            logger.warning(f"Previous streamed message failed: {ex}")

    async def send_message(
        self,
        request: MessageLike,
        request_options: RequestOptions | None = None,
    ) -> GenerateContentResponse:
        """Send a message and wait for the complete reply."""
        async with self._lock:
            await self._finish_pending_stream()
            new_content = format_new_content(request)
            response = await generate_content(
                self._api_key,
                self.model,
                self._build_request(new_content),
                self._request_options.merge(request_options),
                http_client=self._http_client,
            )
            self._append_turn(new_content, response)
            return response

    async def send_message_stream(
        self,
        request: MessageLike,
        request_options: RequestOptions | None = None,
    ) -> GenerateContentStreamResult:
        """Send a message and return its reply as a stream of chunks.

        History is updated once the stream has been read to the end.
        """
        async with self._lock:
            await self._finish_pending_stream()
            new_content = format_new_content(request)
            result = await generate_content_stream(
                self._api_key,
                self.model,
                self._build_request(new_content),
                self._request_options.merge(request_options),
                http_client=self._http_client,
                on_complete=lambda response: self._append_turn(new_content, response),
            )
            self._pending_stream = result
            return result
