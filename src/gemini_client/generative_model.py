from __future__ import annotations

from typing import Any

import httpx

from gemini_client import content_api
from gemini_client.chat_session import ChatSession
from gemini_client.errors import GoogleGenerativeAIError
from gemini_client.request import RequestOptions
from gemini_client.request_helpers import (
    MessageLike,
    format_count_tokens_input,
    format_embed_content_input,
    format_generate_content_input,
    format_system_instruction,
    normalize_model_name,
)
from gemini_client.response_helpers import GenerateContentResponse
from gemini_client.server.cache_types import CachedContent
from gemini_client.stream_reader import GenerateContentStreamResult


def _cached_content_name(cached_content: CachedContent | dict[str, Any] | None) -> str | None:
    if cached_content is None:
        return None
    if isinstance(cached_content, CachedContent):
        return cached_content.name
    return cached_content.get("name")


class GenerativeModel:
    """Handle on one model plus the settings sent with every request to it.

    ``model_params`` uses the wire field names: ``model``, ``generationConfig``,
    ``safetySettings``, ``tools``, ``toolConfig``, ``systemInstruction`` and
    ``cachedContent``.
    """

    def __init__(
        self,
        api_key: str,
        model_params: dict[str, Any],
        request_options: RequestOptions | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
    ):
        if not model_params.get("model"):
            raise GoogleGenerativeAIError("Must provide a model name. Example: get_generative_model({'model': 'my-model-name'})")
        self.api_key = api_key
        self.model = normalize_model_name(model_params["model"])
        self.generation_config: dict[str, Any] = model_params.get("generationConfig") or {}
        self.safety_settings: list[dict[str, Any]] = model_params.get("safetySettings") or []
        self.tools: list[dict[str, Any]] | None = model_params.get("tools")
        self.tool_config: dict[str, Any] | None = model_params.get("toolConfig")
        self.system_instruction = format_system_instruction(model_params.get("systemInstruction"))
        self.cached_content = model_params.get("cachedContent")
        self._request_options = request_options or RequestOptions()
        self._http_client = http_client

    def _request_params(self) -> dict[str, Any]:
        params = {
            "generationConfig": self.generation_config or None,
            "safetySettings": self.safety_settings or None,
            "tools": self.tools,
            "toolConfig": self.tool_config,
            "systemInstruction": self.system_instruction,
            "cachedContent": _cached_content_name(self.cached_content),
        }
        return {key: value for key, value in params.items() if value is not None}

    def _options(self, request_options: RequestOptions | None) -> RequestOptions:
        return self._request_options.merge(request_options)

    async def generate_content(
        self,
        request: MessageLike | dict[str, Any],
        request_options: RequestOptions | None = None,
    ) -> GenerateContentResponse:
        body = {**self._request_params(), **format_generate_content_input(request)}
        return await content_api.generate_content(
            self.api_key, self.model, body, self._options(request_options), http_client=self._http_client
        )

    async def generate_content_stream(
        self,
        request: MessageLike | dict[str, Any],
        request_options: RequestOptions | None = None,
    ) -> GenerateContentStreamResult:
        body = {**self._request_params(), **format_generate_content_input(request)}
        return await content_api.generate_content_stream(
            self.api_key, self.model, body, self._options(request_options), http_client=self._http_client
        )

    def start_chat(self, start_chat_params: dict[str, Any] | None = None) -> ChatSession:
        params = {**self._request_params(), **(start_chat_params or {})}
        if "systemInstruction" in params:
            params["systemInstruction"] = format_system_instruction(params["systemInstruction"])
        return ChatSession(
            self.api_key,
            self.model,
            params,
            self._request_options,
            http_client=self._http_client,
        )

    async def count_tokens(
        self,
        request: MessageLike | dict[str, Any],
        request_options: RequestOptions | None = None,
    ) -> dict[str, Any]:
        body = format_count_tokens_input(request, {"model": self.model, **self._request_params()})
        return await content_api.count_tokens(
            self.api_key, self.model, body, self._options(request_options), http_client=self._http_client
        )

    async def embed_content(
        self,
        request: MessageLike | dict[str, Any],
        request_options: RequestOptions | None = None,
    ) -> dict[str, Any]:
        body = format_embed_content_input(request)
        return await content_api.embed_content(
            self.api_key, self.model, body, self._options(request_options), http_client=self._http_client
        )

    async def batch_embed_contents(
        self,
        requests: list[MessageLike | dict[str, Any]],
        request_options: RequestOptions | None = None,
    ) -> dict[str, Any]:
        body = {"requests": [format_embed_content_input(request) for request in requests]}
        return await content_api.batch_embed_contents(
            self.api_key, self.model, body, self._options(request_options), http_client=self._http_client
        )
