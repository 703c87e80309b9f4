from __future__ import annotations

from typing import Any

import httpx

from gemini_client.errors import GoogleGenerativeAIError, GoogleGenerativeAIRequestInputError
from gemini_client.generative_model import GenerativeModel
from gemini_client.request import RequestOptions
from gemini_client.server.cache_types import CachedContent

# Settings a cache fixes at creation time and a model built from it must not contradict.
_CACHE_BOUND_FIELDS = {
    "model": "model",
    "tools": "tools",
    "toolConfig": "tool_config",
    "systemInstruction": "system_instruction",
}


class GoogleGenerativeAI:
    """Entry point: holds the API key and hands out model handles."""

    def __init__(self, api_key: str, *, http_client: httpx.AsyncClient | None = None):
        self.api_key = api_key
        self._http_client = http_client

    def get_generative_model(
        self,
        model_params: dict[str, Any],
        request_options: RequestOptions | None = None,
    ) -> GenerativeModel:
        if not model_params.get("model"):
            raise GoogleGenerativeAIError(
                "Must provide a model name. Example: genai.get_generative_model({'model': 'my-model-name'})"
            )
        return GenerativeModel(self.api_key, model_params, request_options, http_client=self._http_client)

    def get_generative_model_from_cached_content(
        self,
        cached_content: CachedContent,
        model_params: dict[str, Any] | None = None,
        request_options: RequestOptions | None = None,
    ) -> GenerativeModel:
        """Build a model whose requests reference ``cached_content``.

        ``model_params`` may repeat a cache-bound setting only with the same value.
        """
        if not cached_content.name:
            raise GoogleGenerativeAIRequestInputError("Cached content must contain a `name` field.")
        if not cached_content.model:
            raise GoogleGenerativeAIRequestInputError("Cached content must contain a `model` field.")

        model_params = model_params or {}
        for wire_name, attribute in _CACHE_BOUND_FIELDS.items():
            requested = model_params.get(wire_name)
            cached = getattr(cached_content, attribute)
            if requested is None:
                continue
            if wire_name == "model":
                mismatch = requested.removeprefix("models/") != cached.removeprefix("models/")
            else:
                mismatch = requested != cached
            if mismatch:
                raise GoogleGenerativeAIRequestInputError(
                    f"Different value for {wire_name!r} specified in model_params ({requested}) "
                    f"and cached_content ({cached})"
                )

        params = {
            **model_params,
            "model": cached_content.model,
            "tools": cached_content.tools,
            "toolConfig": cached_content.tool_config,
            "systemInstruction": cached_content.system_instruction,
            "cachedContent": cached_content,
        }
        return GenerativeModel(self.api_key, params, request_options, http_client=self._http_client)
