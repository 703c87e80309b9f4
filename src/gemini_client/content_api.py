from __future__ import annotations

import json
from contextlib import AsyncExitStack
from typing import Any, AsyncIterator, Callable

import httpx

from gemini_client.request import RequestOptions, RequestUrl, Task, make_request, make_stream_request
from gemini_client.response_helpers import GenerateContentResponse
from gemini_client.stream_reader import GenerateContentStreamResult, iter_sse_events


async def generate_content(
    api_key: str,
    model: str,
    params: dict[str, Any],
    request_options: RequestOptions | None = None,
    *,
    http_client: httpx.AsyncClient | None = None,
) -> GenerateContentResponse:
    url = RequestUrl(model, Task.GENERATE_CONTENT, api_key, stream=False, request_options=request_options)
    response = await make_request(url, json.dumps(params), http_client=http_client)
    return GenerateContentResponse(response.json())


async def _read_chunks(response: httpx.Response, stack: AsyncExitStack) -> AsyncIterator[dict[str, Any]]:
    async with stack:
        async for payload in iter_sse_events(response.aiter_lines()):
            yield payload


async def generate_content_stream(
    api_key: str,
    model: str,
    params: dict[str, Any],
    request_options: RequestOptions | None = None,
    *,
    http_client: httpx.AsyncClient | None = None,
    on_complete: Callable[[GenerateContentResponse], None] | None = None,
) -> GenerateContentStreamResult:
    """Open the stream now so HTTP errors surface here; chunks are read lazily."""
    url = RequestUrl(model, Task.STREAM_GENERATE_CONTENT, api_key, stream=True, request_options=request_options)
    stack = AsyncExitStack()
    response = await stack.enter_async_context(
        make_stream_request(url, json.dumps(params), http_client=http_client)
    )
    return GenerateContentStreamResult(_read_chunks(response, stack), on_complete=on_complete)


async def count_tokens(
    api_key: str,
    model: str,
    params: dict[str, Any],
    request_options: RequestOptions | None = None,
    *,
    http_client: httpx.AsyncClient | None = None,
) -> dict[str, Any]:
    url = RequestUrl(model, Task.COUNT_TOKENS, api_key, stream=False, request_options=request_options)
    response = await make_request(url, json.dumps(params), http_client=http_client)
    return response.json()


async def embed_content(
    api_key: str,
    model: str,
    params: dict[str, Any],
    request_options: RequestOptions | None = None,
    *,
    http_client: httpx.AsyncClient | None = None,
) -> dict[str, Any]:
    url = RequestUrl(model, Task.EMBED_CONTENT, api_key, stream=False, request_options=request_options)
    response = await make_request(url, json.dumps(params), http_client=http_client)
    return response.json()


async def batch_embed_contents(
    api_key: str,
    model: str,
    params: dict[str, Any],
    request_options: RequestOptions | None = None,
    *,
    http_client: httpx.AsyncClient | None = None,
) -> dict[str, Any]:
    url = RequestUrl(model, Task.BATCH_EMBED_CONTENTS, api_key, stream=False, request_options=request_options)
    requests_with_model = [{**request, "model": model} for request in params["requests"]]
    response = await make_request(url, json.dumps({"requests": requests_with_model}), http_client=http_client)
    return response.json()
