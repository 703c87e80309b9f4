from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import AsyncIterator

import httpx
from loguru import logger
from tenacity import AsyncRetrying, retry_if_exception, stop_after_attempt, wait_exponential

from gemini_client.errors import (
    GoogleGenerativeAIAbortError,
    GoogleGenerativeAIFetchError,
    GoogleGenerativeAIRequestInputError,
)

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com"
DEFAULT_API_VERSION = "v1beta"

PACKAGE_VERSION = "0.1.0"
PACKAGE_LOG_HEADER = "genai-py"

_DEFAULT_TIMEOUT_SECONDS = 120
_RETRYABLE_STATUSES = {429, 503}
_RESERVED_HEADERS = {"content-type", "x-goog-api-key", "x-goog-api-client"}


class Task(str, Enum):
    GENERATE_CONTENT = "generateContent"
    STREAM_GENERATE_CONTENT = "streamGenerateContent"
    COUNT_TOKENS = "countTokens"
    EMBED_CONTENT = "embedContent"
    BATCH_EMBED_CONTENTS = "batchEmbedContents"


class RpcTask(str, Enum):
    CREATE = "create"
    LIST = "list"
    GET = "get"
    UPDATE = "update"
    DELETE = "delete"


_RPC_METHODS = {
    RpcTask.CREATE: "POST",
    RpcTask.LIST: "GET",
    RpcTask.GET: "GET",
    RpcTask.UPDATE: "PATCH",
    RpcTask.DELETE: "DELETE",
}


@dataclass
class RequestOptions:
    timeout: float | None = None
    api_version: str | None = None
    base_url: str | None = None
    api_client: str | None = None
    custom_headers: dict[str, str] = field(default_factory=dict)
    max_retries: int = 0

    def merge(self, other: RequestOptions | None) -> RequestOptions:
        """Return a copy with every field set on ``other`` taking precedence."""
        if other is None:
            return replace(self, custom_headers=dict(self.custom_headers))
        return RequestOptions(
            timeout=other.timeout if other.timeout is not None else self.timeout,
            api_version=other.api_version or self.api_version,
            base_url=other.base_url or self.base_url,
            api_client=other.api_client or self.api_client,
            custom_headers={**self.custom_headers, **other.custom_headers},
            max_retries=other.max_retries or self.max_retries,
        )


def _root_url(request_options: RequestOptions) -> str:
    base_url = (request_options.base_url or DEFAULT_BASE_URL).rstrip("/")
    api_version = request_options.api_version or DEFAULT_API_VERSION
    return f"{base_url}/{api_version}"


class RequestUrl:
    """URL of a model task, e.g. ``.../v1beta/models/gemini-1.5-flash:generateContent``."""

    method = "POST"

    def __init__(
        self,
        model: str,
        task: Task,
        api_key: str,
        stream: bool,
        request_options: RequestOptions | None = None,
    ):
        self.model = model
        self.task = task
        self.api_key = api_key
        self.stream = stream
        self.request_options = request_options or RequestOptions()

    @property
    def params(self) -> dict[str, str]:
        return {"alt": "sse"} if self.stream else {}

    def __str__(self) -> str:
        return f"{_root_url(self.request_options)}/{self.model}:{self.task.value}"


class CachedContentUrl:
    """URL of the ``cachedContents`` collection or one of its members."""

    def __init__(self, task: RpcTask, api_key: str, request_options: RequestOptions | None = None):
        self.task = task
        self.api_key = api_key
        self.request_options = request_options or RequestOptions()
        self._path = ""
        self._params: dict[str, str] = {}

    @property
    def method(self) -> str:
        return _RPC_METHODS[self.task]

    @property
    def params(self) -> dict[str, str]:
        return dict(self._params)

    def append_path(self, segment: str) -> None:
        self._path += f"/{segment}"

    def append_param(self, key: str, value: str) -> None:
        self._params[key] = value

    def __str__(self) -> str:
        return f"{_root_url(self.request_options)}/cachedContents{self._path}"


def get_client_headers(request_options: RequestOptions) -> str:
    client_header = f"{PACKAGE_LOG_HEADER}/{PACKAGE_VERSION}"
    if request_options.api_client:
        client_header += f" {request_options.api_client}"
    return client_header


def get_headers(url: RequestUrl | CachedContentUrl) -> dict[str, str]:
    headers = {
        "Content-Type": "application/json",
        "x-goog-api-client": get_client_headers(url.request_options),
        "x-goog-api-key": url.api_key,
    }
    for name, value in url.request_options.custom_headers.items():
        if name.lower() in _RESERVED_HEADERS:
            raise GoogleGenerativeAIRequestInputError(f"Cannot set reserved header name {name!r}")
        headers[name] = value
    return headers


def _is_retryable(ex: BaseException) -> bool:
    if not isinstance(ex, GoogleGenerativeAIFetchError):
        return False
    return ex.status is None or ex.status in _RETRYABLE_STATUSES


def _on_retry(retry_state) -> None:
    attempt = retry_state.attempt_number
    wait = retry_state.next_action.sleep if retry_state.next_action else 0
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    reason = f"HTTP {exc.status}" if getattr(exc, "status", None) else type(exc).__name__
    logger.warning(f"{reason}. Retrying in {wait:.0f}s (attempt {attempt})...")


def _retry_kwargs(max_retries: int) -> dict:
    return {
        "retry": retry_if_exception(_is_retryable),
        "wait": wait_exponential(multiplier=1, min=1, max=30),
        "stop": stop_after_attempt(max_retries + 1),
        "before_sleep": _on_retry,
        "reraise": True,
    }


def _request_kwargs(url: RequestUrl | CachedContentUrl, body: str | None) -> dict:
    kwargs: dict = {
        "params": url.params,
        "headers": get_headers(url),
    }
    if body is not None:
        kwargs["content"] = body
    if url.request_options.timeout is not None:
        kwargs["timeout"] = url.request_options.timeout
    return kwargs


def _fetch_error(url: RequestUrl | CachedContentUrl, response: httpx.Response) -> GoogleGenerativeAIFetchError:
    message = ""
    details = None
    try:
        error = response.json().get("error") or {}
        message = error.get("message", "")
        details = error.get("details")
    except (ValueError, AttributeError):
        pass
    status_text = response.reason_phrase
    summary = f"Error fetching from {url}: [{response.status_code} {status_text}] {message}".rstrip()
    if details:
        summary += f" {details}"
    return GoogleGenerativeAIFetchError(
        summary,
        status=response.status_code,
        status_text=status_text,
        error_details=details,
        body=response.text,
    )


async def _send(
    url: RequestUrl | CachedContentUrl,
    body: str | None,
    http_client: httpx.AsyncClient | None,
) -> httpx.Response:
    kwargs = _request_kwargs(url, body)
    logger.debug(f"API request: {url.method} {url} params={url.params}")
    try:
        if http_client is not None:
            response = await http_client.request(url.method, str(url), **kwargs)
        else:
            async with httpx.AsyncClient(timeout=_DEFAULT_TIMEOUT_SECONDS) as client:
                response = await client.request(url.method, str(url), **kwargs)
    except httpx.TimeoutException as ex:
        raise GoogleGenerativeAIAbortError(f"Request to {url} timed out") from ex
    except httpx.HTTPError as ex:
        raise GoogleGenerativeAIFetchError(f"Error fetching from {url}: {ex}") from ex

    if not response.is_success:
        raise _fetch_error(url, response)
    logger.debug(f"API response: status={response.status_code}, bytes={len(response.content)}")
    return response


async def make_request(
    url: RequestUrl | CachedContentUrl,
    body: str | None = None,
    *,
    http_client: httpx.AsyncClient | None = None,
) -> httpx.Response:
    """Send one request, retrying transport failures, 429 and 503 up to ``max_retries`` times."""
    retrying = AsyncRetrying(**_retry_kwargs(url.request_options.max_retries))
    async for attempt in retrying:
        with attempt:
            response = await _send(url, body, http_client)
    return response


@asynccontextmanager
async def make_stream_request(
    url: RequestUrl,
    body: str,
    *,
    http_client: httpx.AsyncClient | None = None,
) -> AsyncIterator[httpx.Response]:
    """Open a streaming request; the response body is read by the caller."""
    kwargs = _request_kwargs(url, body)
    owns_client = http_client is None
    client = http_client or httpx.AsyncClient(timeout=_DEFAULT_TIMEOUT_SECONDS)
    logger.debug(f"API stream request: {url.method} {url}")
    try:
        async with client.stream(url.method, str(url), **kwargs) as response:
            if not response.is_success:
                await response.aread()
                raise _fetch_error(url, response)
            yield response
    except httpx.TimeoutException as ex:
        raise GoogleGenerativeAIAbortError(f"Request to {url} timed out") from ex
    except httpx.HTTPError as ex:
        raise GoogleGenerativeAIFetchError(f"Error fetching from {url}: {ex}") from ex
    finally:
        if owns_client:
            await client.aclose()
