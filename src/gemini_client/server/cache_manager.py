from __future__ import annotations

import json
import re
from typing import Any

import httpx
from loguru import logger

from gemini_client.errors import GoogleGenerativeAIError
from gemini_client.request import CachedContentUrl, RequestOptions, RpcTask, make_request
from gemini_client.server.cache_types import (
    CachedContent,
    CachedContentCreateParams,
    CachedContentUpdateParams,
    ListCacheResponse,
)

_CACHE_NAME_PREFIX = "cachedContents/"
_UPPERCASE = re.compile(r"[A-Z]")


def parse_cache_name(name: str | None) -> str:
    """Strip the ``cachedContents/`` prefix; bare ids pass through."""
    if not name:
        raise GoogleGenerativeAIError(
            f"Invalid name {name!r}. Must be a string of the form 'cachedContents/name' or 'name'."
        )
    return name.removeprefix(_CACHE_NAME_PREFIX)


def camel_to_snake(value: str) -> str:
    return _UPPERCASE.sub(lambda match: f"_{match.group(0).lower()}", value)


class GoogleAICacheManager:
    """Create, list, get, update and delete cached content resources."""

    def __init__(
        self,
        api_key: str,
        request_options: RequestOptions | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.api_key = api_key
        self._request_options = request_options or RequestOptions()
        self._http_client = http_client

    def _url(self, task: RpcTask) -> CachedContentUrl:
        return CachedContentUrl(task, self.api_key, self._request_options)

    async def create(self, create_options: CachedContentCreateParams | dict[str, Any]) -> CachedContent:
        """Upload a new content cache.

        ``create_options`` is either a ``CachedContentCreateParams`` or a dict
        using the wire field names, where ``ttlSeconds`` stands in for ``ttl``.
        """
        if isinstance(create_options, dict):
            create_options = CachedContentCreateParams.from_dict(create_options)
        body = create_options.to_request_body()

        url = self._url(RpcTask.CREATE)
        response = await make_request(url, json.dumps(body), http_client=self._http_client)
        cached_content = CachedContent.model_validate(response.json())
        logger.debug(f"Created cached content {cached_content.name} for {body['model']}")
        return cached_content

    async def list(self, page_size: int | None = None, page_token: str | None = None) -> ListCacheResponse:
        url = self._url(RpcTask.LIST)
        if page_size:
            url.append_param("pageSize", str(page_size))
        if page_token:
            url.append_param("pageToken", page_token)
        response = await make_request(url, http_client=self._http_client)
        return ListCacheResponse.model_validate(response.json())

    async def get(self, name: str) -> CachedContent:
        url = self._url(RpcTask.GET)
        url.append_path(parse_cache_name(name))
        response = await make_request(url, http_client=self._http_client)
        return CachedContent.model_validate(response.json())

    async def update(
        self,
        name: str,
        update_params: CachedContentUpdateParams | dict[str, Any],
    ) -> CachedContent:
        """Patch an existing cache.

        Without an explicit update mask, the mask lists exactly the fields
        present in the body, so omitted fields are never overwritten.
        """
        if isinstance(update_params, dict):
            update_params = CachedContentUpdateParams.from_dict(update_params)

        url = self._url(RpcTask.UPDATE)
        url.append_path(parse_cache_name(name))

        body = update_params.to_request_body()
        update_mask = update_params.update_mask or list(body)
        if update_mask:
            url.append_param("update_mask", ",".join(camel_to_snake(field) for field in update_mask))

        response = await make_request(url, json.dumps(body), http_client=self._http_client)
        return CachedContent.model_validate(response.json())

    async def delete(self, name: str) -> None:
        url = self._url(RpcTask.DELETE)
        url.append_path(parse_cache_name(name))
        await make_request(url, http_client=self._http_client)
        logger.debug(f"Deleted cached content {name}")
