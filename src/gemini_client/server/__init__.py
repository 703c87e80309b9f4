from gemini_client.server.cache_manager import GoogleAICacheManager, camel_to_snake, parse_cache_name
from gemini_client.server.cache_types import (
    CachedContent,
    CachedContentCreateParams,
    CachedContentUpdateParams,
    ExpireTime,
    ListCacheResponse,
    Ttl,
)

__all__ = [
    "CachedContent",
    "CachedContentCreateParams",
    "CachedContentUpdateParams",
    "ExpireTime",
    "GoogleAICacheManager",
    "ListCacheResponse",
    "Ttl",
    "camel_to_snake",
    "parse_cache_name",
]
