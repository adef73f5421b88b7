from .request_cache import (
    ASSIST_CACHE_KEY_PREFIX,
    InMemoryRequestCache,
    RedisRequestCache,
    RequestCache,
    RequestCacheError,
    assist_cache_key,
)
from .ttl import ExpiringTextStore

__all__ = [
    "ASSIST_CACHE_KEY_PREFIX",
    "ExpiringTextStore",
    "InMemoryRequestCache",
    "RedisRequestCache",
    "RequestCache",
    "RequestCacheError",
    "assist_cache_key",
]
