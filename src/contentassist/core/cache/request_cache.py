"""Idempotency store for assist answers.

Entries are stored as JSON text in the answer's own key order, so a cached answer comes back as a
fresh mapping on every read and callers can never mutate the stored value.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable
from typing import Any, Protocol

from redis import asyncio as redis_asyncio
from redis.exceptions import RedisError

from .ttl import ExpiringTextStore

ASSIST_CACHE_KEY_PREFIX = "ai:assist:"

logger = logging.getLogger("contentassist.cache")


class RequestCacheError(RuntimeError):
    """Raised when the backing store cannot be reached."""


def assist_cache_key(request_id: str) -> str:
    return f"{ASSIST_CACHE_KEY_PREFIX}{request_id}"


def _encode(answer: dict[str, Any]) -> str:
    return json.dumps(answer, separators=(",", ":"), ensure_ascii=False)


def _decode(raw: str | bytes | None) -> dict[str, Any] | None:
    if raw is None:
        return None
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("request_cache_corrupt_entry")
        return None
    return value if isinstance(value, dict) else None


class RequestCache(Protocol):
    backend: str

    async def get(self, key: str) -> dict[str, Any] | None: ...

    async def set(self, key: str, answer: dict[str, Any], ttl_s: int) -> None: ...


class InMemoryRequestCache:
    backend = "memory"

    def __init__(self, default_ttl_s: int = 600, clock: Callable[[], float] = time.monotonic) -> None:
        self._store = ExpiringTextStore(default_ttl_s=default_ttl_s, clock=clock)

    async def get(self, key: str) -> dict[str, Any] | None:
        return _decode(self._store.read(key))

    async def set(self, key: str, answer: dict[str, Any], ttl_s: int) -> None:
        self._store.purge_expired()
        self._store.write(key, _encode(answer), ttl_s)


class RedisRequestCache:
    backend = "redis"

    def __init__(self, client: redis_asyncio.Redis) -> None:
        self.client = client

    @classmethod
    def from_url(cls, url: str) -> RedisRequestCache:
        return cls(redis_asyncio.Redis.from_url(url, decode_responses=True))

    async def get(self, key: str) -> dict[str, Any] | None:
        try:
            raw = await self.client.get(key)
        except RedisError as exc:
            raise RequestCacheError(f"request_cache_get_failed:{exc.__class__.__name__}") from exc
        return _decode(raw)

    async def set(self, key: str, answer: dict[str, Any], ttl_s: int) -> None:
        try:
            await self.client.set(key, _encode(answer), ex=max(1, int(ttl_s)))
        except RedisError as exc:
            raise RequestCacheError(f"request_cache_set_failed:{exc.__class__.__name__}") from exc

    async def aclose(self) -> None:
        await self.client.aclose()
