from __future__ import annotations

from functools import lru_cache

from contentassist.core.cache.request_cache import InMemoryRequestCache, RedisRequestCache, RequestCache
from contentassist.core.config import AssistConfig, load_config
from contentassist.core.content.memory import InMemoryContentCatalog
from contentassist.core.models.llm_client import OpenAICompatModelClient
from contentassist.core.orchestration.assist import ConversationOrchestrator
from contentassist.core.retry.policy import RetryPolicy
from contentassist.core.tools.dispatcher import ToolDispatcher
from contentassist.core.tools.registry import ToolRegistry


@lru_cache(maxsize=1)
def get_config() -> AssistConfig:
    return load_config()


@lru_cache(maxsize=1)
def get_request_cache() -> RequestCache:
    config = get_config()
    if config.redis_url:
        return RedisRequestCache.from_url(config.redis_url)
    return InMemoryRequestCache(default_ttl_s=config.cache_ttl_s)


@lru_cache(maxsize=1)
def get_content_catalog() -> InMemoryContentCatalog:
    config = get_config()
    if config.content_file is not None:
        return InMemoryContentCatalog.from_json_file(config.content_file)
    return InMemoryContentCatalog()


@lru_cache(maxsize=1)
def get_model_client() -> OpenAICompatModelClient:
    config = get_config()
    return OpenAICompatModelClient(
        url=config.llm_url,
        model=config.llm_model,
        api_key=config.api_key,
        timeout_s=config.llm_timeout_s,
    )


@lru_cache(maxsize=1)
def get_orchestrator() -> ConversationOrchestrator:
    config = get_config()
    catalog = get_content_catalog()
    registry = ToolRegistry()
    return ConversationOrchestrator(
        model_client=get_model_client(),
        cache=get_request_cache(),
        dispatcher=ToolDispatcher(lookup=catalog, search=catalog, registry=registry),
        retry_policy=RetryPolicy.from_config(config),
        registry=registry,
        cache_ttl_s=config.cache_ttl_s,
    )


def reset_dependencies() -> None:
    for getter in (get_orchestrator, get_model_client, get_content_catalog, get_request_cache, get_config):
        getter.cache_clear()
