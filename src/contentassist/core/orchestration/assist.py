from __future__ import annotations

import copy
import dataclasses
import logging
import time
from collections.abc import Callable
from typing import Any
from uuid import uuid4

from contentassist.core.cache.request_cache import RequestCache, RequestCacheError, assist_cache_key
from contentassist.core.logging.context import log_context
from contentassist.core.models.llm_client import GenerativeModelClient
from contentassist.core.models.prompts import assist_user_prompt
from contentassist.core.models.tool_calling import ConversationTurn, ModelResponse
from contentassist.core.retry.policy import RetryPolicy
from contentassist.core.tools.dispatcher import ToolDispatcher
from contentassist.core.tools.registry import ToolRegistry

from .parser import ResponseParser

# Termination guarantee for the tool loop: total model invocations per assist call.
MAX_MODEL_INVOCATIONS = 5

REQUEST_ID_FIELD = "requestId"


class ConversationOrchestrator:
    """Drives one assist request through the model/tool loop.

    The conversation lives only for the duration of a call. When the caller
    supplies a request id, a cached answer for it short-circuits all model
    work; concurrent first calls sharing an id are not deduplicated and the
    last cache write wins.
    """

    def __init__(
        self,
        model_client: GenerativeModelClient,
        cache: RequestCache,
        dispatcher: ToolDispatcher,
        retry_policy: RetryPolicy | None = None,
        registry: ToolRegistry | None = None,
        parser: ResponseParser | None = None,
        cache_ttl_s: int = 600,
        id_factory: Callable[[], str] = lambda: str(uuid4()),
    ) -> None:
        self.model_client = model_client
        self.cache = cache
        self.dispatcher = dispatcher
        self.retry_policy = retry_policy or RetryPolicy()
        self.registry = registry or dispatcher.registry
        self.parser = parser or ResponseParser()
        self.cache_ttl_s = cache_ttl_s
        self.id_factory = id_factory
        self.logger = logging.getLogger("contentassist.assist")

    async def assist(self, query: str, request_id: str | None = None) -> dict[str, Any]:
        resolved_id = request_id or self.id_factory()
        with log_context(request_id=resolved_id):
            if request_id:
                cached = await self._cache_lookup(request_id)
                if cached is not None:
                    self.logger.info("assist_cache_hit")
                    return {**cached, REQUEST_ID_FIELD: request_id}

            start = time.perf_counter()
            turns = [ConversationTurn.user(assist_user_prompt(query))]
            response, invocations = await self._converse(turns)

            body = self.parser.parse(response.text)
            body.pop(REQUEST_ID_FIELD, None)
            await self._cache_store(resolved_id, body)

            self.logger.info(
                "assist_completed",
                extra={
                    "extra_fields": {
                        "model_invocations": invocations,
                        "duration_ms": int((time.perf_counter() - start) * 1000),
                    }
                },
            )
            return {**body, REQUEST_ID_FIELD: resolved_id}

    async def _converse(self, turns: list[ConversationTurn]) -> tuple[ModelResponse, int]:
        response = await self._call_model(turns)
        invocations = 1
        while response.tool_calls:
            if invocations >= MAX_MODEL_INVOCATIONS:
                self.logger.warning(
                    "assist_iteration_cap_reached",
                    extra={"extra_fields": {"model_invocations": invocations}},
                )
                break
            # Only the first requested call is executed; the echoed model turn holds only that call.
            call = response.tool_calls[0]
            result = await self.dispatcher.dispatch(call)
            turns.append(dataclasses.replace(response.turn or ConversationTurn(role="model"), tool_calls=(call,)))
            turns.append(ConversationTurn.tool_response(result))
            response = await self._call_model(turns)
            invocations += 1
        return response, invocations

    async def _call_model(self, turns: list[ConversationTurn]) -> ModelResponse:
        tools = self.registry.declarations()
        snapshot = list(turns)
        start = time.perf_counter()
        try:
            response = await self.retry_policy.invoke(lambda: self.model_client.generate(snapshot, tools))
        except Exception as exc:
            self._log_model_call(start, ok=False, turns=len(snapshot), error=exc.__class__.__name__)
            raise
        self._log_model_call(start, ok=True, turns=len(snapshot), tool_calls=len(response.tool_calls))
        return response

    def _log_model_call(self, start: float, **fields: Any) -> None:
        self.logger.info(
            "assist_model_call",
            extra={"extra_fields": {"duration_ms": int((time.perf_counter() - start) * 1000), **fields}},
        )

    async def _cache_lookup(self, request_id: str) -> dict[str, Any] | None:
        try:
            return await self.cache.get(assist_cache_key(request_id))
        except RequestCacheError as exc:
            self.logger.warning("request_cache_unavailable", extra={"extra_fields": {"op": "get", "error": str(exc)}})
            return None

    async def _cache_store(self, request_id: str, body: dict[str, Any]) -> None:
        try:
            await self.cache.set(assist_cache_key(request_id), copy.deepcopy(body), self.cache_ttl_s)
        except RequestCacheError as exc:
            self.logger.warning("request_cache_unavailable", extra={"extra_fields": {"op": "set", "error": str(exc)}})
