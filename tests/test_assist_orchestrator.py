from __future__ import annotations

import asyncio
import json
import re
from typing import Any

import pytest

from contentassist.core.cache.request_cache import InMemoryRequestCache, RequestCacheError
from contentassist.core.content.base import ContentNotFoundError
from contentassist.core.models.errors import ModelProviderStatusError
from contentassist.core.models.tool_calling import ConversationTurn, ModelResponse, ToolCall
from contentassist.core.orchestration.assist import MAX_MODEL_INVOCATIONS, ConversationOrchestrator
from contentassist.core.retry.policy import RetryPolicy
from contentassist.core.tools.dispatcher import ToolDispatcher

REQUEST_ID = "550e8400-e29b-41d4-a716-446655440000"
UUID_RE = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$")


def text_response(text: str | None) -> ModelResponse:
    return ModelResponse(text=text, turn=ConversationTurn(role="model", text=text))


def tool_response(*calls: ToolCall) -> ModelResponse:
    return ModelResponse(tool_calls=calls, turn=ConversationTurn(role="model", tool_calls=calls))


class ScriptedModel:
    def __init__(self, *outcomes: ModelResponse | Exception) -> None:
        self.outcomes = list(outcomes)
        self.calls: list[list[ConversationTurn]] = []
        self.tools: list[list[dict[str, Any]]] = []

    async def generate(self, turns, tools) -> ModelResponse:
        self.calls.append(list(turns))
        self.tools.append(list(tools))
        # The final scripted outcome repeats once the script runs out.
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class RecordingCache:
    backend = "memory"

    def __init__(self, fail_get: bool = False, fail_set: bool = False) -> None:
        self.inner = InMemoryRequestCache()
        self.gets: list[str] = []
        self.sets: list[tuple[str, dict[str, Any], int]] = []
        self.fail_get = fail_get
        self.fail_set = fail_set

    async def get(self, key: str) -> dict[str, Any] | None:
        self.gets.append(key)
        if self.fail_get:
            raise RequestCacheError("request_cache_get_failed:ConnectionError")
        return await self.inner.get(key)

    async def set(self, key: str, answer: dict[str, Any], ttl_s: int) -> None:
        self.sets.append((key, answer, ttl_s))
        if self.fail_set:
            raise RequestCacheError("request_cache_set_failed:ConnectionError")
        await self.inner.set(key, answer, ttl_s)


class StubCatalog:
    def __init__(self, records: dict[int, dict[str, Any]] | None = None, results: list[dict[str, Any]] | None = None) -> None:
        self.records = records or {}
        self.results = results or []
        self.lookups: list[int] = []
        self.searches: list[tuple[str, list[str] | None, int, int]] = []

    async def find_by_id(self, content_id: int) -> dict[str, Any]:
        self.lookups.append(content_id)
        if content_id not in self.records:
            raise ContentNotFoundError(content_id)
        return self.records[content_id]

    async def search(self, query, tags, limit, offset) -> list[dict[str, Any]]:
        self.searches.append((query, tags, limit, offset))
        return self.results


def build(model: ScriptedModel, cache: RecordingCache | None = None, catalog: StubCatalog | None = None):
    sleeps: list[float] = []

    async def fake_sleep(seconds: float) -> None:
        sleeps.append(seconds)

    catalog = catalog or StubCatalog()
    cache = cache or RecordingCache()
    orchestrator = ConversationOrchestrator(
        model_client=model,
        cache=cache,
        dispatcher=ToolDispatcher(lookup=catalog, search=catalog),
        retry_policy=RetryPolicy(sleep=fake_sleep, rng=lambda: 0.0),
        cache_ttl_s=600,
    )
    return orchestrator, cache, catalog, sleeps


def test_plain_json_answer_uses_one_model_call_and_caches_body() -> None:
    model = ScriptedModel(text_response('{"summary":"A great article about AI","contentId":1}'))
    orchestrator, cache, _, _ = build(model)

    result = asyncio.run(orchestrator.assist("Summarize content 1"))

    assert len(model.calls) == 1
    assert result["summary"] == "A great article about AI"
    assert result["contentId"] == 1
    assert UUID_RE.match(result["requestId"])
    assert cache.gets == []
    assert len(cache.sets) == 1
    key, body, ttl = cache.sets[0]
    assert key == f"ai:assist:{result['requestId']}"
    assert body == {"summary": "A great article about AI", "contentId": 1}
    assert ttl == 600


def test_initial_turn_carries_instruction_query_and_tools() -> None:
    model = ScriptedModel(text_response('{"results":[],"message":"none"}'))
    orchestrator, _, _, _ = build(model)

    asyncio.run(orchestrator.assist("Find posts about gardening"))

    first_turns = model.calls[0]
    assert len(first_turns) == 1
    assert first_turns[0].role == "user"
    assert "Always respond with valid JSON only" in first_turns[0].text
    assert first_turns[0].text.endswith("User query: Find posts about gardening")
    assert [tool["name"] for tool in model.tools[0]] == ["get_content_by_id", "search_content"]


def test_plain_text_answer_is_wrapped() -> None:
    model = ScriptedModel(text_response("Plain text response"))
    orchestrator, _, _, _ = build(model)

    result = asyncio.run(orchestrator.assist("Hello"))

    assert result["response"] == "Plain text response"
    assert "requestId" in result


def test_empty_answer_uses_fallback() -> None:
    model = ScriptedModel(text_response(None))
    orchestrator, _, _, _ = build(model)

    result = asyncio.run(orchestrator.assist("Empty query"))

    assert result["response"] == "No response generated"


def test_get_content_by_id_tool_round_trip() -> None:
    record = {
        "id": 1,
        "title": "Test",
        "description": "Desc",
        "tags": ["tech"],
        "status": "published",
        "creator": {"id": 9, "email": "hidden@example.com"},
    }
    model = ScriptedModel(
        tool_response(ToolCall(name="get_content_by_id", arguments={"content_id": 1}, call_id="call_1")),
        text_response('{"summary":"Test content"}'),
    )
    orchestrator, _, catalog, _ = build(model, catalog=StubCatalog(records={1: record}))

    result = asyncio.run(orchestrator.assist("Summarize content 1"))

    assert catalog.lookups == [1]
    assert len(model.calls) == 2
    assert result["summary"] == "Test content"

    second_turns = model.calls[1]
    assert [turn.role for turn in second_turns] == ["user", "model", "user"]
    assert second_turns[1].tool_calls[0].name == "get_content_by_id"
    fed_back = second_turns[2].tool_result
    assert fed_back.name == "get_content_by_id"
    assert fed_back.call_id == "call_1"
    assert fed_back.payload == {
        "id": 1,
        "title": "Test",
        "description": "Desc",
        "tags": ["tech"],
        "status": "published",
    }


def test_search_content_tool_uses_fixed_page_and_truncates() -> None:
    long_description = "x" * 450
    catalog = StubCatalog(results=[{"id": 1, "title": "AI Post", "description": long_description, "tags": ["tech"]}])
    model = ScriptedModel(
        tool_response(ToolCall(name="search_content", arguments={"query": "machine learning", "tags": ["tech"]})),
        text_response('{"results":[],"message":"Found 1 result"}'),
    )
    orchestrator, _, _, _ = build(model, catalog=catalog)

    result = asyncio.run(orchestrator.assist("Find content about machine learning"))

    assert catalog.searches == [("machine learning", ["tech"], 10, 0)]
    assert result["message"] == "Found 1 result"
    payload = model.calls[1][-1].tool_result.payload
    assert payload["results"][0]["description"] == "x" * 200
    assert payload["results"][0]["title"] == "AI Post"


def test_only_first_tool_call_in_a_turn_is_executed() -> None:
    catalog = StubCatalog(records={1: {"id": 1, "title": "One", "description": "", "tags": [], "status": "draft"}})
    model = ScriptedModel(
        tool_response(
            ToolCall(name="get_content_by_id", arguments={"content_id": 1}),
            ToolCall(name="search_content", arguments={"query": "ignored"}),
        ),
        text_response('{"summary":"one"}'),
    )
    orchestrator, _, _, _ = build(model, catalog=catalog)

    asyncio.run(orchestrator.assist("Summarize 1"))

    assert catalog.lookups == [1]
    assert catalog.searches == []
    echoed_turn = model.calls[1][-2]
    assert echoed_turn.role == "model"
    assert echoed_turn.tool_calls == (ToolCall(name="get_content_by_id", arguments={"content_id": 1}),)


def test_unknown_tool_error_is_fed_back_to_model() -> None:
    model = ScriptedModel(
        tool_response(ToolCall(name="delete_everything", arguments={})),
        text_response('{"response":"cannot do that"}'),
    )
    orchestrator, _, _, _ = build(model)

    result = asyncio.run(orchestrator.assist("Delete all content"))

    assert model.calls[1][-1].tool_result.payload == {"error": "Unknown function: delete_everything"}
    assert result["response"] == "cannot do that"


def test_tool_loop_never_exceeds_invocation_cap() -> None:
    model = ScriptedModel(tool_response(ToolCall(name="search_content", arguments={"query": "loop"})))
    orchestrator, cache, catalog, _ = build(model)

    result = asyncio.run(orchestrator.assist("Keep searching"))

    assert len(model.calls) == MAX_MODEL_INVOCATIONS == 5
    assert len(catalog.searches) == MAX_MODEL_INVOCATIONS - 1
    assert result["response"] == "No response generated"
    assert len(cache.sets) == 1


def test_cached_answer_skips_model_and_cache_write() -> None:
    cache = RecordingCache()
    asyncio.run(cache.inner.set(f"ai:assist:{REQUEST_ID}", {"summary": "Cached summary", "contentId": "xyz"}, 600))
    model = ScriptedModel(text_response('{"summary":"fresh"}'))
    orchestrator, _, _, _ = build(model, cache=cache)

    result = asyncio.run(orchestrator.assist("Summarize content xyz", REQUEST_ID))

    assert cache.gets == [f"ai:assist:{REQUEST_ID}"]
    assert model.calls == []
    assert cache.sets == []
    assert result == {"summary": "Cached summary", "contentId": "xyz", "requestId": REQUEST_ID}


def test_cache_miss_with_request_id_calls_model_and_caches_under_that_id() -> None:
    model = ScriptedModel(text_response('{"summary":"New summary","contentId":1}'))
    orchestrator, cache, _, _ = build(model)

    result = asyncio.run(orchestrator.assist("Summarize content abc", REQUEST_ID))

    assert cache.gets == [f"ai:assist:{REQUEST_ID}"]
    assert len(model.calls) == 1
    assert cache.sets == [(f"ai:assist:{REQUEST_ID}", {"summary": "New summary", "contentId": 1}, 600)]
    assert result["requestId"] == REQUEST_ID


def test_request_id_is_used_exactly_as_given() -> None:
    model = ScriptedModel(text_response('{"summary":"s"}'))
    orchestrator, cache, _, _ = build(model)
    upper_id = REQUEST_ID.upper()

    result = asyncio.run(orchestrator.assist("Summarize", upper_id))

    assert cache.sets[0][0] == f"ai:assist:{upper_id}"
    assert result["requestId"] == upper_id


def test_repeat_call_with_same_id_replays_cached_answer() -> None:
    model = ScriptedModel(text_response('{"results":[{"id":3}],"message":"one hit"}'))
    orchestrator, cache, _, _ = build(model)

    first = asyncio.run(orchestrator.assist("Recommend something", REQUEST_ID))
    first["results"].append({"id": 99})
    second = asyncio.run(orchestrator.assist("Recommend something", REQUEST_ID))

    assert len(model.calls) == 1
    assert len(cache.sets) == 1
    assert second == {"results": [{"id": 3}], "message": "one hit", "requestId": REQUEST_ID}


def test_replayed_answer_keeps_first_response_key_order() -> None:
    model = ScriptedModel(text_response('{"summary":"s","contentId":1,"extra":{"z":1,"a":2}}'))
    orchestrator, _, _, _ = build(model)

    first = asyncio.run(orchestrator.assist("Summarize content 1", REQUEST_ID))
    second = asyncio.run(orchestrator.assist("Summarize content 1", REQUEST_ID))

    assert len(model.calls) == 1
    assert list(first) == list(second) == ["summary", "contentId", "extra", "requestId"]
    assert json.dumps(first) == json.dumps(second)


def test_request_id_from_model_output_is_never_trusted() -> None:
    model = ScriptedModel(text_response('{"summary":"x","requestId":"forged"}'))
    orchestrator, cache, _, _ = build(model)

    result = asyncio.run(orchestrator.assist("Summarize", REQUEST_ID))

    assert result["requestId"] == REQUEST_ID
    assert cache.sets[0][1] == {"summary": "x"}


def test_transient_failure_is_retried_once_then_succeeds() -> None:
    model = ScriptedModel(
        ModelProviderStatusError("Service unavailable", status_code=503),
        text_response('{"summary":"After retry","contentId":1}'),
    )
    orchestrator, _, _, sleeps = build(model)

    result = asyncio.run(orchestrator.assist("Summarize content id"))

    assert len(model.calls) == 2
    assert sleeps == [1.0]
    assert result["summary"] == "After retry"


def test_permanent_failure_is_not_retried() -> None:
    model = ScriptedModel(ModelProviderStatusError("Bad request", status_code=400))
    orchestrator, cache, _, sleeps = build(model)

    with pytest.raises(ModelProviderStatusError, match="Bad request"):
        asyncio.run(orchestrator.assist("Bad query"))

    assert len(model.calls) == 1
    assert sleeps == []
    assert cache.sets == []


def test_retries_exhaust_and_propagate() -> None:
    model = ScriptedModel(ModelProviderStatusError("Too many requests", status_code=429))
    orchestrator, _, _, sleeps = build(model)

    with pytest.raises(ModelProviderStatusError):
        asyncio.run(orchestrator.assist("Busy"))

    assert len(model.calls) == 3
    assert sleeps == [1.0, 2.0]


def test_cache_lookup_failure_degrades_to_model_call() -> None:
    model = ScriptedModel(text_response('{"summary":"live"}'))
    orchestrator, _, _, _ = build(model, cache=RecordingCache(fail_get=True))

    result = asyncio.run(orchestrator.assist("Summarize", REQUEST_ID))

    assert len(model.calls) == 1
    assert result == {"summary": "live", "requestId": REQUEST_ID}


def test_cache_write_failure_still_returns_answer() -> None:
    model = ScriptedModel(text_response('{"summary":"live"}'))
    orchestrator, cache, _, _ = build(model, cache=RecordingCache(fail_set=True))

    result = asyncio.run(orchestrator.assist("Summarize", REQUEST_ID))

    assert len(cache.sets) == 1
    assert result["summary"] == "live"
