from __future__ import annotations

import json
import socket
from typing import Any, Protocol, Sequence

import httpx

from .errors import ModelProviderNetworkError, ModelProviderResponseError, ModelProviderStatusError
from .tool_calling import ConversationTurn, ModelResponse, ToolCall


class GenerativeModelClient(Protocol):
    async def generate(
        self,
        turns: Sequence[ConversationTurn],
        tools: Sequence[dict[str, Any]],
    ) -> ModelResponse: ...


def _network_code(exc: httpx.TransportError) -> str:
    if isinstance(exc, httpx.TimeoutException):
        return "ETIMEDOUT"
    cause: BaseException | None = exc.__cause__ or exc.__context__
    while cause is not None:
        if isinstance(cause, socket.gaierror):
            return "EAI_AGAIN" if cause.errno == socket.EAI_AGAIN else "ENOTFOUND"
        cause = cause.__cause__ or cause.__context__
    return "ECONNRESET"


def _turn_to_messages(turn: ConversationTurn) -> list[dict[str, Any]]:
    if turn.tool_result is not None:
        result = turn.tool_result
        return [
            {
                "role": "tool",
                "tool_call_id": result.call_id or result.name,
                "name": result.name,
                "content": json.dumps(result.payload, ensure_ascii=False),
            }
        ]
    if turn.role == "model":
        message: dict[str, Any] = {"role": "assistant", "content": turn.text}
        if turn.tool_calls:
            message["tool_calls"] = [
                {
                    "id": call.call_id or call.name,
                    "type": "function",
                    "function": {"name": call.name, "arguments": json.dumps(call.arguments, ensure_ascii=False)},
                }
                for call in turn.tool_calls
            ]
        return [message]
    return [{"role": "user", "content": turn.text or ""}]


def _parse_arguments(raw: object) -> dict[str, Any]:
    if isinstance(raw, dict):
        return raw
    if isinstance(raw, str) and raw.strip():
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            return {}
        return parsed if isinstance(parsed, dict) else {}
    return {}


def _parse_tool_calls(message: dict[str, Any]) -> tuple[ToolCall, ...]:
    calls: list[ToolCall] = []
    for item in message.get("tool_calls") or []:
        if not isinstance(item, dict):
            continue
        function = item.get("function") or {}
        name = function.get("name")
        if not isinstance(name, str) or not name:
            continue
        calls.append(
            ToolCall(
                name=name,
                arguments=_parse_arguments(function.get("arguments")),
                call_id=item.get("id") if isinstance(item.get("id"), str) else None,
            )
        )
    return tuple(calls)


class OpenAICompatModelClient:
    """Chat-completions client with function calling over the OpenAI-compatible wire format."""

    def __init__(
        self,
        url: str,
        model: str,
        api_key: str = "",
        timeout_s: float = 45.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.url = url
        self.model = model
        self.timeout_s = timeout_s
        self._api_key = api_key
        self._client = http_client or httpx.AsyncClient(timeout=timeout_s)

    def build_payload(self, turns: Sequence[ConversationTurn], tools: Sequence[dict[str, Any]]) -> dict[str, Any]:
        messages: list[dict[str, Any]] = []
        for turn in turns:
            messages.extend(_turn_to_messages(turn))
        payload: dict[str, Any] = {"model": self.model, "messages": messages}
        if tools:
            payload["tools"] = [{"type": "function", "function": dict(tool)} for tool in tools]
        return payload

    async def generate(
        self,
        turns: Sequence[ConversationTurn],
        tools: Sequence[dict[str, Any]],
    ) -> ModelResponse:
        headers = {"Authorization": f"Bearer {self._api_key}"} if self._api_key else None
        try:
            response = await self._client.post(
                self.url,
                json=self.build_payload(turns, tools),
                headers=headers,
                timeout=self.timeout_s,
            )
        except httpx.TransportError as exc:
            code = _network_code(exc)
            raise ModelProviderNetworkError(f"model request failed: {exc.__class__.__name__}", code=code) from exc

        if not 200 <= response.status_code < 300:
            raise ModelProviderStatusError(
                f"model request returned HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise ModelProviderResponseError("model response was not valid JSON") from exc

        if not isinstance(data, dict):
            raise ModelProviderResponseError("model response was not a JSON object")
        choices = data.get("choices")
        if not choices:
            return ModelResponse()
        if not isinstance(choices, list) or not isinstance(choices[0], dict):
            raise ModelProviderResponseError("model response choices were malformed")
        message = choices[0].get("message")
        if not isinstance(message, dict):
            raise ModelProviderResponseError("model response carried no message")
        content = message.get("content")
        text = content if isinstance(content, str) else None
        tool_calls = _parse_tool_calls(message)
        turn = ConversationTurn(role="model", text=text, tool_calls=tool_calls)
        return ModelResponse(text=text, tool_calls=tool_calls, turn=turn)

    async def aclose(self) -> None:
        await self._client.aclose()
