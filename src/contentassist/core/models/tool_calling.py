from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

Role = Literal["user", "model"]


@dataclass(frozen=True)
class ToolCall:
    name: str
    arguments: dict[str, Any] = field(default_factory=dict)
    call_id: str | None = None


@dataclass(frozen=True)
class ToolResult:
    name: str
    payload: Any
    call_id: str | None = None

    @property
    def ok(self) -> bool:
        return not (isinstance(self.payload, dict) and "error" in self.payload)


@dataclass(frozen=True)
class ConversationTurn:
    role: Role
    text: str | None = None
    tool_calls: tuple[ToolCall, ...] = ()
    tool_result: ToolResult | None = None

    @classmethod
    def user(cls, text: str) -> ConversationTurn:
        return cls(role="user", text=text)

    @classmethod
    def tool_response(cls, result: ToolResult) -> ConversationTurn:
        return cls(role="user", tool_result=result)


@dataclass(frozen=True)
class ModelResponse:
    text: str | None = None
    tool_calls: tuple[ToolCall, ...] = ()
    turn: ConversationTurn | None = None
