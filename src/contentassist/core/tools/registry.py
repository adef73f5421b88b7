from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ToolName(str, Enum):
    GET_CONTENT_BY_ID = "get_content_by_id"
    SEARCH_CONTENT = "search_content"


@dataclass(frozen=True)
class ToolSpec:
    name: ToolName
    description: str
    parameters: dict[str, Any]

    def declaration(self) -> dict[str, Any]:
        return {"name": self.name.value, "description": self.description, "parameters": self.parameters}


TOOL_SPECS: tuple[ToolSpec, ...] = (
    ToolSpec(
        name=ToolName.GET_CONTENT_BY_ID,
        description=(
            "Fetches full content by its ID. Use this when the user asks to summarize "
            "or get details of specific content."
        ),
        parameters={
            "type": "object",
            "properties": {
                "content_id": {
                    "type": "integer",
                    "description": "The numeric ID of the content to fetch",
                },
            },
            "required": ["content_id"],
        },
    ),
    ToolSpec(
        name=ToolName.SEARCH_CONTENT,
        description=(
            "Searches for content by keyword and optional tags. Use for finding content, "
            "recommendations, or discovery."
        ),
        parameters={
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "Search query (keywords)"},
                "tags": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Optional tags to filter by",
                },
            },
            "required": ["query"],
        },
    ),
)


class ToolRegistry:
    def __init__(self, specs: tuple[ToolSpec, ...] = TOOL_SPECS) -> None:
        self._specs: dict[ToolName, ToolSpec] = {spec.name: spec for spec in specs}

    def resolve(self, name: str) -> ToolName | None:
        try:
            tool = ToolName(name)
        except ValueError:
            return None
        return tool if tool in self._specs else None

    def get(self, tool: ToolName) -> ToolSpec:
        return self._specs[tool]

    def declarations(self) -> list[dict[str, Any]]:
        return [spec.declaration() for spec in self._specs.values()]

    def names(self) -> list[str]:
        return sorted(tool.value for tool in self._specs)
