from __future__ import annotations

import logging
from typing import Any

from contentassist.core.content.base import ContentLookupProvider, ContentNotFoundError, ContentSearchProvider
from contentassist.core.models.tool_calling import ToolCall, ToolResult

from .registry import ToolName, ToolRegistry

SEARCH_PAGE_SIZE = 10
SEARCH_OFFSET = 0
DESCRIPTION_PREVIEW_CHARS = 200

INVALID_CONTENT_ID_ERROR = "content_id is required and must be an integer"
CONTENT_NOT_FOUND_ERROR = "Content not found"
SEARCH_FAILED_ERROR = "Search failed"

logger = logging.getLogger("contentassist.tools")


def coerce_content_id(raw: object) -> int | None:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, float) and raw.is_integer():
        value = int(raw)
    elif isinstance(raw, str) and raw.strip():
        try:
            value = int(raw.strip())
        except ValueError:
            return None
    else:
        return None
    return value if value > 0 else None


def _coerce_tags(raw: object) -> list[str] | None:
    if not isinstance(raw, list):
        return None
    return [str(tag) for tag in raw if isinstance(tag, (str, int, float)) and not isinstance(tag, bool)]


def content_projection(record: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": record.get("id"),
        "title": record.get("title"),
        "description": record.get("description"),
        "tags": record.get("tags"),
        "status": record.get("status"),
    }


def search_projection(record: dict[str, Any]) -> dict[str, Any]:
    description = record.get("description") or ""
    return {
        "id": record.get("id"),
        "title": record.get("title"),
        "description": str(description)[:DESCRIPTION_PREVIEW_CHARS],
        "tags": record.get("tags"),
    }


class ToolDispatcher:
    """Executes one model tool call against the content collaborators.

    Every outcome is returned as a ToolResult payload; argument problems,
    missing content and unknown tool names become ``{"error": ...}`` payloads
    that are fed back to the model instead of raised.
    """

    def __init__(
        self,
        lookup: ContentLookupProvider,
        search: ContentSearchProvider,
        registry: ToolRegistry | None = None,
    ) -> None:
        self.lookup = lookup
        self.search = search
        self.registry = registry or ToolRegistry()

    async def dispatch(self, call: ToolCall) -> ToolResult:
        tool = self.registry.resolve(call.name)
        if tool is ToolName.GET_CONTENT_BY_ID:
            payload = await self._get_content_by_id(call.arguments)
        elif tool is ToolName.SEARCH_CONTENT:
            payload = await self._search_content(call.arguments)
        else:
            payload = {"error": f"Unknown function: {call.name}"}

        result = ToolResult(name=call.name, payload=payload, call_id=call.call_id)
        logger.info(
            "assist_tool_dispatch",
            extra={"extra_fields": {"tool": call.name, "ok": result.ok}},
        )
        return result

    async def _get_content_by_id(self, arguments: dict[str, Any]) -> dict[str, Any]:
        content_id = coerce_content_id(arguments.get("content_id"))
        if content_id is None:
            return {"error": INVALID_CONTENT_ID_ERROR}
        try:
            record = await self.lookup.find_by_id(content_id)
        except ContentNotFoundError:
            return {"error": CONTENT_NOT_FOUND_ERROR}
        except Exception:
            logger.warning("content_lookup_failed", exc_info=True, extra={"extra_fields": {"content_id": content_id}})
            return {"error": CONTENT_NOT_FOUND_ERROR}
        return content_projection(record)

    async def _search_content(self, arguments: dict[str, Any]) -> dict[str, Any]:
        query = arguments.get("query")
        tags = _coerce_tags(arguments.get("tags"))
        try:
            items = await self.search.search(
                query if isinstance(query, str) else "",
                tags,
                SEARCH_PAGE_SIZE,
                SEARCH_OFFSET,
            )
        except Exception:
            logger.warning("content_search_failed", exc_info=True)
            return {"error": SEARCH_FAILED_ERROR}
        return {"results": [search_projection(item) for item in items]}
