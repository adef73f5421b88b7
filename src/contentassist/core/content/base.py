from __future__ import annotations

from typing import Any, Protocol


class ContentNotFoundError(LookupError):
    def __init__(self, content_id: object) -> None:
        super().__init__(f"content_not_found:{content_id}")
        self.content_id = content_id


class ContentLookupProvider(Protocol):
    async def find_by_id(self, content_id: int) -> dict[str, Any]: ...


class ContentSearchProvider(Protocol):
    async def search(
        self,
        query: str,
        tags: list[str] | None,
        limit: int,
        offset: int,
    ) -> list[dict[str, Any]]: ...
