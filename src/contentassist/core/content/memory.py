from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Any

from .base import ContentNotFoundError

PUBLISHED = "published"


class InMemoryContentCatalog:
    """Process-local content catalog implementing both lookup and search."""

    def __init__(self, records: list[dict[str, Any]] | None = None) -> None:
        self._records: dict[int, dict[str, Any]] = {}
        self._lock = threading.Lock()
        for record in records or []:
            self.add(record)

    @classmethod
    def from_json_file(cls, path: str | Path) -> InMemoryContentCatalog:
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
        if isinstance(payload, dict):
            payload = payload.get("items", [])
        if not isinstance(payload, list):
            raise ValueError(f"content file must hold a list of records: {path}")
        return cls([item for item in payload if isinstance(item, dict)])

    def add(self, record: dict[str, Any]) -> None:
        content_id = int(record["id"])
        normalized = {
            "id": content_id,
            "title": str(record.get("title") or ""),
            "description": str(record.get("description") or ""),
            "tags": [str(tag) for tag in record.get("tags") or []],
            "status": str(record.get("status") or "draft"),
            "created_at": str(record.get("created_at") or ""),
        }
        with self._lock:
            self._records[content_id] = normalized

    async def find_by_id(self, content_id: int) -> dict[str, Any]:
        with self._lock:
            record = self._records.get(content_id)
        if record is None:
            raise ContentNotFoundError(content_id)
        return {**record, "tags": list(record["tags"])}

    async def search(
        self,
        query: str,
        tags: list[str] | None,
        limit: int,
        offset: int,
    ) -> list[dict[str, Any]]:
        terms = [term for term in (query or "").casefold().split() if term]
        wanted_tags = {tag.casefold() for tag in tags or []}
        with self._lock:
            candidates = [{**record, "tags": list(record["tags"])} for record in self._records.values() if record["status"] == PUBLISHED]

        matches: list[dict[str, Any]] = []
        for record in candidates:
            haystack = f"{record['title']} {record['description']}".casefold()
            if terms and not all(term in haystack for term in terms):
                continue
            if wanted_tags and not wanted_tags.intersection(tag.casefold() for tag in record["tags"]):
                continue
            matches.append(record)

        matches.sort(key=lambda item: (item["created_at"], item["id"]), reverse=True)
        start = max(0, offset)
        return matches[start : start + max(0, limit)]

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
