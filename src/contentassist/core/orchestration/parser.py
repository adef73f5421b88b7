from __future__ import annotations

import json
import re
from typing import Any

NO_RESPONSE_FALLBACK = "No response generated"

_FENCE_RE = re.compile(r"^```(?:json)?\s*\n?([\s\S]*?)\n?```$")


def strip_code_fence(text: str) -> str:
    match = _FENCE_RE.match(text)
    return match.group(1).strip() if match else text


class ResponseParser:
    def parse(self, raw: str | None) -> dict[str, Any]:
        text = (raw or "").strip()
        if not text:
            return {"response": NO_RESPONSE_FALLBACK}
        try:
            parsed = json.loads(strip_code_fence(text))
        except json.JSONDecodeError:
            return {"response": text}
        if not isinstance(parsed, dict):
            return {"response": text}
        return parsed
