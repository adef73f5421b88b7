from __future__ import annotations

import json
import logging
import traceback
from datetime import datetime, timezone

from .context import get_log_context

SERVICE_NAME = "content-assist"


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: dict[str, object] = {
            "ts_iso_utc": created.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "service": SERVICE_NAME,
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
        }
        payload.update(get_log_context())

        extra_fields = getattr(record, "extra_fields", None)
        if isinstance(extra_fields, dict):
            payload.update(extra_fields)

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc_value, exc_tb = record.exc_info
            payload["error_type"] = exc_type.__name__
            payload["error"] = str(exc_value) if exc_value else ""
            payload["stack"] = "".join(traceback.format_exception(exc_type, exc_value, exc_tb))

        return json.dumps(payload, separators=(",", ":"), ensure_ascii=False, default=str)
