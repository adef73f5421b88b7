from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

_UUID_RE = re.compile(r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$")

SUCCESS_MESSAGE = "Success"


class AssistRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    query: str = Field(min_length=1)
    request_id: str | None = Field(default=None, alias="requestId")

    @field_validator("request_id")
    @classmethod
    def validate_request_id(cls, value: str | None) -> str | None:
        # Checked for UUID shape only; the caller's spelling is kept as the cache key.
        if value is not None and not _UUID_RE.match(value):
            raise ValueError("requestId must be a UUID")
        return value


class ApiEnvelope(BaseModel):
    """Shape shared by every /ai response, success or failure."""

    model_config = ConfigDict(populate_by_name=True)

    request_id: str = Field(alias="requestId")
    data: Any | None = None
    code: int
    message: str

    @classmethod
    def success(cls, request_id: str, data: Any, code: int = 200) -> ApiEnvelope:
        return cls(request_id=request_id, data=data, code=code, message=SUCCESS_MESSAGE)

    @classmethod
    def failure(cls, request_id: str, code: int, message: str) -> ApiEnvelope:
        return cls(request_id=request_id, data=None, code=code, message=message)
