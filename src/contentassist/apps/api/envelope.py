from __future__ import annotations

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

from contentassist.core.logging import current_correlation_id
from contentassist.core.orchestration.schemas import ApiEnvelope

REQUEST_ID_HEADER = "X-Request-Id"


def request_correlation_id(request: Request) -> str:
    return getattr(request.state, "correlation_id", None) or current_correlation_id() or "unknown"


def success_body(request: Request, data: Any, code: int) -> dict[str, Any]:
    return ApiEnvelope.success(request_correlation_id(request), data, code).model_dump(by_alias=True)


def error_response(request: Request, status_code: int, message: str) -> JSONResponse:
    correlation_id = request_correlation_id(request)
    envelope = ApiEnvelope.failure(correlation_id, status_code, message)
    return JSONResponse(
        status_code=status_code,
        content=envelope.model_dump(by_alias=True),
        headers={REQUEST_ID_HEADER: correlation_id},
    )
