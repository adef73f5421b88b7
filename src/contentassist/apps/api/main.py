from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from contentassist.core.logging import configure_logging, log_context
from contentassist.core.models.errors import ModelProviderError

from .deps import get_config, get_model_client, get_request_cache
from .envelope import REQUEST_ID_HEADER, error_response, success_body
from .routes_ai import router as ai_router

SAFE_INTERNAL_MESSAGE = "An unexpected error occurred"
UPSTREAM_FAILURE_MESSAGE = "The AI provider could not complete the request"

logger = logging.getLogger("contentassist.api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    config = get_config()
    configure_logging(config)
    logger.info("service_started", extra={"extra_fields": config.summary()})
    yield
    await get_model_client().aclose()
    cache = get_request_cache()
    close = getattr(cache, "aclose", None)
    if close is not None:
        await close()


app = FastAPI(title="Content Assist API", lifespan=lifespan)
app.include_router(ai_router, prefix="/ai", tags=["ai"])


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    provided = (request.headers.get(REQUEST_ID_HEADER) or "").strip()
    correlation_id = provided or str(uuid4())
    request.state.correlation_id = correlation_id
    with log_context(correlation_id=correlation_id):
        response = await call_next(request)
    response.headers[REQUEST_ID_HEADER] = correlation_id
    return response


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = ". ".join(
        f"{'.'.join(str(part) for part in error.get('loc', ()) if part != 'body')}: {error.get('msg', 'invalid')}"
        for error in exc.errors()
    )
    logger.warning(
        "request_rejected",
        extra={"extra_fields": {"method": request.method, "path": request.url.path, "status": 400}},
    )
    return error_response(request, 400, message or "Invalid request")


@app.exception_handler(ModelProviderError)
async def model_provider_error_handler(request: Request, exc: ModelProviderError) -> JSONResponse:
    logger.error(
        "assist_provider_failed",
        exc_info=exc,
        extra={"extra_fields": {"method": request.method, "path": request.url.path, "status": 502}},
    )
    return error_response(request, 502, UPSTREAM_FAILURE_MESSAGE)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "request_failed",
        exc_info=exc,
        extra={"extra_fields": {"method": request.method, "path": request.url.path, "status": 500}},
    )
    return error_response(request, 500, SAFE_INTERNAL_MESSAGE)


@app.get("/healthz")
def healthz(request: Request) -> dict[str, Any]:
    return success_body(request, {"status": "ok", "cache": get_request_cache().backend}, 200)


def run() -> None:
    import uvicorn

    uvicorn.run("contentassist.apps.api.main:app", host="0.0.0.0", port=8000)
