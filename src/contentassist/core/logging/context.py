from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator

# HTTP-level id from X-Request-Id
correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)
# assist idempotency id
request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)


def current_correlation_id() -> str | None:
    return correlation_id_var.get()


@contextmanager
def log_context(correlation_id: str | None = None, request_id: str | None = None) -> Iterator[None]:
    # An inner block never clears a value bound by an outer one.
    bindings = [
        (var, value)
        for var, value in ((correlation_id_var, correlation_id), (request_id_var, request_id))
        if value is not None
    ]
    tokens = [(var, var.set(value)) for var, value in bindings]
    try:
        yield
    finally:
        for var, token in reversed(tokens):
            var.reset(token)


def get_log_context() -> dict[str, str]:
    context: dict[str, str] = {}
    correlation_id = correlation_id_var.get()
    if correlation_id is not None:
        context["correlation_id"] = correlation_id
    request_id = request_id_var.get()
    if request_id is not None:
        context["request_id"] = request_id
    return context
