from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TypeVar

from contentassist.core.config import AssistConfig

T = TypeVar("T")

TRANSIENT_ERROR_CODES = frozenset({"ECONNRESET", "ETIMEDOUT", "ENOTFOUND", "EAI_AGAIN"})
_JITTER_WINDOW_MS = 200

logger = logging.getLogger("contentassist.retry")


def is_transient(exc: BaseException) -> bool:
    """Classify a failure; anything without a usable signal counts as transient."""
    status = getattr(exc, "status_code", None)
    if status is None:
        status = getattr(exc, "status", None)
    if isinstance(status, int) and not isinstance(status, bool):
        return status >= 500 or status == 429
    code = getattr(exc, "code", None)
    if isinstance(code, str):
        return code in TRANSIENT_ERROR_CODES
    return True


@dataclass
class RetryPolicy:
    max_attempts: int = 3
    initial_delay_ms: int = 1000
    max_delay_ms: int = 10000
    jitter_ms: int = _JITTER_WINDOW_MS
    sleep: Callable[[float], Awaitable[None]] = field(default=asyncio.sleep, repr=False)
    rng: Callable[[], float] = field(default=random.random, repr=False)

    @classmethod
    def from_config(cls, config: AssistConfig) -> RetryPolicy:
        return cls(
            max_attempts=config.retry_max_attempts,
            initial_delay_ms=config.retry_initial_delay_ms,
            max_delay_ms=config.retry_max_delay_ms,
        )

    def delay_ms(self, attempt: int) -> float:
        backoff = self.initial_delay_ms * (2 ** (attempt - 1))
        return min(backoff + self.rng() * self.jitter_ms, self.max_delay_ms)

    async def invoke(self, operation: Callable[[], Awaitable[T]]) -> T:
        attempts = max(1, self.max_attempts)
        for attempt in range(1, attempts + 1):
            try:
                return await operation()
            except Exception as exc:
                if attempt >= attempts or not is_transient(exc):
                    raise
                delay = self.delay_ms(attempt)
                logger.warning(
                    "retry_scheduled",
                    extra={
                        "extra_fields": {
                            "attempt": attempt,
                            "max_attempts": attempts,
                            "delay_ms": int(delay),
                            "reason": exc.__class__.__name__,
                        }
                    },
                )
                await self.sleep(delay / 1000.0)
        raise RuntimeError("retry_loop_exhausted")
