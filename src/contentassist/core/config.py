from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

_DEFAULT_LLM_URL = "https://generativelanguage.googleapis.com/v1beta/openai/chat/completions"
_DEFAULT_LLM_MODEL = "gemini-2.5-flash"
_DEFAULT_LLM_TIMEOUT_S = 45.0
_DEFAULT_CACHE_TTL_S = 600
_DEFAULT_RETRY_MAX_ATTEMPTS = 3
_DEFAULT_RETRY_INITIAL_DELAY_MS = 1000
_DEFAULT_RETRY_MAX_DELAY_MS = 10000


def _get_float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _get_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_optional_env(name: str) -> str | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return raw.strip()


def _is_on(name: str, default: str = "off") -> bool:
    return os.getenv(name, default).strip().casefold() == "on"


@dataclass(frozen=True)
class AssistConfig:
    api_key: str = ""
    llm_url: str = _DEFAULT_LLM_URL
    llm_model: str = _DEFAULT_LLM_MODEL
    llm_timeout_s: float = _DEFAULT_LLM_TIMEOUT_S
    cache_ttl_s: int = _DEFAULT_CACHE_TTL_S
    retry_max_attempts: int = _DEFAULT_RETRY_MAX_ATTEMPTS
    retry_initial_delay_ms: int = _DEFAULT_RETRY_INITIAL_DELAY_MS
    retry_max_delay_ms: int = _DEFAULT_RETRY_MAX_DELAY_MS
    redis_url: str | None = None
    content_file: Path | None = None
    log_level: str = "INFO"
    log_to_file: bool = False
    log_dir: Path = Path("logs")

    def summary(self) -> dict[str, object]:
        """Loggable view of the configuration; never includes the credential."""
        return {
            "llm_url": self.llm_url,
            "llm_model": self.llm_model,
            "llm_api_key_set": bool(self.api_key),
            "cache_ttl_s": self.cache_ttl_s,
            "cache_backend": "redis" if self.redis_url else "memory",
            "retry_max_attempts": self.retry_max_attempts,
            "retry_initial_delay_ms": self.retry_initial_delay_ms,
            "retry_max_delay_ms": self.retry_max_delay_ms,
        }


def load_config() -> AssistConfig:
    api_key = os.getenv("CONTENTASSIST_LLM_API_KEY") or os.getenv("GEMINI_API_KEY") or ""
    content_file = _get_optional_env("CONTENTASSIST_CONTENT_FILE")
    return AssistConfig(
        api_key=api_key,
        llm_url=os.getenv("CONTENTASSIST_LLM_URL", _DEFAULT_LLM_URL),
        llm_model=os.getenv("CONTENTASSIST_LLM_MODEL", _DEFAULT_LLM_MODEL),
        llm_timeout_s=max(0.1, _get_float_env("CONTENTASSIST_LLM_TIMEOUT_S", _DEFAULT_LLM_TIMEOUT_S)),
        cache_ttl_s=max(1, _get_int_env("CONTENTASSIST_ASSIST_CACHE_TTL_S", _DEFAULT_CACHE_TTL_S)),
        retry_max_attempts=max(1, _get_int_env("CONTENTASSIST_RETRY_MAX_ATTEMPTS", _DEFAULT_RETRY_MAX_ATTEMPTS)),
        retry_initial_delay_ms=max(0, _get_int_env("CONTENTASSIST_RETRY_INITIAL_DELAY_MS", _DEFAULT_RETRY_INITIAL_DELAY_MS)),
        retry_max_delay_ms=max(0, _get_int_env("CONTENTASSIST_RETRY_MAX_DELAY_MS", _DEFAULT_RETRY_MAX_DELAY_MS)),
        redis_url=_get_optional_env("CONTENTASSIST_REDIS_URL"),
        content_file=Path(content_file).expanduser() if content_file else None,
        log_level=os.getenv("CONTENTASSIST_LOG_LEVEL", "INFO"),
        log_to_file=_is_on("CONTENTASSIST_LOG_TO_FILE", "off"),
        log_dir=Path(os.getenv("CONTENTASSIST_LOG_DIR", "logs")).expanduser(),
    )
