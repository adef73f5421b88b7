from __future__ import annotations

import pytest

_ENV_VARS = (
    "CONTENTASSIST_LLM_API_KEY",
    "GEMINI_API_KEY",
    "CONTENTASSIST_LLM_URL",
    "CONTENTASSIST_LLM_MODEL",
    "CONTENTASSIST_LLM_TIMEOUT_S",
    "CONTENTASSIST_ASSIST_CACHE_TTL_S",
    "CONTENTASSIST_RETRY_MAX_ATTEMPTS",
    "CONTENTASSIST_RETRY_INITIAL_DELAY_MS",
    "CONTENTASSIST_RETRY_MAX_DELAY_MS",
    "CONTENTASSIST_REDIS_URL",
    "CONTENTASSIST_CONTENT_FILE",
    "CONTENTASSIST_LOG_LEVEL",
    "CONTENTASSIST_LOG_TO_FILE",
    "CONTENTASSIST_LOG_DIR",
)


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
