from __future__ import annotations


class ModelProviderError(RuntimeError):
    """Base error for generative model calls."""


class ModelProviderStatusError(ModelProviderError):
    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class ModelProviderNetworkError(ModelProviderError):
    """Transport-level failure; ``code`` names the connection failure class."""

    def __init__(self, message: str, code: str) -> None:
        super().__init__(message)
        self.code = code


class ModelProviderResponseError(ModelProviderError):
    """Raised when a 2xx response body cannot be decoded."""
