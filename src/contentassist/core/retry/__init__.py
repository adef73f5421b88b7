from .policy import TRANSIENT_ERROR_CODES, RetryPolicy, is_transient

__all__ = ["RetryPolicy", "TRANSIENT_ERROR_CODES", "is_transient"]
