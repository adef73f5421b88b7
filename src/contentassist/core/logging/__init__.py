from .context import current_correlation_id, get_log_context, log_context
from .json_formatter import JSONFormatter
from .setup import configure_logging

__all__ = ["JSONFormatter", "configure_logging", "current_correlation_id", "get_log_context", "log_context"]
