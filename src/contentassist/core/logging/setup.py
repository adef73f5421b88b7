from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler

from contentassist.core.config import AssistConfig

from .json_formatter import JSONFormatter

ROOT_LOGGER_NAME = "contentassist"
LOG_FILE_NAME = "contentassist.log"
_STDOUT_HANDLER_NAME = "contentassist.stdout"
_FILE_HANDLER_NAME = "contentassist.file"
_LOG_MAX_BYTES = 5_000_000
_LOG_BACKUP_COUNT = 5


def _level_from_name(name: str) -> int:
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else logging.INFO


def _has_handler(logger: logging.Logger, name: str) -> bool:
    return any(handler.get_name() == name for handler in logger.handlers)


def _install(logger: logging.Logger, handler: logging.Handler, name: str) -> None:
    handler.set_name(name)
    handler.setFormatter(JSONFormatter())
    logger.addHandler(handler)


def configure_logging(config: AssistConfig) -> logging.Logger:
    """Attach JSON handlers to the package logger. Safe to call more than once."""
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(_level_from_name(config.log_level))
    logger.propagate = False

    if not _has_handler(logger, _STDOUT_HANDLER_NAME):
        _install(logger, logging.StreamHandler(stream=sys.stdout), _STDOUT_HANDLER_NAME)

    if config.log_to_file and not _has_handler(logger, _FILE_HANDLER_NAME):
        config.log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            filename=config.log_dir / LOG_FILE_NAME,
            maxBytes=_LOG_MAX_BYTES,
            backupCount=_LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        _install(logger, file_handler, _FILE_HANDLER_NAME)

    return logger
