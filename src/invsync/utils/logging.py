"""Logging configuration using loguru.

Every record carries the reconciliation it belongs to in
``extra["operation"]`` and ``extra["inventory"]``; the reconciler sets
both with reconciliation_context() and the console format renders them.
"""

import logging
import sys
from contextlib import AbstractContextManager
from typing import Any

from loguru import logger

from invsync.config.models import LoggingConfig

# Values shown outside any reconciliation
CONTEXT_DEFAULTS = {"operation": "-", "inventory": "-"}

# Standard library loggers of the HTTP stack
HTTP_LOGGERS = ("httpx", "httpcore")

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<magenta>{extra[operation]}</magenta> <cyan>{extra[inventory]}</cyan> | "
    "{name}:{line} - <level>{message}</level>"
)


class _HttpLogHandler(logging.Handler):
    """Forward httpx/httpcore records to loguru, keeping their origin."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        def origin(r: Any) -> None:
            r.update(name=record.name, function=record.funcName, line=record.lineno)

        logger.patch(origin).opt(exception=record.exc_info).log(level, record.getMessage())


def _http_log_level(level: str) -> int:
    # httpx logs every request at INFO, which duplicates the gateway's own
    # DEBUG line; only let it through when debugging.
    return logging.DEBUG if level == "DEBUG" else logging.WARNING


def configure_logging(config: LoggingConfig) -> None:
    """
    Configure loguru sinks and route the HTTP stack's logging into them.

    Args:
        config: LoggingConfig with level, format, and file settings.
    """
    serialize = config.format == "json"
    fmt = "{message}" if serialize else CONSOLE_FORMAT

    handlers: list[dict[str, Any]] = [
        {
            "sink": sys.stderr,
            "format": fmt,
            "level": config.level,
            "serialize": serialize,
        }
    ]
    if config.file:
        handlers.append(
            {
                "sink": config.file,
                "format": fmt,
                "level": config.level,
                "serialize": serialize,
                "rotation": config.rotation,
                "retention": config.retention,
                "compression": "gz",
            }
        )
    logger.configure(handlers=handlers, extra=CONTEXT_DEFAULTS)

    for name in HTTP_LOGGERS:
        http_logger = logging.getLogger(name)
        http_logger.handlers = [_HttpLogHandler()]
        http_logger.propagate = False
        http_logger.setLevel(_http_log_level(config.level) if name == "httpx" else logging.WARNING)

    logger.debug("Logging configured: level={} format={}", config.level, config.format)


def reconciliation_context(operation: str, inventory: object) -> AbstractContextManager[None]:
    """Tag every record logged inside the block with the operation and inventory."""
    return logger.contextualize(operation=operation, inventory=inventory)
