"""
Logging configuration for mcpline.

Stdout carries the wire protocol, so every log line goes to stderr.
"""

import logging
import sys
from typing import Any, Dict, Mapping, Optional

import structlog


def setup_logging(level: str = "INFO", json_output: bool = True) -> None:
    """
    Setup structured logging with structlog.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_output: Render JSON lines (default) or human friendly console output
    """

    # Configure standard library logging
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        stream=sys.stderr,
        format="%(message)s",
        force=True,
    )

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def ensure_logging(level: str = "INFO", json_output: bool = True) -> None:
    """Configure logging unless the application already configured structlog."""
    if not structlog.is_configured():
        setup_logging(level, json_output=json_output)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


class StructuredLogger:
    """
    Logger handed to operation handlers.

    Every level takes a mapping of structured fields plus an optional message,
    e.g. ``ctx.logger.info({"tool": "add"}, "Adding numbers")``.
    """

    def __init__(self, logger: Optional[Any] = None) -> None:
        self._logger = logger if logger is not None else get_logger("mcpline.handler")

    def debug(self, data: Mapping[str, Any], message: Optional[str] = None) -> None:
        self._logger.debug(message or "", **_fields(data))

    def info(self, data: Mapping[str, Any], message: Optional[str] = None) -> None:
        self._logger.info(message or "", **_fields(data))

    def warn(self, data: Mapping[str, Any], message: Optional[str] = None) -> None:
        self._logger.warning(message or "", **_fields(data))

    def error(self, data: Mapping[str, Any], message: Optional[str] = None) -> None:
        self._logger.error(message or "", **_fields(data))


def _fields(data: Mapping[str, Any]) -> Dict[str, Any]:
    # "event" is structlog's positional message argument
    fields = {str(key): value for key, value in data.items()}
    if "event" in fields:
        fields["event_data"] = fields.pop("event")
    return fields
