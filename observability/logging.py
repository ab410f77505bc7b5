"""
VerseKit - Structured Logging

structlog on top of the stdlib root logger. Events logged while a search or
fetch span is active carry its trace_id and span_id, and events logged with
``exc_info`` carry the VerseKit error code and severity.

Logs go to stderr so that command output on stdout stays machine-readable.

Usage:
    from observability.logging import setup_logging, get_logger

    setup_logging(LoggingConfig(level="DEBUG"))

    logger = get_logger(__name__)
    logger.info("Search merged", query="waters", phrase=3, word=0)
"""
from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

import structlog
from opentelemetry import trace
from structlog.types import EventDict, Processor, WrappedLogger

LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Libraries that stay at WARNING unless the root level is stricter
QUIET_LOGGERS = ("sqlalchemy.engine", "aiosqlite", "opentelemetry", "asyncio")

HANDLER_MARK = "_versekit"

_configured: bool = False


@dataclass
class LoggingConfig:
    """Settings for ``setup_logging``; defaults come from VERSEKIT_LOG_*."""

    service_name: str = "versekit"
    level: str = field(default_factory=lambda: os.getenv("VERSEKIT_LOG_LEVEL", "WARNING"))
    json_format: bool = field(
        default_factory=lambda: os.getenv("VERSEKIT_LOG_FORMAT", "console").lower() == "json"
    )
    enable_trace_context: bool = True
    environment: str = field(
        default_factory=lambda: os.getenv("VERSEKIT_ENV", "development")
    )

    def __post_init__(self) -> None:
        self.level = self.level.strip().upper()
        if self.level not in LEVELS:
            raise ValueError(
                f"Unknown log level: {self.level} (expected one of {', '.join(LEVELS)})"
            )

    @property
    def numeric_level(self) -> int:
        return getattr(logging, self.level)


def add_trace_context(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Copy trace_id and span_id of the active span, if there is one."""
    span_context = trace.get_current_span().get_span_context()
    if span_context.is_valid:
        event_dict.setdefault("trace_id", trace.format_trace_id(span_context.trace_id))
        event_dict.setdefault("span_id", trace.format_span_id(span_context.span_id))
    return event_dict


def service_context(service_name: str, environment: str) -> Processor:
    """Processor stamping every event with the service and its environment."""
    static = {"service": service_name, "environment": environment}

    def processor(
        logger: WrappedLogger,
        method_name: str,
        event_dict: EventDict,
    ) -> EventDict:
        for key, value in static.items():
            event_dict.setdefault(key, value)
        return event_dict

    return processor


def add_error_details(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """
    Replace ``exc_info`` with a compact ``exception`` mapping.

    VerseKit errors contribute their error code and severity, so a failed
    search can be filtered by code without parsing the message.
    """
    exc_info = event_dict.pop("exc_info", None)
    if exc_info is True:
        exc_info = sys.exc_info()
    if isinstance(exc_info, tuple):
        exc_info = exc_info[1]
    if not isinstance(exc_info, BaseException):
        return event_dict

    details = {
        "type": type(exc_info).__name__,
        "message": getattr(exc_info, "message", str(exc_info)),
    }
    error_code = getattr(exc_info, "error_code", None)
    if error_code is not None:
        details["code"] = error_code
        details["severity"] = exc_info.severity.value
    event_dict["exception"] = details
    return event_dict


def setup_logging(config: Optional[LoggingConfig] = None, force: bool = False) -> None:
    """
    Configure structlog and attach a stderr handler to the root logger.

    Args:
        config: Logging settings; read from the environment when omitted
        force: Reconfigure even if logging was already set up
    """
    global _configured

    if _configured and not force:
        return

    config = config or LoggingConfig()

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        service_context(config.service_name, config.environment),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if config.enable_trace_context:
        processors.append(add_trace_context)
    processors.extend([
        add_error_details,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.UnicodeDecoder(),
    ])
    if config.json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    _install_stderr_handler(config.numeric_level)
    _configured = True


def _install_stderr_handler(level: int) -> None:
    root = logging.getLogger()
    _remove_handlers(root)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))
    setattr(handler, HANDLER_MARK, True)
    root.addHandler(handler)
    root.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def _remove_handlers(root: logging.Logger) -> None:
    for handler in list(root.handlers):
        if getattr(handler, HANDLER_MARK, False):
            if not getattr(handler.stream, "closed", False):
                handler.flush()
            root.removeHandler(handler)
            handler.close()


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Logger for ``name`` (usually ``__name__``), configuring defaults on first use.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.debug("Chapter fetched", book="Genesis", chapter=1, count=31)
    """
    if not _configured:
        setup_logging()
    return structlog.get_logger(name)


def shutdown_logging() -> None:
    """Detach the handler installed by ``setup_logging``."""
    global _configured
    _remove_handlers(logging.getLogger())
    _configured = False


class LogContext:
    """
    Bind key/value pairs to every event logged inside the block.

    Values bound before the block are restored on exit.

    Example:
        >>> with LogContext(query="waters", scope="all"):
        ...     logger.info("Searching")
    """

    def __init__(self, **values: Any):
        self.values = values
        self._tokens: Mapping[str, Any] = {}

    def __enter__(self) -> "LogContext":
        self._tokens = structlog.contextvars.bind_contextvars(**self.values)
        return self

    def __exit__(self, *exc_info: Any) -> None:
        structlog.contextvars.reset_contextvars(**self._tokens)
        self._tokens = {}

    async def __aenter__(self) -> "LogContext":
        return self.__enter__()

    async def __aexit__(self, *exc_info: Any) -> None:
        self.__exit__(*exc_info)


def bind_context(**values: Any) -> None:
    """Bind values to all subsequent events in the current context."""
    structlog.contextvars.bind_contextvars(**values)


def clear_context() -> None:
    """Drop every bound context value."""
    structlog.contextvars.clear_contextvars()
