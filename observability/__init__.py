"""
VerseKit - Observability Package

Structured logging and OpenTelemetry tracing.

Components:
- logging: structlog integration with trace context propagation
- tracing: OpenTelemetry spans with optional OTLP or console export

Usage:
    from observability import setup_observability, get_logger

    setup_observability(LoggingConfig(level="INFO"), TracingConfig(enabled=True))
    logger = get_logger(__name__)
"""
from typing import Optional

from .logging import (
    LogContext,
    LoggingConfig,
    bind_context,
    clear_context,
    get_logger,
    setup_logging,
    shutdown_logging,
)
from .tracing import (
    TracingConfig,
    create_span,
    get_tracer,
    setup_tracing,
    shutdown_tracing,
    span_decorator,
)


def setup_observability(
    logging_config: Optional[LoggingConfig] = None,
    tracing_config: Optional[TracingConfig] = None,
) -> None:
    """Configure logging and tracing in one call."""
    setup_logging(logging_config, force=logging_config is not None)
    setup_tracing(tracing_config)


def shutdown_observability() -> None:
    """Flush spans and close log handlers."""
    shutdown_tracing()
    shutdown_logging()


__all__ = [
    "LogContext",
    "LoggingConfig",
    "bind_context",
    "clear_context",
    "get_logger",
    "setup_logging",
    "shutdown_logging",
    "TracingConfig",
    "create_span",
    "get_tracer",
    "setup_tracing",
    "shutdown_tracing",
    "span_decorator",
    "setup_observability",
    "shutdown_observability",
]
