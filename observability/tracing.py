"""
VerseKit - OpenTelemetry Tracing

Spans around search, fetch and load operations. Instrumented code talks only
to the OpenTelemetry API, so every span is a no-op until ``setup_tracing``
installs an SDK provider.

Exporters:
- OTLP over gRPC (Jaeger, Tempo or any collector), on by default once enabled
- Console, for local debugging (OTEL_CONSOLE_EXPORT=true)

Usage:
    from observability.tracing import setup_tracing, span_decorator

    setup_tracing(TracingConfig(enabled=True, console_export=True))

    @span_decorator("search", record_args=True, record_result=True)
    async def search(query: str) -> List[Verse]:
        ...
"""
from __future__ import annotations

import functools
import inspect
import os
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, Mapping, Optional, TypeVar, ParamSpec

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource, SERVICE_NAME, SERVICE_VERSION
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SimpleSpanProcessor,
)
from opentelemetry.sdk.trace.sampling import (
    ALWAYS_OFF,
    ALWAYS_ON,
    ParentBased,
    Sampler,
    TraceIdRatioBased,
)
from opentelemetry.trace import Span, SpanKind

P = ParamSpec("P")
T = TypeVar("T")

TRACER_NAME = "versekit"
VERSION = "1.0.0"

# Longer lists are recorded as a count; longer strings are truncated
MAX_LIST_ATTRIBUTE = 10
MAX_STRING_ATTRIBUTE = 200

_tracer_provider: Optional[TracerProvider] = None


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() == "true"


@dataclass
class TracingConfig:
    """Settings for ``setup_tracing``; tracing is off unless VERSEKIT_TRACING_ENABLED=true."""

    enabled: bool = field(default_factory=lambda: _env_flag("VERSEKIT_TRACING_ENABLED", "false"))
    service_name: str = "versekit"
    otlp_endpoint: str = field(
        default_factory=lambda: os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://localhost:4317")
    )
    otlp_export: bool = field(default_factory=lambda: _env_flag("VERSEKIT_OTLP_EXPORT", "true"))
    console_export: bool = field(default_factory=lambda: _env_flag("OTEL_CONSOLE_EXPORT", "false"))
    sample_rate: float = field(
        default_factory=lambda: float(os.getenv("OTEL_SAMPLE_RATE", "1.0"))
    )
    environment: str = field(
        default_factory=lambda: os.getenv("VERSEKIT_ENV", "development")
    )

    def sampler(self) -> Sampler:
        if self.sample_rate <= 0.0:
            return ALWAYS_OFF
        if self.sample_rate >= 1.0:
            return ALWAYS_ON
        return ParentBased(root=TraceIdRatioBased(self.sample_rate))


def setup_tracing(config: Optional[TracingConfig] = None) -> Optional[TracerProvider]:
    """
    Install an SDK tracer provider, once per process.

    Returns None when tracing is disabled, leaving the API's no-op provider
    in place. Later calls return the provider installed first.
    """
    global _tracer_provider

    if _tracer_provider is not None:
        return _tracer_provider

    config = config or TracingConfig()
    if not config.enabled:
        return None

    provider = TracerProvider(
        resource=Resource.create({
            SERVICE_NAME: config.service_name,
            SERVICE_VERSION: VERSION,
            "deployment.environment": config.environment,
        }),
        sampler=config.sampler(),
    )
    if config.otlp_export:
        exporter = OTLPSpanExporter(endpoint=config.otlp_endpoint, insecure=True)
        provider.add_span_processor(BatchSpanProcessor(exporter))
    if config.console_export:
        provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(provider)
    _tracer_provider = provider
    return provider


def get_tracer(name: str = TRACER_NAME, version: str = VERSION) -> trace.Tracer:
    """Tracer from the global provider (no-op until ``setup_tracing``)."""
    return trace.get_tracer(name, version)


def shutdown_tracing() -> None:
    """Flush pending spans and forget the installed provider."""
    global _tracer_provider
    if _tracer_provider is not None:
        _tracer_provider.shutdown()
        _tracer_provider = None


def set_attributes(span: Span, attributes: Mapping[str, Any]) -> None:
    """Set span attributes, coercing values OpenTelemetry cannot store."""
    for key, value in attributes.items():
        if value is None:
            continue
        if isinstance(value, (str, bool, int, float)):
            span.set_attribute(key, value)
        elif isinstance(value, (list, tuple)):
            if len(value) <= MAX_LIST_ATTRIBUTE:
                span.set_attribute(key, [str(item) for item in value])
            else:
                span.set_attribute(f"{key}.count", len(value))
        else:
            span.set_attribute(key, str(value)[:MAX_STRING_ATTRIBUTE])


@contextmanager
def create_span(
    name: str,
    kind: SpanKind = SpanKind.INTERNAL,
    attributes: Optional[Mapping[str, Any]] = None,
    tracer_name: str = TRACER_NAME,
) -> Iterator[Span]:
    """
    Run a block inside a span; an exception escaping the block marks it failed.

    Example:
        >>> with create_span("fetch_chapter", attributes={"book": "Genesis"}) as span:
        ...     verses = await repository.fetch_by_range(start, end)
        ...     span.set_attribute("result.count", len(verses))
    """
    with get_tracer(tracer_name).start_as_current_span(name, kind=kind) as span:
        set_attributes(span, attributes or {})
        yield span


def _call_arguments(func: Callable, args: tuple, kwargs: dict) -> Dict[str, Any]:
    names = list(inspect.signature(func).parameters)
    values = dict(zip(names, args))
    values.update(kwargs)
    return {f"arg.{key}": value for key, value in values.items() if key != "self"}


def _result_attributes(result: Any) -> Dict[str, Any]:
    if isinstance(result, (list, tuple)):
        return {"result.count": len(result)}
    if isinstance(result, (str, int, float, bool)):
        return {"result.value": result}
    return {}


def span_decorator(
    name: Optional[str] = None,
    kind: SpanKind = SpanKind.INTERNAL,
    attributes: Optional[Mapping[str, Any]] = None,
    record_args: bool = False,
    record_result: bool = False,
) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """
    Wrap each call of a sync or async function in a span.

    Args:
        name: Span name (defaults to the function's qualified name)
        kind: Span kind
        attributes: Static attributes set on every span
        record_args: Record call arguments as ``arg.<name>`` attributes
        record_result: Record the result's length, or the value of a scalar
    """

    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        span_name = name or func.__qualname__
        tracer = get_tracer(func.__module__)

        def opened(span: Span, args: tuple, kwargs: dict) -> None:
            set_attributes(span, attributes or {})
            if record_args:
                set_attributes(span, _call_arguments(func, args, kwargs))

        def finished(span: Span, result: Any) -> None:
            if record_result:
                set_attributes(span, _result_attributes(result))

        if inspect.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
                with tracer.start_as_current_span(span_name, kind=kind) as span:
                    opened(span, args, kwargs)
                    result = await func(*args, **kwargs)
                    finished(span, result)
                    return result

            return async_wrapper  # type: ignore[return-value]

        @functools.wraps(func)
        def sync_wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            with tracer.start_as_current_span(span_name, kind=kind) as span:
                opened(span, args, kwargs)
                result = func(*args, **kwargs)
                finished(span, result)
                return result

        return sync_wrapper

    return decorator
