"""
VerseKit - Error Hierarchy

Every failure raised by the addressing core, the retrieval layer and the
storage backend is a ``VerseKitError`` carrying a stable error code, a
severity, an optional ``ErrorContext`` and the exception it wraps.

Malformed or out-of-range input is a ``VerseKitValidationError`` (also a
``ValueError``). Misuse of an API contract, such as compressing an empty or
multi-book address set, is a ``ContractViolationError`` (also an
``AssertionError``). Driver failures become ``VerseKitStorageError`` at the
backend boundary through ``error_handler``.

An error created while a span is recording marks that span as failed and
attaches its code, severity and component.
"""

from __future__ import annotations

import functools
import inspect
import traceback
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import (
    Any,
    Callable,
    Dict,
    List,
    Optional,
    Tuple,
    Type,
    TypeVar,
    ParamSpec,
)

import structlog
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

T = TypeVar("T")
P = ParamSpec("P")

logger = structlog.get_logger("versekit.core.errors")


class ErrorSeverity(Enum):
    """How urgently an error needs attention."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ErrorContext:
    """Where an error happened: operation, component, address and trace ids."""

    operation: str
    component: str
    address: Optional[str] = None
    trace_id: Optional[str] = None
    span_id: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    stack_trace: Optional[str] = None
    timestamp: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["timestamp"] = self.timestamp.isoformat()
        return data

    @classmethod
    def from_current_span(
        cls,
        operation: str,
        component: str,
        **kwargs: Any,
    ) -> "ErrorContext":
        """Context tied to the active span, with the traceback being handled."""
        span_context = trace.get_current_span().get_span_context()
        if span_context.is_valid:
            kwargs.setdefault("trace_id", trace.format_trace_id(span_context.trace_id))
            kwargs.setdefault("span_id", trace.format_span_id(span_context.span_id))
        kwargs.setdefault("stack_trace", traceback.format_exc())
        return cls(operation=operation, component=component, **kwargs)


class VerseKitError(Exception):
    """
    Base class of every VerseKit error.

    Subclasses set ``error_code`` and ``default_severity``; ``recoverable``
    tells callers whether retrying the same call may succeed.
    """

    error_code: str = "VERSEKIT_ERROR"
    default_severity: ErrorSeverity = ErrorSeverity.ERROR

    def __init__(
        self,
        message: str,
        context: Optional[ErrorContext] = None,
        severity: Optional[ErrorSeverity] = None,
        cause: Optional[BaseException] = None,
        recoverable: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.context = context
        self.severity = severity or self.default_severity
        self.cause = cause
        self.recoverable = recoverable
        self.timestamp = _utcnow()

        self.record_on_span(trace.get_current_span())

    def record_on_span(self, span: trace.Span) -> None:
        """Mark ``span`` as failed with this error if it is recording."""
        if not span.is_recording():
            return
        span.set_status(Status(StatusCode.ERROR, self.message))
        span.record_exception(self)
        span.set_attributes(self.span_attributes())

    def span_attributes(self) -> Dict[str, Any]:
        attributes: Dict[str, Any] = {
            "error.code": self.error_code,
            "error.severity": self.severity.value,
            "error.recoverable": self.recoverable,
        }
        if self.context is not None:
            attributes["error.component"] = self.context.component
            attributes["error.operation"] = self.context.operation
        return attributes

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready form for logs and diagnostics."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "severity": self.severity.value,
            "recoverable": self.recoverable,
            "timestamp": self.timestamp.isoformat(),
            "context": None if self.context is None else self.context.to_dict(),
            "cause": None if self.cause is None else str(self.cause),
        }

    def __str__(self) -> str:
        text = f"[{self.error_code}] {self.message}"
        if self.context is not None:
            text += f" (component: {self.context.component})"
        if self.cause is not None:
            text += f" [caused by: {self.cause}]"
        return text

    def with_context(self, **metadata: Any) -> "VerseKitError":
        """Attach metadata, creating a context when the error has none."""
        if self.context is None:
            self.context = ErrorContext(operation="unknown", component="unknown")
        self.context.metadata.update(metadata)
        return self


class VerseKitConfigError(VerseKitError):
    """A setting is missing, malformed or unsupported."""

    error_code = "CONFIG_ERROR"
    default_severity = ErrorSeverity.CRITICAL

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        actual_value: Any = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.config_key = config_key
        self.actual_value = actual_value


class VerseKitStorageError(VerseKitError):
    """Failures reported by a storage backend."""

    error_code = "STORAGE_ERROR"
    default_severity = ErrorSeverity.ERROR

    def __init__(
        self,
        message: str,
        backend: Optional[str] = None,
        operation: Optional[str] = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.backend = backend
        self.operation = operation


class VerseKitTimeoutError(VerseKitError, TimeoutError):
    """A bounded operation did not finish in time."""

    error_code = "TIMEOUT_ERROR"
    default_severity = ErrorSeverity.WARNING

    def __init__(
        self,
        message: str,
        timeout_seconds: Optional[float] = None,
        operation: Optional[str] = None,
        **kwargs: Any,
    ):
        super().__init__(message, recoverable=True, **kwargs)
        self.timeout_seconds = timeout_seconds
        self.operation_name = operation


class VerseKitValidationError(VerseKitError, ValueError):
    """Input that cannot be accepted."""

    error_code = "VALIDATION_ERROR"
    default_severity = ErrorSeverity.WARNING

    def __init__(
        self,
        message: str,
        field_name: Optional[str] = None,
        expected_format: Optional[str] = None,
        actual_value: Any = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.field_name = field_name
        self.expected_format = expected_format
        self.actual_value = actual_value


class InvalidAddressFormatError(VerseKitValidationError):
    """Address text is not three positive integers separated by ':'."""

    error_code = "INVALID_ADDRESS_FORMAT"

    def __init__(self, message: str, **kwargs: Any):
        kwargs.setdefault("field_name", "address")
        kwargs.setdefault("expected_format", "book:chapter:verse")
        super().__init__(message, **kwargs)


class OutOfRangeError(VerseKitValidationError):
    """Book, chapter or verse outside the catalog bounds."""

    error_code = "OUT_OF_RANGE"


class ContractViolationError(VerseKitError, AssertionError):
    """An API was called in a way its contract forbids."""

    error_code = "CONTRACT_VIOLATION"
    default_severity = ErrorSeverity.CRITICAL


class EmptyInputError(ContractViolationError):
    """An operation that requires at least one address received none."""

    error_code = "EMPTY_INPUT"


class CrossBookCompressionError(ContractViolationError):
    """Range compression received addresses from more than one book."""

    error_code = "CROSS_BOOK_COMPRESSION"

    def __init__(
        self,
        message: str,
        books: Optional[List[int]] = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.books = books or []


# First match wins; TimeoutError and ConnectionError are also OSErrors
_CLASSIFICATION: Tuple[Tuple[Type[BaseException], Type[VerseKitError]], ...] = (
    (TimeoutError, VerseKitTimeoutError),
    (ConnectionError, VerseKitStorageError),
    (OSError, VerseKitStorageError),
    (ValueError, VerseKitValidationError),
)


def classify_error(error: BaseException) -> VerseKitError:
    """Wrap a foreign exception in the closest VerseKitError type."""
    if isinstance(error, VerseKitError):
        return error
    versekit_type = next(
        (target for source, target in _CLASSIFICATION if isinstance(error, source)),
        VerseKitError,
    )
    return versekit_type(str(error), cause=error)


def error_handler(
    *error_types: Type[Exception],
    reraise_as: Type[VerseKitError] = VerseKitStorageError,
    severity: ErrorSeverity = ErrorSeverity.ERROR,
    log_error: bool = True,
    **error_kwargs: Any,
) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """
    Decorator converting foreign exceptions into a VerseKitError.

    VerseKitError instances raised by the wrapped callable pass through
    untouched; any other instance of ``error_types`` is logged and re-raised
    as ``reraise_as`` with the original exception chained as its cause.

    Args:
        error_types: Exception types to convert (default: Exception)
        reraise_as: VerseKitError subclass to raise
        severity: Severity attached to the converted error
        log_error: Whether to log the error
        error_kwargs: Extra keyword arguments for ``reraise_as``

    Usage:
        @error_handler(SQLAlchemyError, reraise_as=VerseKitStorageError, backend="sqlite")
        async def fetch(...):
            ...
    """
    if not error_types:
        error_types = (Exception,)

    def convert(func: Callable[..., Any], e: Exception) -> VerseKitError:
        if log_error:
            logger.error(
                "Operation failed",
                operation=func.__qualname__,
                error_type=type(e).__name__,
                error=str(e),
            )
        return reraise_as(
            message=f"{func.__name__} failed: {e}",
            context=ErrorContext.from_current_span(
                operation=func.__name__,
                component=func.__module__,
            ),
            cause=e,
            severity=severity,
            **error_kwargs,
        )

    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        @functools.wraps(func)
        def sync_wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            try:
                return func(*args, **kwargs)
            except VerseKitError:
                raise
            except error_types as e:
                raise convert(func, e) from e

        @functools.wraps(func)
        async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            try:
                return await func(*args, **kwargs)
            except VerseKitError:
                raise
            except error_types as e:
                raise convert(func, e) from e

        if inspect.iscoroutinefunction(func):
            return async_wrapper  # type: ignore[return-value]
        return sync_wrapper

    return decorator
