"""
VerseKit - Core Module

Foundational pieces shared by every other package:
- Unified error handling
- Shared type aliases and pagination constants
- Async timeout helper

Usage:
    from core import OutOfRangeError, MAX_LIMIT, NO_OFFSET
"""

from core.errors import (
    ContractViolationError,
    CrossBookCompressionError,
    EmptyInputError,
    ErrorContext,
    ErrorSeverity,
    InvalidAddressFormatError,
    OutOfRangeError,
    VerseKitConfigError,
    VerseKitError,
    VerseKitStorageError,
    VerseKitTimeoutError,
    VerseKitValidationError,
    classify_error,
    error_handler,
)
from core.types import MAX_LIMIT, NO_OFFSET, normalize_offset
from core.async_utils import gather_or_cancel, timeout_with_cleanup

__all__ = [
    "ContractViolationError",
    "CrossBookCompressionError",
    "EmptyInputError",
    "ErrorContext",
    "ErrorSeverity",
    "InvalidAddressFormatError",
    "OutOfRangeError",
    "VerseKitConfigError",
    "VerseKitError",
    "VerseKitStorageError",
    "VerseKitTimeoutError",
    "VerseKitValidationError",
    "classify_error",
    "error_handler",
    "MAX_LIMIT",
    "NO_OFFSET",
    "normalize_offset",
    "gather_or_cancel",
    "timeout_with_cleanup",
]
