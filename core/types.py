"""
VerseKit - Centralized Type Definitions

Provides type aliases, constants and Protocol classes used throughout the
system.

Usage:
    from core.types import AddressId, MAX_LIMIT, NO_OFFSET

    def fetch(ids: List[AddressId], limit: int = MAX_LIMIT) -> ...:
        ...
"""
from __future__ import annotations

import re
import sys
from typing import Any, Dict, Protocol, runtime_checkable

# =============================================================================
# TYPE ALIASES
# =============================================================================

AddressId = str  # Format: "BOOK:CHAPTER:VERSE" (e.g., "1:1:1")
SortKey = int  # Storage identifier derived from an address (e.g., 1001001)


# =============================================================================
# CONSTANTS
# =============================================================================

# Pagination defaults: "no limit" and "no offset" (treated as zero).
MAX_LIMIT: int = sys.maxsize
NO_OFFSET: int = -sys.maxsize - 1

# Chapters and verses are zero-padded to three digits in the sort key.
SORT_KEY_PAD_WIDTH: int = 3
MAX_UNIT_NUMBER: int = 10 ** SORT_KEY_PAD_WIDTH - 1

ADDRESS_SEPARATOR = ":"
ADDRESS_PATTERN = re.compile(r"[0-9]+:[0-9]+:[0-9]+")


# =============================================================================
# PROTOCOLS
# =============================================================================


@runtime_checkable
class Serializable(Protocol):
    """Protocol for objects that can be serialized to a dict."""

    def to_dict(self) -> Dict[str, Any]:
        ...


def normalize_offset(offset: int) -> int:
    """Negative offsets (including NO_OFFSET) mean "no skip"."""
    return max(offset, 0)
