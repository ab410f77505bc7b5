"""
VerseKit - Storage Contract

The retrieval core talks to storage only through ``VerseRepository``. A
backend owns the physical layout and the full-text index; the core owns
addressing, scope resolution and result merging.

Contract:
    - ``fetch_by_ids`` returns verses in the caller's id order
    - ``fetch_by_range`` returns verses ascending by address
    - ``phrase_search`` returns exact-phrase matches ascending by address
    - ``word_search`` returns all-words matches in the index's relevance order
    - ``insert`` loads records atomically
    - ``limit``/``offset`` apply after ordering; a negative offset means 0

Every method is a coroutine and may raise ``VerseKitStorageError``.

Usage:
    from db.interfaces import VerseRepository, VerseRecord

    class InMemoryRepository(VerseRepository):
        ...
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence

from core.errors import VerseKitValidationError
from core.types import MAX_LIMIT, NO_OFFSET
from domain.address import Address
from domain.scope import SearchScope
from domain.verse import Verse


# =============================================================================
# RECORDS
# =============================================================================


@dataclass(frozen=True, slots=True)
class VerseRecord:
    """
    Raw row handed to ``insert``.

    id: canonical address text ("1:1:1")
    text: verse text
    """
    id: str
    text: str

    def __post_init__(self) -> None:
        Address.parse(self.id)
        if not isinstance(self.text, str):
            raise VerseKitValidationError(
                f"Verse text for {self.id!r} must be a string",
                field_name="text",
                actual_value=self.text,
            )

    @property
    def address(self) -> Address:
        return Address.parse(self.id)

    @property
    def sort_key(self) -> int:
        return self.address.sort_key

    def to_verse(self) -> Verse:
        return Verse(self.address, self.text)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "text": self.text}


# =============================================================================
# REPOSITORY
# =============================================================================


class VerseRepository(ABC):
    """
    Abstract storage backend for verses and their full-text index.
    """

    backend_name: str = "abstract"

    @abstractmethod
    async def fetch_by_ids(
        self,
        ids: Sequence[Address],
        limit: int = MAX_LIMIT,
        offset: int = NO_OFFSET,
    ) -> List[Verse]:
        """
        Fetch verses in the order of ``ids``.

        Unknown ids are omitted; repeated ids appear once, at their first
        position.
        """
        pass

    @abstractmethod
    async def fetch_by_range(
        self,
        start: Address,
        end: Address,
        limit: int = MAX_LIMIT,
        offset: int = NO_OFFSET,
    ) -> List[Verse]:
        """Fetch every stored verse with ``start <= address <= end``, ascending."""
        pass

    @abstractmethod
    async def phrase_search(
        self,
        text: str,
        scope: SearchScope,
        limit: int = MAX_LIMIT,
        offset: int = NO_OFFSET,
    ) -> List[Verse]:
        """Verses containing ``text`` as a contiguous phrase, ascending by address."""
        pass

    @abstractmethod
    async def word_search(
        self,
        text: str,
        scope: SearchScope,
        limit: int = MAX_LIMIT,
        offset: int = NO_OFFSET,
    ) -> List[Verse]:
        """
        Verses containing every word of ``text`` in any order, best match
        first. Exact-phrase matches are not excluded here.
        """
        pass

    @abstractmethod
    async def insert(self, records: Sequence[VerseRecord]) -> int:
        """
        Insert or replace records in a single transaction.

        Returns the number of records written.
        """
        pass

    @abstractmethod
    async def count(self) -> int:
        """Number of stored verses."""
        pass

    async def close(self) -> None:
        """Release backend resources."""
        return None

    async def __aenter__(self) -> "VerseRepository":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()
