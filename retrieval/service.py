"""
VerseKit - Retrieval Service

Entry point for callers: resolves chapter, book and id selectors into
address bounds through the catalog and delegates to the storage contract,
or to ``SearchRanker`` for free-text queries.

Usage:
    service = await RetrievalService.from_config(get_config())
    chapter = await service.fetch_chapter("Genesis", 1)
    hits = await service.search("still waters", limit=10)
    await service.close()
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, List, Optional, Sequence, Union

from core.types import MAX_LIMIT, NO_OFFSET
from db.interfaces import VerseRecord, VerseRepository
from domain.address import Address
from domain.books import BIBLE, BookCatalog, BookName
from domain.reference import ChapterReference, Reference
from domain.scope import AddressList, AddressRange, EntireCorpus, SearchScope, to_scope
from domain.verse import Verse
from observability.logging import get_logger
from observability.tracing import span_decorator
from retrieval.ranker import SearchRanker

if TYPE_CHECKING:
    from config import Config

logger = get_logger(__name__)

BookKey = Union[int, str, BookName]
AddressLike = Union[Address, str]
ScopeLike = Union[SearchScope, Reference, Iterable[AddressLike], None]


class RetrievalService:
    """
    Addressing-aware facade over a ``VerseRepository``.

    Every selector is validated against the catalog before storage is
    consulted; malformed ids and unknown books or chapters fail closed.
    """

    def __init__(
        self,
        repository: VerseRepository,
        catalog: BookCatalog = BIBLE,
        query_timeout_seconds: Optional[float] = None,
    ):
        self.repository = repository
        self.catalog = catalog
        self.ranker = SearchRanker(repository, timeout_seconds=query_timeout_seconds)

    @classmethod
    async def from_config(cls, config: "Config") -> "RetrievalService":
        """Build a service over the configured SQLite store."""
        from db.sqlite import SQLiteVerseStore

        store = await SQLiteVerseStore.create(config.database.url, echo=config.database.echo)
        return cls(store, query_timeout_seconds=config.search.query_timeout_seconds)

    async def close(self) -> None:
        await self.repository.close()

    async def __aenter__(self) -> "RetrievalService":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve_address(self, value: AddressLike) -> Address:
        """Parse (if needed) and validate one address."""
        address = Address.parse(value) if isinstance(value, str) else value
        return address.validate(self.catalog)

    def resolve_addresses(self, values: Iterable[AddressLike]) -> List[Address]:
        return [self.resolve_address(value) for value in values]

    def resolve_scope(self, scope: ScopeLike) -> SearchScope:
        """Validate addresses carried by the scope and fix up ranges."""
        if isinstance(scope, (str, bytes)):
            raise TypeError(f"Unsupported search scope: {scope!r}")
        if scope is None or isinstance(scope, (EntireCorpus, AddressList, AddressRange, Reference)):
            resolved = to_scope(scope)
        else:
            resolved = AddressList.of(self.resolve_addresses(scope))

        if isinstance(resolved, AddressList):
            for address in resolved.addresses:
                address.validate(self.catalog)
        elif isinstance(resolved, AddressRange):
            resolved.reference.start.validate(self.catalog)
            resolved.reference.end.validate(self.catalog)
        return resolved

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    @span_decorator("fetch_chapter", record_args=True, record_result=True)
    async def fetch_chapter(
        self,
        book: BookKey,
        chapter: int,
        limit: int = MAX_LIMIT,
        offset: int = NO_OFFSET,
    ) -> List[Verse]:
        """
        Fetch one chapter in address order.

        Raises:
            OutOfRangeError: If the book is unknown or the chapter is outside it
        """
        reference = ChapterReference.resolve(book, chapter, self.catalog).reference(self.catalog)
        verses = await self.repository.fetch_by_range(reference.start, reference.end, limit, offset)
        logger.debug("Chapter fetched", book=str(book), chapter=chapter, count=len(verses))
        return verses

    @span_decorator("fetch_book", record_args=True, record_result=True)
    async def fetch_book(
        self,
        book: BookKey,
        limit: int = MAX_LIMIT,
        offset: int = NO_OFFSET,
    ) -> List[Verse]:
        """Fetch a whole book in address order."""
        reference = Reference.for_book(book, self.catalog)
        verses = await self.repository.fetch_by_range(reference.start, reference.end, limit, offset)
        logger.debug("Book fetched", book=str(book), count=len(verses))
        return verses

    @span_decorator("fetch_reference", record_args=True, record_result=True)
    async def fetch_reference(
        self,
        reference: Reference,
        limit: int = MAX_LIMIT,
        offset: int = NO_OFFSET,
    ) -> List[Verse]:
        """Fetch every verse between the two endpoints, in either order."""
        ordered = reference.fixup()
        start = ordered.start.validate(self.catalog)
        end = ordered.end.validate(self.catalog)
        return await self.repository.fetch_by_range(start, end, limit, offset)

    @span_decorator("fetch_by_ids", record_result=True)
    async def fetch_by_ids(
        self,
        ids: Sequence[AddressLike],
        limit: int = MAX_LIMIT,
        offset: int = NO_OFFSET,
    ) -> List[Verse]:
        """Fetch the given verses in the caller's order."""
        addresses = self.resolve_addresses(ids)
        if not addresses:
            return []
        return await self.repository.fetch_by_ids(addresses, limit, offset)

    # ------------------------------------------------------------------
    # Searching
    # ------------------------------------------------------------------

    async def search(
        self,
        query: str,
        scope: ScopeLike = None,
        limit: int = MAX_LIMIT,
        offset: int = NO_OFFSET,
    ) -> List[Verse]:
        """Ranked search; a ``Reference`` scope may be given in either order."""
        if not query or not query.strip():
            return []
        return await self.ranker.search(query, self.resolve_scope(scope), limit, offset)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load(self, records: Sequence[VerseRecord]) -> int:
        """Bulk-insert records (single transaction)."""
        return await self.repository.insert(records)
