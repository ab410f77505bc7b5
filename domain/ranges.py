"""
VerseKit - Range Compression and Citation Titles

``compress`` turns an unordered set of addresses from one book into the
minimal list of maximal contiguous runs, walking the book's canonical
sequence so that runs continue across chapter boundaries.
``share_title`` renders those runs as a citation such as
``"Genesis 1:30-2:1,3-5,25-3:2,24,4:2"``.
"""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Deque, Iterable, List, Optional, Sequence

from core.errors import CrossBookCompressionError, EmptyInputError
from domain.address import Address
from domain.books import BIBLE, BookCatalog
from domain.reference import expand
from observability.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ContiguousRange:
    """A gap-free run of verses inside one book."""
    start_book: int
    end_book: int
    start_chapter: int
    end_chapter: int
    start_verse: int
    end_verse: int

    @classmethod
    def between(cls, start: Address, end: Address) -> "ContiguousRange":
        return cls(
            start_book=start.book,
            end_book=end.book,
            start_chapter=start.chapter,
            end_chapter=end.chapter,
            start_verse=start.verse,
            end_verse=end.verse,
        )

    @property
    def start(self) -> Address:
        return Address(self.start_book, self.start_chapter, self.start_verse)

    @property
    def end(self) -> Address:
        return Address(self.end_book, self.end_chapter, self.end_verse)

    @property
    def spans_chapters(self) -> bool:
        return self.start_chapter != self.end_chapter

    @property
    def is_single_verse(self) -> bool:
        return self.start == self.end

    def addresses(self, catalog: BookCatalog = BIBLE) -> List[Address]:
        return expand(self.start, self.end, catalog)

    def segment(self, running_chapter: int) -> str:
        """
        Citation segment relative to the chapter the previous segment ended in.

        Only single-chapter segments repeat their chapter; a chapter-spanning
        segment names just the chapter it ends in.
        """
        if self.spans_chapters:
            return f"{self.start_verse}-{self.end_chapter}:{self.end_verse}"
        prefix = f"{self.start_chapter}:" if self.start_chapter != running_chapter else ""
        if self.start_verse == self.end_verse:
            return f"{prefix}{self.start_verse}"
        return f"{prefix}{self.start_verse}-{self.end_verse}"


def single_book(addresses: Sequence[Address], what: str) -> int:
    if not addresses:
        raise EmptyInputError(f"Cannot {what} an empty selection")
    books = sorted({address.book for address in addresses})
    if len(books) != 1:
        raise CrossBookCompressionError(
            f"Cannot {what} a selection spanning books {books}",
            books=books,
        )
    return books[0]


def compress(
    addresses: Iterable[Address],
    catalog: BookCatalog = BIBLE,
) -> List[ContiguousRange]:
    """
    Group addresses of one book into maximal contiguous ranges.

    Raises:
        EmptyInputError: If no addresses are given
        CrossBookCompressionError: If the addresses belong to several books
        OutOfRangeError: If an address lies outside the catalog
    """
    selected = sorted(set(addresses))
    book_index = single_book(selected, "compress")
    for address in selected:
        address.validate(catalog)

    if len(selected) == 1:
        return [ContiguousRange.between(selected[0], selected[0])]

    book = catalog.book(book_index)
    last_chapter = book.total_chapters
    canonical = expand(
        selected[0],
        Address(book_index, last_chapter, book.total_verses(last_chapter)),
        catalog,
    )

    pending: Deque[Address] = deque(selected)
    ranges: List[ContiguousRange] = []
    open_start: Optional[Address] = None
    open_end: Optional[Address] = None

    for current in canonical:
        if pending and current == pending[0]:
            pending.popleft()
            if open_start is None:
                open_start = current
            open_end = current
        elif not pending:
            break
        elif open_start is not None and open_end is not None:
            ranges.append(ContiguousRange.between(open_start, open_end))
            open_start = open_end = None

    if open_start is not None and open_end is not None:
        ranges.append(ContiguousRange.between(open_start, open_end))

    logger.debug("Compressed selection", addresses=len(selected), ranges=len(ranges))
    return ranges


def share_title(ranges: Sequence[ContiguousRange], catalog: BookCatalog = BIBLE) -> str:
    """
    Render ranges of one book as a citation title.

    The chapter is repeated only where a segment starts in a chapter other
    than the one the previous segment ended in.
    """
    if not ranges:
        raise EmptyInputError("Cannot format an empty range list")
    books = sorted({r.start_book for r in ranges} | {r.end_book for r in ranges})
    if len(books) != 1:
        raise CrossBookCompressionError(
            f"Cannot format ranges spanning books {books}",
            books=books,
        )

    first = ranges[0]
    running_chapter = first.start_chapter
    segments: List[str] = []
    for contiguous in ranges:
        segments.append(contiguous.segment(running_chapter))
        running_chapter = contiguous.end_chapter

    book_name = catalog.book(first.start_book).name
    return f"{book_name} {first.start_chapter}:{','.join(segments)}"


def citation(addresses: Iterable[Address], catalog: BookCatalog = BIBLE) -> str:
    """``share_title(compress(addresses))``."""
    return share_title(compress(addresses, catalog), catalog)
