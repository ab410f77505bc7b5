"""
VerseKit - References and Range Expansion

A ``Reference`` is an inclusive pair of addresses; ``expand`` turns such a
pair into every address it spans, in canonical order, consulting the catalog
for chapter and book boundaries:

- same chapter: the verses between the two addresses
- same book: the tail of the first chapter, every middle chapter in full,
  the head of the last chapter
- different books: the tail of the first book, every middle book in full,
  the head of the last book

Usage:
    ref = Reference(parse_address("1:1:30"), parse_address("1:3:3")).fixup()
    ids = [a.id for a in ref.addresses()]
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Union

from core.errors import VerseKitValidationError
from domain.address import Address
from domain.books import BIBLE, BookCatalog, BookName


def iter_expand(
    start: Address,
    end: Address,
    catalog: BookCatalog = BIBLE,
) -> Iterator[Address]:
    """
    Lazily yield every address from ``start`` to ``end`` inclusive.

    Raises:
        OutOfRangeError: If either address lies outside the catalog
        VerseKitValidationError: If ``start`` sorts after ``end``
    """
    start.validate(catalog)
    end.validate(catalog)
    if start > end:
        raise VerseKitValidationError(
            f"Cannot expand misordered range {start.id}..{end.id}; call fixup() first",
            field_name="reference",
            actual_value=(start.id, end.id),
        )
    return _walk(start, end, catalog)


def _walk(start: Address, end: Address, catalog: BookCatalog) -> Iterator[Address]:
    for book_index in range(start.book, end.book + 1):
        book = catalog.book(book_index)
        first_chapter = start.chapter if book_index == start.book else 1
        last_chapter = end.chapter if book_index == end.book else book.total_chapters
        for chapter in range(first_chapter, last_chapter + 1):
            if book_index == start.book and chapter == start.chapter:
                first_verse = start.verse
            else:
                first_verse = 1
            if book_index == end.book and chapter == end.chapter:
                last_verse = end.verse
            else:
                last_verse = book.total_verses(chapter)
            for verse in range(first_verse, last_verse + 1):
                yield Address(book_index, chapter, verse)


def expand(start: Address, end: Address, catalog: BookCatalog = BIBLE) -> List[Address]:
    """Materialized form of ``iter_expand``."""
    return list(iter_expand(start, end, catalog))


@dataclass(frozen=True)
class Reference:
    """
    Inclusive range between two addresses.

    The endpoints may be given in either order; ``fixup`` returns a copy
    with ``start <= end``.
    """
    start: Address
    end: Address

    @classmethod
    def single(cls, address: Address) -> "Reference":
        return cls(address, address)

    @classmethod
    def parse(cls, start: str, end: str) -> "Reference":
        return cls(Address.parse(start), Address.parse(end))

    @classmethod
    def for_book(
        cls,
        book: Union[int, str, BookName],
        catalog: BookCatalog = BIBLE,
    ) -> "Reference":
        entry = catalog.book(book)
        last_chapter = entry.total_chapters
        return cls(
            Address(entry.index, 1, 1),
            Address(entry.index, last_chapter, entry.total_verses(last_chapter)),
        )

    @classmethod
    def entire(cls, catalog: BookCatalog = BIBLE) -> "Reference":
        return cls(Address.start(catalog), Address.end(catalog))

    @property
    def is_ordered(self) -> bool:
        return self.start <= self.end

    def fixup(self) -> "Reference":
        if self.is_ordered:
            return self
        return Reference(self.end, self.start)

    def addresses(self, catalog: BookCatalog = BIBLE) -> List[Address]:
        """Expand the (fixed-up) reference into its addresses."""
        ordered = self.fixup()
        return expand(ordered.start, ordered.end, catalog)

    def __str__(self) -> str:
        return f"{self.start.id}-{self.end.id}"


@dataclass(frozen=True)
class ChapterReference:
    """One chapter of one book."""
    book: int
    chapter: int

    @classmethod
    def resolve(
        cls,
        book: Union[int, str, BookName],
        chapter: int,
        catalog: BookCatalog = BIBLE,
    ) -> "ChapterReference":
        """
        Build a validated chapter reference from a book key.

        Raises:
            OutOfRangeError: If the book is unknown or the chapter is outside it
        """
        entry = catalog.book(book)
        entry.total_verses(chapter)
        return cls(entry.index, chapter)

    def total_verses(self, catalog: BookCatalog = BIBLE) -> int:
        return catalog.book(self.book).total_verses(self.chapter)

    def start_address(self) -> Address:
        return Address(self.book, self.chapter, 1)

    def end_address(self, catalog: BookCatalog = BIBLE) -> Address:
        return Address(self.book, self.chapter, self.total_verses(catalog))

    def reference(self, catalog: BookCatalog = BIBLE) -> Reference:
        return Reference(self.start_address(), self.end_address(catalog))

    def addresses(self, catalog: BookCatalog = BIBLE) -> List[Address]:
        return self.reference(catalog).addresses(catalog)
