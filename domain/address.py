"""
VerseKit - Verse Addresses

An ``Address`` identifies one verse as a (book, chapter, verse) triple of
1-based integers. Addresses are totally ordered by that triple (numerically,
so book 10 sorts after book 9), encode to the canonical ``"b:c:v"`` string and
map to an integer sort key that is also the physical storage identifier.

Sort key: the book number unpadded followed by chapter and verse each padded
to three digits, read as one integer (``1:1:1`` -> ``1001001``,
``19:119:176`` -> ``19119176``).

Usage:
    addr = parse_address("43:3:16")
    addr.book_chapter_verse()   # "John 3:16"
    addr.sort_key               # 43003016
"""
from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, Tuple

from core.errors import InvalidAddressFormatError, OutOfRangeError
from core.types import (
    ADDRESS_PATTERN,
    ADDRESS_SEPARATOR,
    MAX_UNIT_NUMBER,
    SORT_KEY_PAD_WIDTH,
    AddressId,
    SortKey,
)
from domain.books import BIBLE, Book, BookCatalog

_UNIT_FACTOR = 10 ** SORT_KEY_PAD_WIDTH


@lru_cache(maxsize=4096)
def _split(text: str) -> Tuple[int, int, int]:
    """Split canonical address text into its three integers."""
    stripped = text.strip()
    if not ADDRESS_PATTERN.fullmatch(stripped):
        raise InvalidAddressFormatError(
            f"Invalid address format: {text!r} (expected book:chapter:verse)",
            actual_value=text,
        )
    book, chapter, verse = (int(part) for part in stripped.split(ADDRESS_SEPARATOR))
    if book < 1 or chapter < 1 or verse < 1:
        raise InvalidAddressFormatError(
            f"Invalid address format: {text!r} (components must be positive)",
            actual_value=text,
        )
    return book, chapter, verse


@dataclass(frozen=True, order=True)
class Address:
    """
    Immutable verse address.

    Construction checks only that every component is a positive integer
    small enough for the sort key; use ``validate`` to check the address
    against a catalog.
    """
    book: int
    chapter: int
    verse: int

    def __post_init__(self) -> None:
        for name in ("book", "chapter", "verse"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidAddressFormatError(
                    f"Address {name} must be an integer, got {value!r}",
                    field_name=name,
                    actual_value=value,
                )
            if value < 1:
                raise OutOfRangeError(
                    f"Address {name} must be >= 1, got {value}",
                    field_name=name,
                    actual_value=value,
                )
        for name in ("chapter", "verse"):
            value = getattr(self, name)
            if value > MAX_UNIT_NUMBER:
                raise OutOfRangeError(
                    f"Address {name} {value} exceeds {MAX_UNIT_NUMBER}",
                    field_name=name,
                    actual_value=value,
                )

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def parse(cls, text: str) -> "Address":
        """
        Parse ``"book:chapter:verse"``.

        Raises:
            InvalidAddressFormatError: If the text is not three positive
                integers separated by ':'
        """
        if not isinstance(text, str):
            raise InvalidAddressFormatError(
                f"Address must be a string, got {type(text).__name__}",
                actual_value=text,
            )
        return cls(*_split(text))

    @classmethod
    def from_sort_key(cls, key: SortKey) -> "Address":
        """Inverse of ``sort_key``."""
        if key < _UNIT_FACTOR ** 2:
            raise InvalidAddressFormatError(
                f"Invalid sort key: {key}",
                field_name="sort_key",
                actual_value=key,
            )
        rest, verse = divmod(key, _UNIT_FACTOR)
        book, chapter = divmod(rest, _UNIT_FACTOR)
        return cls(book, chapter, verse)

    @classmethod
    def start(cls, catalog: BookCatalog = BIBLE) -> "Address":
        """First address of the corpus."""
        first = catalog.books[0]
        return cls(first.index, 1, 1)

    @classmethod
    def end(cls, catalog: BookCatalog = BIBLE) -> "Address":
        """Last address of the corpus."""
        last = catalog.books[-1]
        return cls(last.index, last.total_chapters, last.total_verses(last.total_chapters))

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self, catalog: BookCatalog = BIBLE) -> "Address":
        """
        Check the address against the catalog and return it unchanged.

        Raises:
            OutOfRangeError: If book, chapter or verse is outside the catalog
        """
        book = catalog.book(self.book)
        verses = book.total_verses(self.chapter)
        if self.verse > verses:
            raise OutOfRangeError(
                f"Verse {self.verse} out of range for {book.name} {self.chapter} (1-{verses})",
                field_name="verse",
                actual_value=self.verse,
            )
        return self

    def is_valid(self, catalog: BookCatalog = BIBLE) -> bool:
        try:
            self.validate(catalog)
        except OutOfRangeError:
            return False
        return True

    # ------------------------------------------------------------------
    # Encodings
    # ------------------------------------------------------------------

    @property
    def id(self) -> AddressId:
        return f"{self.book}:{self.chapter}:{self.verse}"

    @property
    def sort_key(self) -> SortKey:
        return int(
            f"{self.book}"
            f"{self.chapter:0{SORT_KEY_PAD_WIDTH}d}"
            f"{self.verse:0{SORT_KEY_PAD_WIDTH}d}"
        )

    def get_book(self, catalog: BookCatalog = BIBLE) -> Book:
        return catalog.book(self.book)

    def book_name(self, catalog: BookCatalog = BIBLE) -> str:
        return catalog.book(self.book).name

    def book_chapter_verse(self, catalog: BookCatalog = BIBLE) -> str:
        """Display form, e.g. ``"Genesis 1:1"``."""
        return f"{self.book_name(catalog)} {self.chapter_verse()}"

    def chapter_verse(self) -> str:
        return f"{self.chapter}:{self.verse}"

    def is_last_in_chapter(self, catalog: BookCatalog = BIBLE) -> bool:
        return self.verse == catalog.book(self.book).total_verses(self.chapter)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "book": self.book,
            "chapter": self.chapter,
            "verse": self.verse,
            "sort_key": self.sort_key,
        }

    def __str__(self) -> str:
        return self.id


def parse_address(text: str, catalog: BookCatalog = BIBLE) -> Address:
    """Parse and validate in one step (fails closed)."""
    return Address.parse(text).validate(catalog)


def is_valid_address(text: str, catalog: BookCatalog = BIBLE) -> bool:
    """True if ``text`` parses and lies inside the catalog."""
    try:
        parse_address(text, catalog)
    except (InvalidAddressFormatError, OutOfRangeError):
        return False
    return True
