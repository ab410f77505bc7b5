"""
VerseKit - Verse Value Object and Share Text

``Verse`` pairs an address with its text and is what every fetch and search
returns. The share helpers format a selection of verses from one book:

    share_verses_text(verses)  -> ["[30] ...", "[31] ...", "[2:1] ..."]
    create_share_text(verses)  -> "Genesis 1:30-2:1 - [30] ... [31] ... [2:1] ..."
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List

from domain.address import Address
from domain.books import BIBLE, BookCatalog
from domain.ranges import ContiguousRange, single_book, compress, share_title


@dataclass(frozen=True)
class Verse:
    """A verse address with its text."""
    address: Address
    text: str

    @classmethod
    def from_id(cls, verse_id: str, text: str) -> "Verse":
        return cls(Address.parse(verse_id), text)

    @classmethod
    def from_sort_key(cls, key: int, text: str) -> "Verse":
        return cls(Address.from_sort_key(key), text)

    @property
    def id(self) -> str:
        return self.address.id

    @property
    def sort_key(self) -> int:
        return self.address.sort_key

    def book_chapter_verse(self, catalog: BookCatalog = BIBLE) -> str:
        return self.address.book_chapter_verse(catalog)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "reference": self.book_chapter_verse(),
            "text": self.text,
        }


def _sorted_unique(verses: Iterable[Verse]) -> List[Verse]:
    by_address: Dict[Address, Verse] = {}
    for verse in verses:
        by_address.setdefault(verse.address, verse)
    return [by_address[address] for address in sorted(by_address)]


def selected_ranges(verses: Iterable[Verse], catalog: BookCatalog = BIBLE) -> List[ContiguousRange]:
    return compress((verse.address for verse in verses), catalog)


def share_verses_text(verses: Iterable[Verse], catalog: BookCatalog = BIBLE) -> List[str]:
    """
    One line per verse, bracketed with its verse number.

    The chapter is added to the bracket when the verse starts a new chapter
    or follows the last verse of a chapter. A single verse is returned as
    bare text.

    Raises:
        EmptyInputError: If no verses are given
        CrossBookCompressionError: If the verses belong to several books
    """
    ordered = _sorted_unique(verses)
    book_index = single_book([verse.address for verse in ordered], "format")
    if len(ordered) == 1:
        return [ordered[0].text]

    book = catalog.book(book_index)
    running_chapter = ordered[0].address.chapter
    chapter_prefix_pending = False
    lines: List[str] = []

    for verse in ordered:
        chapter = verse.address.chapter
        if chapter_prefix_pending or chapter != running_chapter:
            label = verse.address.chapter_verse()
        else:
            label = str(verse.address.verse)
        lines.append(f"[{label}] {verse.text}")

        if verse.address.is_last_in_chapter(catalog):
            chapter_prefix_pending = chapter != book.total_chapters
        else:
            chapter_prefix_pending = False
        running_chapter = chapter

    return lines


def create_share_text(verses: Iterable[Verse], catalog: BookCatalog = BIBLE) -> str:
    """Citation title followed by the formatted verse text."""
    ordered = _sorted_unique(verses)
    title = share_title(selected_ranges(ordered, catalog), catalog)
    return f"{title} - {' '.join(share_verses_text(ordered, catalog))}"
