"""
VerseKit - Book Catalog

Static, process-wide table of the 66 books of the Protestant canon with the
number of verses in every chapter (KJV versification, 31,102 verses).

The catalog is built once at import time and never mutated. Everything that
needs to know "how many chapters does this book have" or "where does this
chapter end" asks the catalog; nothing else in the system hard-codes
versification.

Usage:
    from domain.books import BIBLE, BookName

    genesis = BIBLE.book("Genesis")
    genesis.total_chapters          # 50
    genesis.total_verses(1)         # 31
    BIBLE.book(BookName.JOHN).index # 43
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Sequence, Tuple, Union

from core.errors import OutOfRangeError
from core.types import MAX_UNIT_NUMBER


class Testament(str, Enum):
    """Testament enumeration."""
    OLD = "OT"
    NEW = "NT"


class BookName(str, Enum):
    """Canonical book names in traditional order."""

    # Old Testament (1-39)
    GENESIS = "Genesis"
    EXODUS = "Exodus"
    LEVITICUS = "Leviticus"
    NUMBERS = "Numbers"
    DEUTERONOMY = "Deuteronomy"
    JOSHUA = "Joshua"
    JUDGES = "Judges"
    RUTH = "Ruth"
    SAMUEL_1 = "1 Samuel"
    SAMUEL_2 = "2 Samuel"
    KINGS_1 = "1 Kings"
    KINGS_2 = "2 Kings"
    CHRONICLES_1 = "1 Chronicles"
    CHRONICLES_2 = "2 Chronicles"
    EZRA = "Ezra"
    NEHEMIAH = "Nehemiah"
    ESTHER = "Esther"
    JOB = "Job"
    PSALMS = "Psalms"
    PROVERBS = "Proverbs"
    ECCLESIASTES = "Ecclesiastes"
    SONG_OF_SOLOMON = "Song of Solomon"
    ISAIAH = "Isaiah"
    JEREMIAH = "Jeremiah"
    LAMENTATIONS = "Lamentations"
    EZEKIEL = "Ezekiel"
    DANIEL = "Daniel"
    HOSEA = "Hosea"
    JOEL = "Joel"
    AMOS = "Amos"
    OBADIAH = "Obadiah"
    JONAH = "Jonah"
    MICAH = "Micah"
    NAHUM = "Nahum"
    HABAKKUK = "Habakkuk"
    ZEPHANIAH = "Zephaniah"
    HAGGAI = "Haggai"
    ZECHARIAH = "Zechariah"
    MALACHI = "Malachi"

    # New Testament (40-66)
    MATTHEW = "Matthew"
    MARK = "Mark"
    LUKE = "Luke"
    JOHN = "John"
    ACTS = "Acts"
    ROMANS = "Romans"
    CORINTHIANS_1 = "1 Corinthians"
    CORINTHIANS_2 = "2 Corinthians"
    GALATIANS = "Galatians"
    EPHESIANS = "Ephesians"
    PHILIPPIANS = "Philippians"
    COLOSSIANS = "Colossians"
    THESSALONIANS_1 = "1 Thessalonians"
    THESSALONIANS_2 = "2 Thessalonians"
    TIMOTHY_1 = "1 Timothy"
    TIMOTHY_2 = "2 Timothy"
    TITUS = "Titus"
    PHILEMON = "Philemon"
    HEBREWS = "Hebrews"
    JAMES = "James"
    PETER_1 = "1 Peter"
    PETER_2 = "2 Peter"
    JOHN_1 = "1 John"
    JOHN_2 = "2 John"
    JOHN_3 = "3 John"
    JUDE = "Jude"
    REVELATION = "Revelation"


@dataclass(frozen=True)
class Book:
    """
    One catalog entry.

    index: 1-based position in the catalog
    name: display name (e.g. "1 Corinthians")
    short_name: standard abbreviation (e.g. "1Co")
    testament: OT or NT
    verses: verse count of every chapter, in chapter order
    """
    index: int
    name: str
    short_name: str
    testament: Testament
    verses: Tuple[int, ...]

    def __post_init__(self) -> None:
        if not self.verses:
            raise ValueError(f"Book {self.name!r} has no chapters")
        if len(self.verses) > MAX_UNIT_NUMBER:
            raise ValueError(f"Book {self.name!r} has more than {MAX_UNIT_NUMBER} chapters")
        for count in self.verses:
            if count < 1 or count > MAX_UNIT_NUMBER:
                raise ValueError(f"Invalid verse count {count} in book {self.name!r}")

    @property
    def total_chapters(self) -> int:
        return len(self.verses)

    @property
    def verse_count(self) -> int:
        """Total number of verses in the book."""
        return sum(self.verses)

    def total_verses(self, chapter: int) -> int:
        """Number of verses in ``chapter`` (1-based)."""
        if chapter < 1 or chapter > self.total_chapters:
            raise OutOfRangeError(
                f"Chapter {chapter} out of range for {self.name} (1-{self.total_chapters})",
                field_name="chapter",
                actual_value=chapter,
            )
        return self.verses[chapter - 1]


@dataclass(frozen=True)
class BookCatalog:
    """
    Immutable lookup table over a sequence of books.

    Books are addressed by 1-based index, by full name (case-insensitive),
    by abbreviation, or by ``BookName`` member.
    """
    books: Tuple[Book, ...]
    _by_name: Dict[str, Book] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        lookup: Dict[str, Book] = {}
        for position, book in enumerate(self.books, start=1):
            if book.index != position:
                raise ValueError(f"Book {book.name!r} has index {book.index}, expected {position}")
            for key in {book.name.lower(), book.short_name.lower()}:
                lookup.setdefault(key, book)
        object.__setattr__(self, "_by_name", lookup)

    @property
    def total_books(self) -> int:
        return len(self.books)

    def __len__(self) -> int:
        return len(self.books)

    def __iter__(self) -> Iterator[Book]:
        return iter(self.books)

    def book(self, key: Union[int, str, BookName]) -> Book:
        """
        Resolve a book by index, name, abbreviation or BookName.

        Raises:
            OutOfRangeError: If no such book exists
        """
        if isinstance(key, BookName):
            key = key.value
        if isinstance(key, bool):
            raise OutOfRangeError(f"Invalid book key: {key!r}", field_name="book", actual_value=key)
        if isinstance(key, int):
            if key < 1 or key > self.total_books:
                raise OutOfRangeError(
                    f"Book {key} out of range (1-{self.total_books})",
                    field_name="book",
                    actual_value=key,
                )
            return self.books[key - 1]

        book = self._by_name.get(str(key).strip().lower())
        if book is None:
            raise OutOfRangeError(f"Unknown book: {key!r}", field_name="book", actual_value=key)
        return book

    def find(self, key: Union[int, str, BookName]) -> Optional[Book]:
        """Like ``book`` but returns None instead of raising."""
        try:
            return self.book(key)
        except OutOfRangeError:
            return None

    def testament(self, testament: Testament) -> List[Book]:
        return [book for book in self.books if book.testament == testament]

    @property
    def verse_count(self) -> int:
        return sum(book.verse_count for book in self.books)


def build_catalog(
    entries: Sequence[Tuple[str, str, Testament, Sequence[int]]],
) -> BookCatalog:
    """Build a catalog from ``(name, short_name, testament, verse_counts)`` rows."""
    return BookCatalog(
        books=tuple(
            Book(
                index=position,
                name=name,
                short_name=short_name,
                testament=testament,
                verses=tuple(counts),
            )
            for position, (name, short_name, testament, counts) in enumerate(entries, start=1)
        )
    )


_OT = Testament.OLD
_NT = Testament.NEW

# (name, abbreviation, testament, verses per chapter)
_CANON: Tuple[Tuple[str, str, Testament, Tuple[int, ...]], ...] = (
    ("Genesis", "Gen", _OT, (
        31, 25, 24, 26, 32, 22, 24, 22, 29, 32, 32, 20, 18, 24, 21, 16, 27, 33, 38, 18,
        34, 24, 20, 67, 34, 35, 46, 22, 35, 43, 55, 32, 20, 31, 29, 43, 36, 30, 23, 23,
        57, 38, 34, 34, 28, 34, 31, 22, 33, 26,
    )),
    ("Exodus", "Exo", _OT, (
        22, 25, 22, 31, 23, 30, 25, 32, 35, 29, 10, 51, 22, 31, 27, 36, 16, 27, 25, 26,
        36, 31, 33, 18, 40, 37, 21, 43, 46, 38, 18, 35, 23, 35, 35, 38, 29, 31, 43, 38,
    )),
    ("Leviticus", "Lev", _OT, (
        17, 16, 17, 35, 19, 30, 38, 36, 24, 20, 47, 8, 59, 57, 33, 34, 16, 30, 37, 27,
        24, 33, 44, 23, 55, 46, 34,
    )),
    ("Numbers", "Num", _OT, (
        54, 34, 51, 49, 31, 27, 89, 26, 23, 36, 35, 16, 33, 45, 41, 50, 13, 32, 22, 29,
        35, 41, 30, 25, 18, 65, 23, 31, 40, 16, 54, 42, 56, 29, 34, 13,
    )),
    ("Deuteronomy", "Deu", _OT, (
        46, 37, 29, 49, 33, 25, 26, 20, 29, 22, 32, 32, 18, 29, 23, 22, 20, 22, 21, 20,
        23, 30, 25, 22, 19, 19, 26, 68, 29, 20, 30, 52, 29, 12,
    )),
    ("Joshua", "Jos", _OT, (
        18, 24, 17, 24, 15, 27, 26, 35, 27, 43, 23, 24, 33, 15, 63, 10, 18, 28, 51, 9,
        45, 34, 16, 33,
    )),
    ("Judges", "Judg", _OT, (
        36, 23, 31, 24, 31, 40, 25, 35, 57, 18, 40, 15, 25, 20, 20, 31, 13, 31, 30, 48,
        25,
    )),
    ("Ruth", "Rth", _OT, (22, 23, 18, 22)),
    ("1 Samuel", "1Sa", _OT, (
        28, 36, 21, 22, 12, 21, 17, 22, 27, 27, 15, 25, 23, 52, 35, 23, 58, 30, 24, 42,
        15, 23, 29, 22, 44, 25, 12, 25, 11, 31, 13,
    )),
    ("2 Samuel", "2Sa", _OT, (
        27, 32, 39, 12, 25, 23, 29, 18, 13, 19, 27, 31, 39, 33, 37, 23, 29, 33, 43, 26,
        22, 51, 39, 25,
    )),
    ("1 Kings", "1Ki", _OT, (
        53, 46, 28, 34, 18, 38, 51, 66, 28, 29, 43, 33, 34, 31, 34, 34, 24, 46, 21, 43,
        29, 53,
    )),
    ("2 Kings", "2Ki", _OT, (
        18, 25, 27, 44, 27, 33, 20, 29, 37, 36, 21, 21, 25, 29, 38, 20, 41, 37, 37, 21,
        26, 20, 37, 20, 30,
    )),
    ("1 Chronicles", "1Ch", _OT, (
        54, 55, 24, 43, 26, 81, 40, 40, 44, 14, 47, 40, 14, 17, 29, 43, 27, 17, 19, 8,
        30, 19, 32, 31, 31, 32, 34, 21, 30,
    )),
    ("2 Chronicles", "2Ch", _OT, (
        17, 18, 17, 22, 14, 42, 22, 18, 31, 19, 23, 16, 22, 15, 19, 14, 19, 34, 11, 37,
        20, 12, 21, 27, 28, 23, 9, 27, 36, 27, 21, 33, 25, 33, 27, 23,
    )),
    ("Ezra", "Eza", _OT, (11, 70, 13, 24, 17, 22, 28, 36, 15, 44)),
    ("Nehemiah", "Neh", _OT, (11, 20, 32, 23, 19, 19, 73, 18, 38, 39, 36, 47, 31)),
    ("Esther", "Est", _OT, (22, 23, 15, 17, 14, 14, 10, 17, 32, 3)),
    ("Job", "Job", _OT, (
        22, 13, 26, 21, 27, 30, 21, 22, 35, 22, 20, 25, 28, 22, 35, 22, 16, 21, 29, 29,
        34, 30, 17, 25, 6, 14, 23, 28, 25, 31, 40, 22, 33, 37, 16, 33, 24, 41, 30, 24,
        34, 17,
    )),
    ("Psalms", "Psa", _OT, (
        6, 12, 8, 8, 12, 10, 17, 9, 20, 18, 7, 8, 6, 7, 5, 11, 15, 50, 14, 9,
        13, 31, 6, 10, 22, 12, 14, 9, 11, 12, 24, 11, 22, 22, 28, 12, 40, 22, 13, 17,
        13, 11, 5, 26, 17, 11, 9, 14, 20, 23, 19, 9, 6, 7, 23, 13, 11, 11, 17, 12,
        8, 12, 11, 10, 13, 20, 7, 35, 36, 5, 24, 20, 28, 23, 10, 12, 20, 72, 13, 19,
        16, 8, 18, 12, 13, 17, 7, 18, 52, 17, 16, 15, 5, 23, 11, 13, 12, 9, 9, 5,
        8, 28, 22, 35, 45, 48, 43, 13, 31, 7, 10, 10, 9, 8, 18, 19, 2, 29, 176, 7,
        8, 9, 4, 8, 5, 6, 5, 6, 8, 8, 3, 18, 3, 3, 21, 26, 9, 8, 24, 13,
        10, 7, 12, 15, 21, 10, 20, 14, 9, 6,
    )),
    ("Proverbs", "Pro", _OT, (
        33, 22, 35, 27, 23, 35, 27, 36, 18, 32, 31, 28, 25, 35, 33, 33, 28, 24, 29, 30,
        31, 29, 35, 34, 28, 28, 27, 28, 27, 33, 31,
    )),
    ("Ecclesiastes", "Ecc", _OT, (18, 26, 22, 16, 20, 12, 29, 17, 18, 20, 10, 14)),
    ("Song of Solomon", "SS", _OT, (17, 17, 11, 16, 16, 13, 13, 14)),
    ("Isaiah", "Isa", _OT, (
        31, 22, 26, 6, 30, 13, 25, 22, 21, 34, 16, 6, 22, 32, 9, 14, 14, 7, 25, 6,
        17, 25, 18, 23, 12, 21, 13, 29, 24, 33, 9, 20, 24, 17, 10, 22, 38, 22, 8, 31,
        29, 25, 28, 28, 25, 13, 15, 22, 26, 11, 23, 15, 12, 17, 13, 12, 21, 14, 21, 22,
        11, 12, 19, 12, 25, 24,
    )),
    ("Jeremiah", "Jer", _OT, (
        19, 37, 25, 31, 31, 30, 34, 22, 26, 25, 23, 17, 27, 22, 21, 21, 27, 23, 15, 18,
        14, 30, 40, 10, 38, 24, 22, 17, 32, 24, 40, 44, 26, 22, 19, 32, 21, 28, 18, 16,
        18, 22, 13, 30, 5, 28, 7, 47, 39, 46, 64, 34,
    )),
    ("Lamentations", "Lam", _OT, (22, 22, 66, 22, 22)),
    ("Ezekiel", "Ezk", _OT, (
        28, 10, 27, 17, 17, 14, 27, 18, 11, 22, 25, 28, 23, 23, 8, 63, 24, 32, 14, 49,
        32, 31, 49, 27, 17, 21, 36, 26, 21, 26, 18, 32, 33, 31, 15, 38, 28, 23, 29, 49,
        26, 20, 27, 31, 25, 24, 23, 35,
    )),
    ("Daniel", "Dan", _OT, (21, 49, 30, 37, 31, 28, 28, 27, 27, 21, 45, 13)),
    ("Hosea", "Hos", _OT, (11, 23, 5, 19, 15, 11, 16, 14, 17, 15, 12, 14, 16, 9)),
    ("Joel", "Joe", _OT, (20, 32, 21)),
    ("Amos", "Amo", _OT, (15, 16, 15, 13, 27, 14, 17, 14, 15)),
    ("Obadiah", "Obd", _OT, (21,)),
    ("Jonah", "Jon", _OT, (17, 10, 10, 11)),
    ("Micah", "Mic", _OT, (16, 13, 12, 13, 15, 16, 20)),
    ("Nahum", "Nah", _OT, (15, 13, 19)),
    ("Habakkuk", "Hab", _OT, (17, 20, 19)),
    ("Zephaniah", "Zep", _OT, (18, 15, 20)),
    ("Haggai", "Hag", _OT, (15, 23)),
    ("Zechariah", "Zch", _OT, (21, 13, 10, 14, 11, 15, 14, 23, 17, 12, 17, 14, 9, 21)),
    ("Malachi", "Mal", _OT, (14, 17, 18, 6)),
    ("Matthew", "Mat", _NT, (
        25, 23, 17, 25, 48, 34, 29, 34, 38, 42, 30, 50, 58, 36, 39, 28, 27, 35, 30, 34,
        46, 46, 39, 51, 46, 75, 66, 20,
    )),
    ("Mark", "Mar", _NT, (45, 28, 35, 41, 43, 56, 37, 38, 50, 52, 33, 44, 37, 72, 47, 20)),
    ("Luke", "Luk", _NT, (
        80, 52, 38, 44, 39, 49, 50, 56, 62, 42, 54, 59, 35, 35, 32, 31, 37, 43, 48, 47,
        38, 71, 56, 53,
    )),
    ("John", "Jn", _NT, (
        51, 25, 36, 54, 47, 71, 53, 59, 41, 42, 57, 50, 38, 31, 27, 33, 26, 40, 42, 31,
        25,
    )),
    ("Acts", "Act", _NT, (
        26, 47, 26, 37, 42, 15, 60, 40, 43, 48, 30, 25, 52, 28, 41, 40, 34, 28, 41, 38,
        40, 30, 35, 27, 27, 32, 44, 31,
    )),
    ("Romans", "Rom", _NT, (32, 29, 31, 25, 21, 23, 25, 39, 33, 21, 36, 21, 14, 23, 33, 27)),
    ("1 Corinthians", "1Co", _NT, (31, 16, 23, 21, 13, 20, 40, 13, 27, 33, 34, 31, 13, 40, 58, 24)),
    ("2 Corinthians", "2Co", _NT, (24, 17, 18, 18, 21, 18, 16, 24, 15, 18, 33, 21, 14)),
    ("Galatians", "Gal", _NT, (24, 21, 29, 31, 26, 18)),
    ("Ephesians", "Eph", _NT, (23, 22, 21, 32, 33, 24)),
    ("Philippians", "Phi", _NT, (30, 30, 21, 23)),
    ("Colossians", "Col", _NT, (29, 23, 25, 18)),
    ("1 Thessalonians", "1Th", _NT, (10, 20, 13, 18, 28)),
    ("2 Thessalonians", "2Th", _NT, (12, 17, 18)),
    ("1 Timothy", "1Ti", _NT, (20, 15, 16, 16, 25, 21)),
    ("2 Timothy", "2Ti", _NT, (18, 26, 17, 22)),
    ("Titus", "Tit", _NT, (16, 15, 15)),
    ("Philemon", "Phm", _NT, (25,)),
    ("Hebrews", "Heb", _NT, (14, 18, 19, 16, 14, 20, 28, 13, 28, 39, 40, 29, 25)),
    ("James", "Jam", _NT, (27, 26, 18, 17, 20)),
    ("1 Peter", "1Pe", _NT, (25, 25, 22, 19, 14)),
    ("2 Peter", "2Pe", _NT, (21, 22, 18)),
    ("1 John", "1Jo", _NT, (10, 29, 24, 21, 21)),
    ("2 John", "2Jo", _NT, (13,)),
    ("3 John", "3Jo", _NT, (14,)),
    ("Jude", "Jud", _NT, (25,)),
    ("Revelation", "Rev", _NT, (
        20, 29, 22, 11, 14, 17, 17, 13, 21, 11, 19, 17, 18, 20, 8, 21, 18, 24, 21, 15,
        27, 21,
    )),
)

# Process-wide canon. Built once, never mutated.
BIBLE: BookCatalog = build_catalog(_CANON)
