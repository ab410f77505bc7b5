"""
Custom Hypothesis Strategies for Verse Addresses

Provides catalog-aware strategies for generating valid addresses, same-book
selections and malformed address text.
"""
from hypothesis import strategies as st

from domain.address import Address
from domain.books import BIBLE, Book


# =============================================================================
# BOOKS
# =============================================================================

def book_strategy() -> st.SearchStrategy[Book]:
    """Any book of the catalog."""
    return st.sampled_from(list(BIBLE))


# =============================================================================
# ADDRESSES
# =============================================================================

@st.composite
def address_in_book(draw, book: Book) -> Address:
    """A valid address inside ``book``."""
    chapter = draw(st.integers(min_value=1, max_value=book.total_chapters))
    verse = draw(st.integers(min_value=1, max_value=book.total_verses(chapter)))
    return Address(book.index, chapter, verse)


@st.composite
def address_strategy(draw) -> Address:
    """A valid address anywhere in the catalog."""
    book = draw(book_strategy())
    return draw(address_in_book(book))


@st.composite
def same_book_addresses(draw, min_size: int = 1, max_size: int = 12):
    """A non-empty list of valid addresses that all belong to one book."""
    book = draw(book_strategy())
    return draw(st.lists(address_in_book(book), min_size=min_size, max_size=max_size))


@st.composite
def nearby_pair(draw, max_span: int = 60):
    """Two addresses of one book at most ``max_span`` verses apart, in either order."""
    book = draw(book_strategy())
    start = draw(address_in_book(book))
    steps = draw(st.integers(min_value=0, max_value=max_span))

    chapter, verse = start.chapter, start.verse
    for _ in range(steps):
        if verse < book.total_verses(chapter):
            verse += 1
        elif chapter < book.total_chapters:
            chapter, verse = chapter + 1, 1
        else:
            break
    end = Address(book.index, chapter, verse)

    if draw(st.booleans()):
        return end, start
    return start, end


# =============================================================================
# MALFORMED TEXT
# =============================================================================

def malformed_address_text() -> st.SearchStrategy[str]:
    """Text that is never three positive integers separated by ':'."""
    wrong_arity = st.lists(
        st.integers(min_value=1, max_value=200).map(str), min_size=0, max_size=5
    ).filter(lambda parts: len(parts) != 3).map(":".join)
    zero_part = st.tuples(
        st.integers(min_value=0, max_value=66),
        st.integers(min_value=0, max_value=150),
        st.integers(min_value=0, max_value=176),
    ).filter(lambda parts: 0 in parts).map(lambda parts: ":".join(map(str, parts)))
    wrong_separator = st.tuples(
        st.integers(min_value=1, max_value=66),
        st.integers(min_value=1, max_value=150),
        st.integers(min_value=1, max_value=176),
        st.sampled_from([".", " ", ",", "-", "::"]),
    ).map(lambda parts: parts[3].join(map(str, parts[:3])))
    return st.one_of(wrong_arity, zero_part, wrong_separator)
