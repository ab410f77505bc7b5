"""
Tests for domain/ranges.py - Range Compression and Citation Titles.

Covers:
- Compression into maximal contiguous ranges (within and across chapters)
- Citation title formatting
- Contract violations: empty and multi-book input
"""
import pytest

from core.errors import (
    ContractViolationError,
    CrossBookCompressionError,
    EmptyInputError,
    OutOfRangeError,
)
from domain.address import Address
from domain.ranges import ContiguousRange, citation, compress, share_title
from domain.reference import expand


def gen(*refs):
    """Genesis addresses from "chapter:verse" strings."""
    result = []
    for ref in refs:
        chapter, verse = ref.split(":")
        result.append(Address(1, int(chapter), int(verse)))
    return result


# =============================================================================
# Compression Tests
# =============================================================================

class TestCompress:
    """Tests for compress."""

    def test_single_address(self):
        assert compress(gen("1:1")) == [ContiguousRange(1, 1, 1, 1, 1, 1)]

    def test_contiguous_within_chapter(self):
        ranges = compress(gen("1:2", "1:3", "1:4"))
        assert ranges == [ContiguousRange(1, 1, 1, 1, 2, 4)]

    def test_gaps_split_ranges(self):
        ranges = compress(gen("1:2", "1:4", "1:5", "1:6", "1:9"))
        assert [(r.start.id, r.end.id) for r in ranges] == [
            ("1:1:2", "1:1:2"),
            ("1:1:4", "1:1:6"),
            ("1:1:9", "1:1:9"),
        ]

    def test_run_continues_across_chapter_boundary(self):
        ranges = compress(gen("1:30", "1:31", "2:1"))
        assert ranges == [ContiguousRange(1, 1, 1, 2, 30, 1)]
        assert ranges[0].spans_chapters

    def test_missing_first_verse_breaks_chapter_run(self):
        ranges = compress(gen("1:31", "2:2"))
        assert len(ranges) == 2

    def test_input_order_and_duplicates_ignored(self):
        ranges = compress(gen("1:5", "1:3", "1:4", "1:3"))
        assert ranges == [ContiguousRange(1, 1, 1, 1, 3, 5)]

    def test_whole_book(self):
        addresses = expand(Address(1, 1, 1), Address(1, 50, 26))
        assert compress(reversed(addresses)) == [ContiguousRange(1, 1, 1, 50, 1, 26)]

    def test_last_verse_of_book(self):
        ranges = compress(gen("50:25", "50:26"))
        assert ranges == [ContiguousRange(1, 1, 50, 50, 25, 26)]

    def test_ranges_expand_back_to_input(self):
        selected = gen("1:30", "1:31", "2:1", "2:3", "2:4", "2:25", "3:1", "3:24", "4:2")
        ranges = compress(selected)
        restored = [a for r in ranges for a in r.addresses()]
        assert restored == sorted(selected)

    def test_empty_input(self):
        with pytest.raises(EmptyInputError):
            compress([])

    def test_cross_book_input(self):
        with pytest.raises(CrossBookCompressionError) as exc_info:
            compress([Address(1, 50, 26), Address(2, 1, 1)])
        assert exc_info.value.books == [1, 2]

    def test_contract_violations_are_assertion_errors(self):
        with pytest.raises(AssertionError):
            compress([])
        with pytest.raises(ContractViolationError):
            compress([Address(1, 1, 1), Address(40, 1, 1)])

    def test_out_of_range_address(self):
        with pytest.raises(OutOfRangeError):
            compress(gen("1:1", "1:40"))


# =============================================================================
# Citation Title Tests
# =============================================================================

class TestShareTitle:
    """Tests for share_title/citation."""

    @pytest.mark.parametrize("refs,expected", [
        (("1:1",), "Genesis 1:1"),
        (("50:23", "50:24", "50:25", "50:26"), "Genesis 50:23-26"),
        (("1:1", "1:2"), "Genesis 1:1-2"),
        (("1:1", "1:2", "1:3"), "Genesis 1:1-3"),
        (("1:2", "1:3", "1:5"), "Genesis 1:2-3,5"),
        (("1:2", "1:3", "1:5", "1:6", "1:7"), "Genesis 1:2-3,5-7"),
        (("1:2", "1:4", "1:5", "1:6", "1:9", "1:14", "1:15"), "Genesis 1:2,4-6,9,14-15"),
        (("1:31", "2:1"), "Genesis 1:31-2:1"),
        (("1:31", "2:2"), "Genesis 1:31,2:2"),
        (("1:30", "1:31", "2:1", "2:2", "2:3", "2:4"), "Genesis 1:30-2:4"),
        (("1:30", "1:31", "2:1", "2:3", "2:4"), "Genesis 1:30-2:1,3-4"),
        (
            ("1:30", "1:31", "2:1", "2:3", "2:4", "2:5", "2:25", "3:1", "3:2", "3:24", "4:2"),
            "Genesis 1:30-2:1,3-5,25-3:2,24,4:2",
        ),
        (("1:30", "2:2"), "Genesis 1:30,2:2"),
    ])
    def test_citation(self, refs, expected):
        assert citation(gen(*refs)) == expected

    def test_chapter_spanning_run_after_gap_names_only_its_end_chapter(self):
        assert citation(gen("1:5", "2:25", "3:1")) == "Genesis 1:5,25-3:1"

    def test_other_books(self):
        assert citation([Address(19, 23, 1), Address(19, 23, 2)]) == "Psalms 23:1-2"
        assert citation([Address(46, 13, 4), Address(46, 13, 7)]) == "1 Corinthians 13:4,7"

    def test_share_title_of_ranges(self):
        ranges = [ContiguousRange(1, 1, 1, 1, 1, 3), ContiguousRange(1, 1, 2, 2, 4, 4)]
        assert share_title(ranges) == "Genesis 1:1-3,2:4"

    def test_empty_ranges(self):
        with pytest.raises(EmptyInputError):
            share_title([])

    def test_ranges_from_several_books(self):
        ranges = [ContiguousRange(1, 1, 1, 1, 1, 1), ContiguousRange(2, 2, 1, 1, 1, 1)]
        with pytest.raises(CrossBookCompressionError):
            share_title(ranges)


# =============================================================================
# ContiguousRange Tests
# =============================================================================

class TestContiguousRange:
    """Tests for ContiguousRange helpers."""

    def test_between(self):
        r = ContiguousRange.between(Address(1, 1, 30), Address(1, 2, 1))
        assert (r.start_chapter, r.end_chapter, r.start_verse, r.end_verse) == (1, 2, 30, 1)
        assert r.start == Address(1, 1, 30)
        assert r.end == Address(1, 2, 1)

    def test_single_verse(self):
        assert ContiguousRange.between(Address(1, 1, 1), Address(1, 1, 1)).is_single_verse

    def test_addresses(self):
        r = ContiguousRange(1, 1, 1, 2, 31, 1)
        assert [a.id for a in r.addresses()] == ["1:1:31", "1:2:1"]
