"""
VerseKit - Domain Layer

Pure, synchronous addressing logic over the static book catalog:

- books: the catalog of books and per-chapter verse counts
- address: validated (book, chapter, verse) triples and their encodings
- reference: address pairs and range expansion
- ranges: compression into contiguous runs and citation titles
- verse: verse value object and share text
- scope: search scope variants

Usage:
    from domain import BIBLE, Address, Reference, compress, share_title

    ref = Reference(Address(1, 1, 30), Address(1, 2, 1))
    share_title(compress(ref.addresses()))   # "Genesis 1:30-2:1"
"""

from domain.books import BIBLE, Book, BookCatalog, BookName, Testament
from domain.address import Address, is_valid_address, parse_address
from domain.reference import ChapterReference, Reference, expand, iter_expand
from domain.ranges import ContiguousRange, citation, compress, share_title
from domain.verse import Verse, create_share_text, share_verses_text
from domain.scope import (
    ENTIRE_CORPUS,
    AddressList,
    AddressRange,
    EntireCorpus,
    SearchScope,
    to_scope,
)

__all__ = [
    "BIBLE",
    "Book",
    "BookCatalog",
    "BookName",
    "Testament",
    "Address",
    "is_valid_address",
    "parse_address",
    "ChapterReference",
    "Reference",
    "expand",
    "iter_expand",
    "ContiguousRange",
    "citation",
    "compress",
    "share_title",
    "Verse",
    "create_share_text",
    "share_verses_text",
    "ENTIRE_CORPUS",
    "AddressList",
    "AddressRange",
    "EntireCorpus",
    "SearchScope",
    "to_scope",
]
