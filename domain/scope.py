"""
VerseKit - Search Scopes

A search is constrained to one of three scopes:

- ``EntireCorpus``: no restriction
- ``AddressList``: an explicit, possibly non-contiguous list of addresses
- ``AddressRange``: every address between two endpoints (a ``Reference``)

Consumers dispatch on the concrete type with ``isinstance`` and must end the
chain by raising for anything else.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Tuple, Union

from domain.address import Address
from domain.reference import Reference


@dataclass(frozen=True)
class EntireCorpus:
    """Search every verse."""

    def describe(self) -> str:
        return "all"


@dataclass(frozen=True)
class AddressList:
    """Search only the listed addresses."""
    addresses: Tuple[Address, ...]

    @classmethod
    def of(cls, addresses: Iterable[Address]) -> "AddressList":
        return cls(tuple(addresses))

    @property
    def sort_keys(self) -> List[int]:
        return [address.sort_key for address in self.addresses]

    def describe(self) -> str:
        return f"ids({len(self.addresses)})"


@dataclass(frozen=True)
class AddressRange:
    """Search every address inside an inclusive reference."""
    reference: Reference

    def fixup(self) -> "AddressRange":
        ordered = self.reference.fixup()
        if ordered is self.reference:
            return self
        return AddressRange(ordered)

    @property
    def start_key(self) -> int:
        return self.reference.start.sort_key

    @property
    def end_key(self) -> int:
        return self.reference.end.sort_key

    def describe(self) -> str:
        return f"range({self.reference})"


SearchScope = Union[EntireCorpus, AddressList, AddressRange]

ENTIRE_CORPUS = EntireCorpus()


def to_scope(value: Union[SearchScope, Reference, Iterable[Address], None]) -> SearchScope:
    """
    Normalize a caller-supplied scope.

    ``None`` means the entire corpus, a ``Reference`` becomes a fixed-up
    ``AddressRange`` and any other iterable of addresses becomes an
    ``AddressList``.
    """
    if value is None:
        return ENTIRE_CORPUS
    if isinstance(value, EntireCorpus):
        return value
    if isinstance(value, AddressRange):
        return value.fixup()
    if isinstance(value, AddressList):
        return value
    if isinstance(value, Reference):
        return AddressRange(value.fixup())
    if isinstance(value, (str, bytes)):
        raise TypeError(f"Unsupported search scope: {value!r}")
    return AddressList.of(value)
