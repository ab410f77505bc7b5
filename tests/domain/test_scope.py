"""
Tests for domain/scope.py - Search Scopes.
"""
import pytest

from domain.address import Address
from domain.reference import Reference
from domain.scope import ENTIRE_CORPUS, AddressList, AddressRange, EntireCorpus, to_scope


class TestSearchScope:
    """Tests for scope variants and normalization."""

    def test_none_means_entire_corpus(self):
        assert to_scope(None) is ENTIRE_CORPUS
        assert isinstance(to_scope(None), EntireCorpus)

    def test_existing_scopes_pass_through(self):
        scope = AddressList.of([Address(1, 1, 1)])
        assert to_scope(scope) is scope
        assert to_scope(ENTIRE_CORPUS) is ENTIRE_CORPUS

    def test_reference_becomes_fixed_up_range(self):
        scope = to_scope(Reference(Address(19, 23, 3), Address(1, 1, 3)))
        assert isinstance(scope, AddressRange)
        assert scope.start_key == 1001003
        assert scope.end_key == 19023003

    def test_misordered_range_is_fixed_up(self):
        scope = to_scope(AddressRange(Reference(Address(1, 1, 6), Address(1, 1, 4))))
        assert scope.reference.start == Address(1, 1, 4)

    def test_iterable_becomes_address_list_in_given_order(self):
        scope = to_scope([Address(1, 1, 6), Address(1, 1, 4)])
        assert isinstance(scope, AddressList)
        assert scope.sort_keys == [1001006, 1001004]

    @pytest.mark.parametrize("value", ["1:1:1", b"1:1:1"])
    def test_text_is_not_a_scope(self, value):
        with pytest.raises(TypeError):
            to_scope(value)

    def test_describe(self):
        assert ENTIRE_CORPUS.describe() == "all"
        assert AddressList.of([Address(1, 1, 1), Address(1, 1, 2)]).describe() == "ids(2)"
        assert AddressRange(Reference.parse("1:1:1", "1:1:3")).describe() == "range(1:1:1-1:1:3)"
