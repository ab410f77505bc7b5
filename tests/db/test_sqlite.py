"""
Tests for db/sqlite.py - SQLite Verse Store.

Covers:
- Schema creation and store lifecycle
- Bulk upsert and the full-text index triggers
- Range and id fetches (ordering, pagination, caller order)
- Phrase and word search, scoped by ids and by range
- Driver errors surfaced as VerseKitStorageError
"""
import pytest

from core.errors import OutOfRangeError, VerseKitStorageError
from core.types import MAX_LIMIT
from db.interfaces import VerseRecord
from db.sqlite import (
    SQLiteVerseStore,
    is_memory_url,
    match_tokens,
    phrase_expression,
    words_expression,
)
from domain.address import Address
from domain.reference import Reference
from domain.scope import ENTIRE_CORPUS, AddressList, AddressRange


def ids(verses):
    return [v.id for v in verses]


# =============================================================================
# Query Helper Tests
# =============================================================================

class TestQueryHelpers:
    """Tests for FTS5 expression building."""

    def test_match_tokens_drop_punctuation(self):
        assert match_tokens('the "still" waters; (AND) NEAR*') == ["the", "still", "waters", "AND", "NEAR"]

    def test_phrase_expression(self):
        assert phrase_expression(["still", "waters"]) == '"still waters"'

    def test_words_expression(self):
        assert words_expression(["still", "waters"]) == '"still" "waters"'

    @pytest.mark.parametrize("url,expected", [
        ("sqlite+aiosqlite:///:memory:", True),
        ("sqlite+aiosqlite://", True),
        ("sqlite+aiosqlite:///./versekit.db", False),
    ])
    def test_is_memory_url(self, url, expected):
        assert is_memory_url(url) is expected


# =============================================================================
# Lifecycle Tests
# =============================================================================

@pytest.mark.db
class TestStoreLifecycle:
    """Tests for schema creation and closing."""

    @pytest.mark.asyncio
    async def test_empty_store(self, empty_store):
        assert await empty_store.count() == 0
        assert await empty_store.phrase_search("God", ENTIRE_CORPUS) == []

    @pytest.mark.asyncio
    async def test_file_database_persists(self, database_url, sample_records):
        store = await SQLiteVerseStore.create(database_url)
        await store.insert(sample_records)
        await store.close()

        reopened = await SQLiteVerseStore.create(database_url)
        try:
            assert await reopened.count() == len(sample_records)
            assert ids(await reopened.phrase_search("still waters", ENTIRE_CORPUS)) == ["19:23:2"]
        finally:
            await reopened.close()

    @pytest.mark.asyncio
    async def test_create_schema_is_idempotent(self, store):
        await store.create_schema()
        assert await store.count() == 7

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self, empty_store):
        await empty_store.close()
        await empty_store.close()

    @pytest.mark.asyncio
    async def test_context_manager(self):
        async with await SQLiteVerseStore.create() as store:
            await store.insert([VerseRecord("1:1:1", "In the beginning")])
            assert await store.count() == 1
        assert store._engine is None


# =============================================================================
# Insert Tests
# =============================================================================

@pytest.mark.db
class TestInsert:
    """Tests for bulk upsert."""

    @pytest.mark.asyncio
    async def test_insert_counts_rows(self, store):
        assert await store.count() == 7

    @pytest.mark.asyncio
    async def test_insert_nothing(self, empty_store):
        assert await empty_store.insert([]) == 0

    @pytest.mark.asyncio
    async def test_duplicate_ids_in_one_batch_keep_last(self, empty_store):
        written = await empty_store.insert([
            VerseRecord("1:1:1", "first"),
            VerseRecord("1:1:1", "second"),
        ])
        assert written == 1
        assert ids(await empty_store.phrase_search("second", ENTIRE_CORPUS)) == ["1:1:1"]

    @pytest.mark.asyncio
    async def test_reinsert_replaces_text_and_index(self, store):
        await store.insert([VerseRecord("19:23:2", "He leadeth me beside quiet streams.")])

        assert await store.count() == 7
        assert ids(await store.phrase_search("still waters", ENTIRE_CORPUS)) == []
        assert ids(await store.phrase_search("quiet streams", ENTIRE_CORPUS)) == ["19:23:2"]

    @pytest.mark.asyncio
    async def test_out_of_range_record_rejected_atomically(self, empty_store):
        with pytest.raises(OutOfRangeError):
            await empty_store.insert([
                VerseRecord("1:1:1", "ok"),
                VerseRecord("1:1:40", "no such verse"),
            ])
        assert await empty_store.count() == 0

    @pytest.mark.asyncio
    async def test_text_whitespace_preserved(self, empty_store):
        await empty_store.insert([VerseRecord("1:1:1", "In  the\nbeginning")])
        verses = await empty_store.fetch_by_ids([Address(1, 1, 1)])
        assert verses[0].text == "In  the\nbeginning"


# =============================================================================
# Fetch Tests
# =============================================================================

@pytest.mark.db
class TestFetch:
    """Tests for fetch_by_range and fetch_by_ids."""

    @pytest.mark.asyncio
    async def test_fetch_by_range_ascending(self, store):
        verses = await store.fetch_by_range(Address(1, 1, 1), Address(66, 22, 21))
        assert ids(verses) == ["1:1:1", "1:1:2", "1:1:3", "1:1:4", "1:1:5", "1:1:6", "19:23:2"]

    @pytest.mark.asyncio
    async def test_fetch_by_range_pagination(self, store):
        verses = await store.fetch_by_range(Address(1, 1, 1), Address(1, 1, 31), limit=2, offset=2)
        assert ids(verses) == ["1:1:3", "1:1:4"]

    @pytest.mark.asyncio
    async def test_fetch_by_range_zero_limit(self, store):
        assert await store.fetch_by_range(Address(1, 1, 1), Address(1, 1, 31), limit=0) == []

    @pytest.mark.asyncio
    async def test_fetch_by_ids_caller_order(self, store):
        verses = await store.fetch_by_ids([Address(19, 23, 2), Address(1, 1, 5), Address(1, 1, 1)])
        assert ids(verses) == ["19:23:2", "1:1:5", "1:1:1"]

    @pytest.mark.asyncio
    async def test_fetch_by_ids_skips_missing_and_repeats(self, store):
        verses = await store.fetch_by_ids([
            Address(1, 1, 3), Address(1, 1, 20), Address(1, 1, 3), Address(1, 1, 2),
        ])
        assert ids(verses) == ["1:1:3", "1:1:2"]

    @pytest.mark.asyncio
    async def test_fetch_by_ids_pagination(self, store):
        requested = [Address(1, 1, v) for v in (6, 5, 4, 3)]
        verses = await store.fetch_by_ids(requested, limit=2, offset=1)
        assert ids(verses) == ["1:1:5", "1:1:4"]

    @pytest.mark.asyncio
    async def test_fetch_many_ids(self, store):
        requested = Reference.entire().addresses()[:1200]
        verses = await store.fetch_by_ids(requested, MAX_LIMIT)
        assert ids(verses) == ["1:1:1", "1:1:2", "1:1:3", "1:1:4", "1:1:5", "1:1:6"]


# =============================================================================
# Search Tests
# =============================================================================

@pytest.mark.db
class TestSearch:
    """Tests for phrase_search and word_search."""

    @pytest.mark.asyncio
    async def test_phrase_search_ascending(self, store):
        verses = await store.phrase_search("waters", ENTIRE_CORPUS)
        assert ids(verses) == ["1:1:2", "1:1:6", "19:23:2"]

    @pytest.mark.asyncio
    async def test_phrase_requires_contiguity(self, store):
        assert ids(await store.phrase_search("still waters", ENTIRE_CORPUS)) == ["19:23:2"]
        assert await store.phrase_search("waters still", ENTIRE_CORPUS) == []

    @pytest.mark.asyncio
    async def test_word_search_any_order(self, store):
        assert ids(await store.word_search("waters still", ENTIRE_CORPUS)) == ["19:23:2"]

    @pytest.mark.asyncio
    async def test_word_search_requires_every_word(self, store):
        verses = await store.word_search("light darkness", ENTIRE_CORPUS)
        assert sorted(ids(verses)) == ["1:1:4", "1:1:5"]

    @pytest.mark.asyncio
    async def test_stemming(self, store):
        assert ids(await store.phrase_search("water", ENTIRE_CORPUS)) == ["1:1:2", "1:1:6", "19:23:2"]

    @pytest.mark.asyncio
    async def test_punctuation_only_query(self, store):
        assert await store.phrase_search("?!", ENTIRE_CORPUS) == []
        assert await store.word_search("...", ENTIRE_CORPUS) == []

    @pytest.mark.asyncio
    async def test_query_syntax_is_not_interpreted(self, store):
        assert await store.word_search('God OR "', ENTIRE_CORPUS) == []
        assert ids(await store.phrase_search("God*", ENTIRE_CORPUS))[:1] == ["1:1:1"]

    @pytest.mark.asyncio
    async def test_id_scope(self, store):
        scope = AddressList.of([Address(1, 1, 6), Address(1, 1, 4), Address(1, 1, 5)])
        assert ids(await store.phrase_search("God", scope)) == ["1:1:4", "1:1:5", "1:1:6"]

    @pytest.mark.asyncio
    async def test_empty_id_scope(self, store):
        assert await store.phrase_search("God", AddressList(())) == []

    @pytest.mark.asyncio
    async def test_range_scope(self, store):
        scope = AddressRange(Reference.parse("1:1:3", "19:23:3"))
        assert ids(await store.phrase_search("waters", scope)) == ["1:1:6", "19:23:2"]

    @pytest.mark.asyncio
    async def test_misordered_range_scope(self, store):
        scope = AddressRange(Reference.parse("19:23:3", "1:1:3"))
        assert ids(await store.phrase_search("waters", scope)) == ["1:1:6", "19:23:2"]

    @pytest.mark.asyncio
    async def test_search_pagination(self, store):
        verses = await store.phrase_search("God", ENTIRE_CORPUS, limit=2, offset=1)
        assert ids(verses) == ["1:1:2", "1:1:3"]

    @pytest.mark.asyncio
    async def test_unknown_scope_rejected(self, store):
        with pytest.raises(TypeError):
            await store.phrase_search("God", "everything")


# =============================================================================
# Error Handling Tests
# =============================================================================

@pytest.mark.db
class TestStorageErrors:
    """Tests for driver error conversion."""

    @pytest.mark.asyncio
    async def test_missing_schema_surfaces_storage_error(self):
        store = SQLiteVerseStore("sqlite+aiosqlite:///:memory:")
        try:
            with pytest.raises(VerseKitStorageError) as exc_info:
                await store.count()
        finally:
            await store.close()

        error = exc_info.value
        assert error.backend == "sqlite"
        assert error.__cause__ is not None
        assert error.error_code == "STORAGE_ERROR"
