"""
Tests for cli/main.py - VerseKit CLI.

Covers:
- Catalog and address commands that need no database
- init/load/search/chapter/book/verses/share against a temp SQLite file
- Error reporting and exit codes
"""
import json

import pytest
from typer.testing import CliRunner

from cli.main import app


runner = CliRunner()


def invoke(database_url, *args):
    return runner.invoke(app, ["--db", database_url, *args])


@pytest.fixture
def loaded_db(database_url, corpus_file):
    """Database URL with the sample corpus loaded through the CLI."""
    result = invoke(database_url, "load", str(corpus_file))
    assert result.exit_code == 0, result.output
    return database_url


# =============================================================================
# Commands Without Storage
# =============================================================================

class TestCatalogCommands:
    """Tests for books and expand."""

    def test_books_json(self, database_url):
        result = invoke(database_url, "books", "--format", "json")
        assert result.exit_code == 0, result.output

        books = json.loads(result.stdout)
        assert len(books) == 66
        assert books[0]["name"] == "Genesis"
        assert books[0]["chapters"] == 50
        assert books[0]["verses"] == 1533
        assert books[-1]["name"] == "Revelation"

    def test_books_table(self, database_url):
        result = invoke(database_url, "books")
        assert result.exit_code == 0, result.output
        assert "Genesis" in result.stdout

    def test_expand_json(self, database_url):
        result = invoke(database_url, "expand", "1:1:1", "1:1:3", "--format", "json")
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == ["1:1:1", "1:1:2", "1:1:3"]

    def test_expand_reversed_endpoints(self, database_url):
        result = invoke(database_url, "expand", "1:2:1", "1:1:30", "--format", "json")
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == ["1:1:30", "1:1:31", "1:2:1"]

    def test_expand_table_count(self, database_url):
        result = invoke(database_url, "expand", "1:1:1", "1:1:3")
        assert result.exit_code == 0, result.output
        assert "3 address(es)" in result.stdout

    def test_expand_invalid_address(self, database_url):
        result = invoke(database_url, "expand", "Gen 1:1", "1:1:3")
        assert result.exit_code == 1
        assert "INVALID_ADDRESS_FORMAT" in result.output


# =============================================================================
# Loading
# =============================================================================

class TestLoad:
    """Tests for init and load."""

    def test_init(self, database_url):
        result = invoke(database_url, "init")
        assert result.exit_code == 0, result.output
        assert "0 verses" in result.stdout

    def test_load_reports_count(self, database_url, corpus_file):
        result = invoke(database_url, "load", str(corpus_file), "--batch-size", "2")
        assert result.exit_code == 0, result.output
        assert "Loaded 7 verses" in result.stdout

        result = invoke(database_url, "init")
        assert result.exit_code == 0, result.output
        assert "7 verses" in result.stdout

    def test_load_missing_file(self, database_url, tmp_path):
        result = invoke(database_url, "load", str(tmp_path / "missing.jsonl"))
        assert result.exit_code == 1
        assert "input file not found" in result.output

    def test_load_malformed_file(self, database_url, tmp_path):
        path = tmp_path / "bad.jsonl"
        path.write_text('{"id": "1:1", "text": "x"}\n')
        result = invoke(database_url, "load", str(path))
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_load_rejects_zero_batch_size(self, database_url, corpus_file):
        result = invoke(database_url, "load", str(corpus_file), "--batch-size", "0")
        assert result.exit_code == 2

    def test_repeated_invocations_in_one_process(self, database_url):
        for _ in range(3):
            result = invoke(database_url, "init")
            assert result.exit_code == 0, result.output
            assert "VALIDATION_ERROR" not in result.output


# =============================================================================
# Retrieval
# =============================================================================

class TestRetrievalCommands:
    """Tests for search, chapter, book, verses and share."""

    def test_search_json(self, loaded_db):
        result = invoke(loaded_db, "search", "waters", "--format", "json")
        assert result.exit_code == 0, result.output

        ids = [verse["id"] for verse in json.loads(result.stdout)]
        assert ids == ["1:1:2", "1:1:6", "19:23:2"]

    def test_search_scoped_to_book(self, loaded_db):
        result = invoke(loaded_db, "search", "waters", "--book", "Psalms", "--format", "json")
        assert result.exit_code == 0, result.output
        assert [verse["id"] for verse in json.loads(result.stdout)] == ["19:23:2"]

    def test_search_limit(self, loaded_db):
        result = invoke(loaded_db, "search", "waters", "--limit", "1", "--format", "json")
        assert result.exit_code == 0, result.output
        assert len(json.loads(result.stdout)) == 1

    def test_search_conflicting_scope(self, loaded_db):
        result = invoke(loaded_db, "search", "waters", "--book", "1", "--ids", "1:1:1")
        assert result.exit_code != 0

    def test_chapter(self, loaded_db):
        result = invoke(loaded_db, "chapter", "Genesis", "1", "--format", "json")
        assert result.exit_code == 0, result.output
        ids = [verse["id"] for verse in json.loads(result.stdout)]
        assert ids == ["1:1:1", "1:1:2", "1:1:3", "1:1:4", "1:1:5", "1:1:6"]

    def test_chapter_out_of_range(self, loaded_db):
        result = invoke(loaded_db, "chapter", "Genesis", "51")
        assert result.exit_code == 1
        assert "OUT_OF_RANGE" in result.output

    def test_book_with_limit(self, loaded_db):
        result = invoke(loaded_db, "book", "1", "--limit", "2", "--offset", "1", "--format", "json")
        assert result.exit_code == 0, result.output
        assert [verse["id"] for verse in json.loads(result.stdout)] == ["1:1:2", "1:1:3"]

    def test_verses_keep_requested_order(self, loaded_db):
        result = invoke(loaded_db, "verses", "19:23:2", "1:1:1", "--format", "json")
        assert result.exit_code == 0, result.output
        assert [verse["id"] for verse in json.loads(result.stdout)] == ["19:23:2", "1:1:1"]

    def test_verses_table(self, loaded_db):
        result = invoke(loaded_db, "verses", "1:1:1")
        assert result.exit_code == 0, result.output
        assert "1 verse(s)" in result.stdout

    def test_share(self, loaded_db, sample_texts):
        result = invoke(loaded_db, "share", "1:1:2", "1:1:1")
        assert result.exit_code == 0, result.output
        assert result.stdout.strip() == (
            f"Genesis 1:1-2 - [1] {sample_texts['1:1:1']} [2] {sample_texts['1:1:2']}"
        )

    def test_share_nothing_found(self, loaded_db):
        result = invoke(loaded_db, "share", "2:1:1")
        assert result.exit_code == 1
        assert "Not in corpus: 2:1:1" in result.output

    def test_share_invalid_id(self, loaded_db):
        result = invoke(loaded_db, "share", "1:1:99")
        assert result.exit_code == 1
        assert "OUT_OF_RANGE" in result.output
