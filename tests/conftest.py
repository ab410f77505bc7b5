"""
VerseKit - Test Configuration

Pytest fixtures and configuration for all tests.
"""
import json
from pathlib import Path
from typing import Dict, List

import pytest
import pytest_asyncio

from db.interfaces import VerseRecord
from db.sqlite import SQLiteVerseStore
from retrieval.service import RetrievalService
from tests.mocks import InMemoryVerseRepository


# Genesis 1:1-6 and Psalm 23:2 (KJV)
SAMPLE_TEXTS: Dict[str, str] = {
    "1:1:1": "In the beginning God created the heaven and the earth.",
    "1:1:2": (
        "And the earth was without form, and void; and darkness was upon the face "
        "of the deep. And the Spirit of God moved upon the face of the waters."
    ),
    "1:1:3": "And God said, Let there be light: and there was light.",
    "1:1:4": "And God saw the light, that it was good: and God divided the light from the darkness.",
    "1:1:5": (
        "And God called the light Day, and the darkness he called Night. "
        "And the evening and the morning were the first day."
    ),
    "1:1:6": (
        "And God said, Let there be a firmament in the midst of the waters, "
        "and let it divide the waters from the waters."
    ),
    "19:23:2": "He maketh me to lie down in green pastures: he leadeth me beside the still waters.",
}


@pytest.fixture
def sample_texts() -> Dict[str, str]:
    """Verse id -> text for the sample corpus."""
    return dict(SAMPLE_TEXTS)


@pytest.fixture
def sample_records() -> List[VerseRecord]:
    """Sample corpus as insertable records."""
    return [VerseRecord(id=verse_id, text=text) for verse_id, text in SAMPLE_TEXTS.items()]


@pytest_asyncio.fixture
async def store(sample_records):
    """In-memory SQLite store seeded with the sample corpus."""
    store = await SQLiteVerseStore.create("sqlite+aiosqlite:///:memory:")
    await store.insert(sample_records)
    yield store
    await store.close()


@pytest_asyncio.fixture
async def empty_store():
    """In-memory SQLite store with the schema but no rows."""
    store = await SQLiteVerseStore.create("sqlite+aiosqlite:///:memory:")
    yield store
    await store.close()


@pytest_asyncio.fixture
async def service(store):
    """Retrieval service over the seeded SQLite store."""
    return RetrievalService(store)


@pytest.fixture
def memory_repository(sample_records) -> InMemoryVerseRepository:
    """Recording in-memory repository seeded with the sample corpus."""
    return InMemoryVerseRepository(sample_records)


@pytest.fixture
def corpus_file(tmp_path) -> Path:
    """Sample corpus written as JSON Lines."""
    path = tmp_path / "corpus.jsonl"
    with open(path, "w", encoding="utf-8") as f:
        for verse_id, text in SAMPLE_TEXTS.items():
            f.write(json.dumps({"id": verse_id, "text": text}) + "\n")
    return path


@pytest.fixture
def database_url(tmp_path) -> str:
    """File-backed database URL inside the test's temp directory."""
    return f"sqlite+aiosqlite:///{tmp_path / 'versekit.db'}"


# Markers
def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "db: marks tests that hit a real SQLite database")
    config.addinivalue_line("markers", "property: marks property-based tests using Hypothesis")
