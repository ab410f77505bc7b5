"""
VerseKit - Storage Layer

The abstract storage contract and its SQLite/FTS5 implementation.

Usage:
    from db import SQLiteVerseStore, VerseRecord

    store = await SQLiteVerseStore.create("sqlite+aiosqlite:///./versekit.db")
"""

from db.interfaces import VerseRecord, VerseRepository
from db.sqlite import SQLiteVerseStore

__all__ = ["VerseRecord", "VerseRepository", "SQLiteVerseStore"]
