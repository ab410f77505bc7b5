"""
VerseKit - SQLite Verse Store

``VerseRepository`` implementation on SQLite with an FTS5 full-text index,
using SQLAlchemy 2.0's async engine over the aiosqlite driver.

Features:
- Automatic session management with commit/rollback
- Atomic bulk upsert
- Phrase and all-words search constrained by scope (ids or range)
- Driver errors surfaced as VerseKitStorageError

Usage:
    store = SQLiteVerseStore("sqlite+aiosqlite:///./versekit.db")
    await store.create_schema()
    await store.insert([VerseRecord("1:1:1", "In the beginning ...")])
    verses = await store.phrase_search("the beginning", ENTIRE_CORPUS)
    await store.close()
"""
from __future__ import annotations

import re
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncGenerator, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import bindparam, func, select, text
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from core.errors import VerseKitStorageError, error_handler
from core.types import MAX_LIMIT, NO_OFFSET, normalize_offset
from db.interfaces import VerseRecord, VerseRepository
from db.models import FTS_TABLE, Base, VerseRow, to_search_text
from domain.address import Address
from domain.books import BIBLE, BookCatalog
from domain.scope import AddressList, AddressRange, EntireCorpus, SearchScope
from domain.verse import Verse
from observability.logging import get_logger

logger = get_logger(__name__)

_TOKEN = re.compile(r"\w+")

# Keeps IN lists below SQLite's bound-parameter limit.
ID_CHUNK_SIZE = 500

storage_errors = error_handler(SQLAlchemyError, OSError, reraise_as=VerseKitStorageError, backend="sqlite")


def match_tokens(query: str) -> List[str]:
    """Words of ``query`` as the index will see them."""
    return _TOKEN.findall(query)


def phrase_expression(tokens: Sequence[str]) -> str:
    """FTS5 query matching the tokens as one contiguous phrase."""
    return '"' + " ".join(tokens) + '"'


def words_expression(tokens: Sequence[str]) -> str:
    """FTS5 query matching every token anywhere in the text."""
    return " ".join(f'"{token}"' for token in tokens)


def is_memory_url(url: str) -> bool:
    database = make_url(url).database
    return not database or database == ":memory:"


class SQLiteVerseStore(VerseRepository):
    """
    Async SQLite store with an FTS5 index.

    One engine per store. In-memory databases use a single shared
    connection so that every session sees the same data.
    """

    backend_name = "sqlite"

    def __init__(
        self,
        database_url: str = "sqlite+aiosqlite:///:memory:",
        echo: bool = False,
        catalog: BookCatalog = BIBLE,
    ):
        self.database_url = database_url
        self.echo = echo
        self.catalog = catalog

        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    @classmethod
    async def create(cls, database_url: str = "sqlite+aiosqlite:///:memory:", **kwargs: Any) -> "SQLiteVerseStore":
        """Open a store and make sure its schema exists."""
        store = cls(database_url, **kwargs)
        await store.create_schema()
        return store

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def initialize(self) -> None:
        """Create the engine and session factory."""
        if self._engine is not None:
            return

        if is_memory_url(self.database_url):
            self._engine = create_async_engine(
                self.database_url,
                echo=self.echo,
                poolclass=StaticPool,
                connect_args={"check_same_thread": False},
            )
        else:
            database = make_url(self.database_url).database
            if database:
                Path(database).expanduser().parent.mkdir(parents=True, exist_ok=True)
            self._engine = create_async_engine(self.database_url, echo=self.echo)

        self._session_factory = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        logger.info("SQLite store initialized", url=self.database_url)

    async def close(self) -> None:
        """Dispose of the engine."""
        if self._engine is not None:
            await self._engine.dispose()
            logger.info("SQLite store closed", url=self.database_url)
        self._engine = None
        self._session_factory = None

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get async database session."""
        if self._session_factory is None:
            await self.initialize()
        assert self._session_factory is not None

        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    @storage_errors
    async def create_schema(self) -> None:
        """Create the verse table and its full-text index."""
        await self.initialize()
        assert self._engine is not None
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Schema ready", url=self.database_url)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    @storage_errors
    async def insert(self, records: Sequence[VerseRecord]) -> int:
        rows: Dict[int, Dict[str, Any]] = {}
        for record in records:
            address = record.address.validate(self.catalog)
            rows[address.sort_key] = {
                "id": address.sort_key,
                "number": address.id,
                "text": record.text,
                "search_text": to_search_text(record.text),
            }
        if not rows:
            return 0

        stmt = sqlite_insert(VerseRow)
        stmt = stmt.on_conflict_do_update(
            index_elements=[VerseRow.id],
            set_={
                "text": stmt.excluded["text"],
                "search_text": stmt.excluded["search_text"],
            },
        )
        async with self.session() as session:
            await session.execute(stmt, list(rows.values()))

        logger.info("Verses inserted", count=len(rows))
        return len(rows)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @storage_errors
    async def count(self) -> int:
        async with self.session() as session:
            result = await session.execute(select(func.count()).select_from(VerseRow))
            return int(result.scalar_one())

    @storage_errors
    async def fetch_by_ids(
        self,
        ids: Sequence[Address],
        limit: int = MAX_LIMIT,
        offset: int = NO_OFFSET,
    ) -> List[Verse]:
        keys = list(dict.fromkeys(address.sort_key for address in ids))
        if not keys or limit <= 0:
            return []

        found: Dict[int, str] = {}
        async with self.session() as session:
            for start in range(0, len(keys), ID_CHUNK_SIZE):
                chunk = keys[start:start + ID_CHUNK_SIZE]
                result = await session.execute(
                    select(VerseRow.id, VerseRow.text).where(VerseRow.id.in_(chunk))
                )
                found.update({row.id: row.text for row in result})

        ordered = [Verse.from_sort_key(key, found[key]) for key in keys if key in found]
        skip = normalize_offset(offset)
        return ordered[skip:skip + limit]

    @storage_errors
    async def fetch_by_range(
        self,
        start: Address,
        end: Address,
        limit: int = MAX_LIMIT,
        offset: int = NO_OFFSET,
    ) -> List[Verse]:
        if limit <= 0:
            return []
        async with self.session() as session:
            result = await session.execute(
                select(VerseRow)
                .where(VerseRow.id.between(start.sort_key, end.sort_key))
                .order_by(VerseRow.id)
                .limit(limit)
                .offset(normalize_offset(offset))
            )
            return [row.to_verse() for row in result.scalars()]

    @storage_errors
    async def phrase_search(
        self,
        text: str,
        scope: SearchScope,
        limit: int = MAX_LIMIT,
        offset: int = NO_OFFSET,
    ) -> List[Verse]:
        tokens = match_tokens(text)
        if not tokens:
            return []
        return await self._match(phrase_expression(tokens), scope, "verse.id", limit, offset)

    @storage_errors
    async def word_search(
        self,
        text: str,
        scope: SearchScope,
        limit: int = MAX_LIMIT,
        offset: int = NO_OFFSET,
    ) -> List[Verse]:
        tokens = match_tokens(text)
        if not tokens:
            return []
        return await self._match(words_expression(tokens), scope, "m.score, verse.id", limit, offset)

    async def _match(
        self,
        expression: str,
        scope: SearchScope,
        order_by: str,
        limit: int,
        offset: int,
    ) -> List[Verse]:
        if limit <= 0:
            return []

        scope_sql, params, expanding = self._scope_clause(scope)
        if scope_sql is None:
            return []

        stmt = text(
            "SELECT verse.id, verse.text FROM "
            f"(SELECT rowid AS rid, rank AS score FROM {FTS_TABLE} "
            f"WHERE {FTS_TABLE} MATCH :expression) AS m "
            "JOIN verse ON verse.id = m.rid "
            f"WHERE 1 = 1{scope_sql} "
            f"ORDER BY {order_by} "
            "LIMIT :limit OFFSET :offset"
        )
        if expanding:
            stmt = stmt.bindparams(bindparam("ids", expanding=True))

        async with self.session() as session:
            result = await session.execute(
                stmt,
                {
                    "expression": expression,
                    "limit": limit,
                    "offset": normalize_offset(offset),
                    **params,
                },
            )
            rows = result.all()

        logger.debug("Index matched", expression=expression, rows=len(rows))
        return [Verse.from_sort_key(row.id, row.text) for row in rows]

    @staticmethod
    def _scope_clause(scope: SearchScope) -> Tuple[Optional[str], Dict[str, Any], bool]:
        """SQL fragment, parameters and whether ``:ids`` expands. None means empty scope."""
        if isinstance(scope, EntireCorpus):
            return "", {}, False
        if isinstance(scope, AddressList):
            keys = sorted(set(scope.sort_keys))
            if not keys:
                return None, {}, False
            return " AND verse.id IN :ids", {"ids": keys}, True
        if isinstance(scope, AddressRange):
            ordered = scope.fixup()
            return (
                " AND verse.id BETWEEN :start_key AND :end_key",
                {"start_key": ordered.start_key, "end_key": ordered.end_key},
                False,
            )
        raise TypeError(f"Unsupported search scope: {scope!r}")
