"""
VerseKit - SQLAlchemy ORM Models

Physical layout of the SQLite store:

- ``verse``: one row per verse, keyed by the address sort key
- ``verse_fts``: external-content FTS5 index over ``verse.search_text``,
  kept in sync by triggers (porter stemming over unicode61, so matching
  is case- and diacritic-insensitive)
"""
from typing import Any, Dict

from sqlalchemy import DDL, Integer, String, Text, event
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from domain.verse import Verse


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class VerseRow(Base):
    """Stored verse. ``id`` is the address sort key, ``number`` the canonical id."""
    __tablename__ = "verse"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    number: Mapped[str] = mapped_column(String(16), unique=True, index=True)
    text: Mapped[str] = mapped_column(Text)
    search_text: Mapped[str] = mapped_column(Text)

    def to_verse(self) -> Verse:
        return Verse.from_sort_key(self.id, self.text)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "number": self.number, "text": self.text}

    def __repr__(self) -> str:
        return f"<VerseRow {self.number}>"


def to_search_text(text: str) -> str:
    """Text as handed to the full-text index."""
    return " ".join(text.split())


FTS_TABLE = "verse_fts"

_FTS_DDL = (
    f"CREATE VIRTUAL TABLE IF NOT EXISTS {FTS_TABLE} USING fts5("
    "search_text, content='verse', content_rowid='id', "
    "tokenize='porter unicode61')",
    f"CREATE TRIGGER IF NOT EXISTS verse_ai AFTER INSERT ON verse BEGIN "
    f"INSERT INTO {FTS_TABLE}(rowid, search_text) VALUES (new.id, new.search_text); END",
    f"CREATE TRIGGER IF NOT EXISTS verse_ad AFTER DELETE ON verse BEGIN "
    f"INSERT INTO {FTS_TABLE}({FTS_TABLE}, rowid, search_text) "
    f"VALUES ('delete', old.id, old.search_text); END",
    f"CREATE TRIGGER IF NOT EXISTS verse_au AFTER UPDATE ON verse BEGIN "
    f"INSERT INTO {FTS_TABLE}({FTS_TABLE}, rowid, search_text) "
    f"VALUES ('delete', old.id, old.search_text); "
    f"INSERT INTO {FTS_TABLE}(rowid, search_text) VALUES (new.id, new.search_text); END",
)

for _statement in _FTS_DDL:
    event.listen(
        VerseRow.__table__,
        "after_create",
        DDL(_statement).execute_if(dialect="sqlite"),
    )
