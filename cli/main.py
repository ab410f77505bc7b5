"""
VerseKit - Main CLI Application

Command-line interface for loading a corpus and retrieving verses.
"""
import asyncio
import functools
from contextlib import asynccontextmanager
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, AsyncIterator, Callable, List, NoReturn, Optional, Sequence, TypeVar, Union

import typer
from rich.console import Console
from rich.table import Table
from rich.text import Text

from config import get_config
from core.errors import VerseKitError, classify_error
from core.types import Serializable
from data.loaders import FORMATS, batched, load_records
from db.sqlite import SQLiteVerseStore
from domain.address import Address
from domain.books import BIBLE
from domain.reference import ChapterReference, Reference, expand
from domain.verse import Verse, create_share_text
from observability.logging import get_logger
from retrieval.service import RetrievalService, ScopeLike

T = TypeVar("T")

# Initialize app
app = typer.Typer(
    name="versekit",
    help="VerseKit - Verse addressing, retrieval and search",
    add_completion=False,
)

console = Console()
err_console = Console(stderr=True)

logger = get_logger("versekit.cli")


class OutputFormat(str, Enum):
    """Output format options."""
    TABLE = "table"
    JSON = "json"


@dataclass
class CliState:
    """Settings shared by every command of one invocation."""
    database_url: str
    page_size: int
    query_timeout_seconds: Optional[float]
    insert_batch_size: int


def _fail(error: BaseException) -> NoReturn:
    classified = classify_error(error)
    logger.debug("Command failed", error_code=classified.error_code, error=classified.message)
    err_console.print(
        Text.assemble(("Error", "red"), f" [{classified.error_code}]: {classified.message}"),
        soft_wrap=True,
    )
    raise typer.Exit(1)


def handle_errors(func: Callable[..., T]) -> Callable[..., T]:
    """Report VerseKit errors on stderr and exit with status 1."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> T:
        try:
            return func(*args, **kwargs)
        except VerseKitError as e:
            _fail(e)

    return wrapper


def _state(ctx: typer.Context) -> CliState:
    return ctx.ensure_object(CliState)


@asynccontextmanager
async def _open_service(state: CliState) -> AsyncIterator[RetrievalService]:
    store = await SQLiteVerseStore.create(state.database_url)
    async with RetrievalService(store, query_timeout_seconds=state.query_timeout_seconds) as service:
        yield service


def _book_key(book: str) -> Union[int, str]:
    return int(book) if book.strip().isdigit() else book


def _serialize(items: Sequence[Any]) -> List[Any]:
    return [item.to_dict() if isinstance(item, Serializable) else item for item in items]


def _print_verses(verses: Sequence[Verse], output: OutputFormat, title: Optional[str] = None) -> None:
    if output == OutputFormat.JSON:
        console.print_json(data=_serialize(verses))
        return

    table = Table(title=title)
    table.add_column("Id", style="cyan", no_wrap=True)
    table.add_column("Reference", style="green", no_wrap=True)
    table.add_column("Text")
    for verse in verses:
        table.add_row(verse.id, verse.book_chapter_verse(), Text(verse.text))
    console.print(table)
    console.print(f"{len(verses)} verse(s)")


@app.callback()
@handle_errors
def callback(
    ctx: typer.Context,
    database: Optional[str] = typer.Option(
        None, "--db", help="Database URL (default: VERSEKIT_DB_URL)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """VerseKit - Verse addressing, retrieval and search."""
    config = get_config()
    if verbose:
        config.logging.level = "DEBUG"
    config.setup_logging()

    ctx.obj = CliState(
        database_url=database or config.database.url,
        page_size=config.search.page_size,
        query_timeout_seconds=config.search.query_timeout_seconds,
        insert_batch_size=config.database.insert_batch_size,
    )


@app.command()
@handle_errors
def init(ctx: typer.Context):
    """Create the database schema."""
    state = _state(ctx)

    async def run() -> int:
        store = await SQLiteVerseStore.create(state.database_url)
        try:
            return await store.count()
        finally:
            await store.close()

    count = asyncio.run(run())
    console.print(f"[green]Database ready:[/green] {state.database_url} ({count} verses)", highlight=False, soft_wrap=True)


@app.command()
@handle_errors
def load(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="Corpus file (.json, .jsonl or .tsv)"),
    fmt: Optional[str] = typer.Option(
        None, "--format", "-f", help=f"Input format ({', '.join(FORMATS)}); inferred from suffix"
    ),
    batch_size: Optional[int] = typer.Option(
        None, "--batch-size", "-b", min=1, help="Records per transaction"
    ),
):
    """Bulk-load verses from a corpus file."""
    state = _state(ctx)
    if not path.exists():
        err_console.print(Text.assemble(("Error", "red"), f": input file not found: {path}"), soft_wrap=True)
        raise typer.Exit(1)

    size = batch_size or state.insert_batch_size

    async def run() -> int:
        total = 0
        async with _open_service(state) as service:
            for batch in batched(load_records(path, fmt), size):
                total += await service.load(batch)
        return total

    total = asyncio.run(run())
    console.print(f"[green]Loaded {total} verses from {path}[/green]", highlight=False, soft_wrap=True)


def _search_scope(
    book: Optional[str],
    chapter: Optional[int],
    start: Optional[str],
    end: Optional[str],
    ids: Optional[str],
) -> ScopeLike:
    selectors = [book is not None, start is not None or end is not None, ids is not None]
    if sum(selectors) > 1:
        raise typer.BadParameter("Use only one of --book, --from/--to or --ids")
    if chapter is not None and book is None:
        raise typer.BadParameter("--chapter requires --book")

    if ids is not None:
        return [part.strip() for part in ids.split(",") if part.strip()]
    if start is not None or end is not None:
        if start is None or end is None:
            raise typer.BadParameter("--from and --to must be given together")
        return Reference.parse(start, end)
    if book is not None:
        if chapter is not None:
            return ChapterReference.resolve(_book_key(book), chapter).reference()
        return Reference.for_book(_book_key(book))
    return None


@app.command()
@handle_errors
def search(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Words or phrase to search for"),
    book: Optional[str] = typer.Option(None, "--book", help="Restrict to a book"),
    chapter: Optional[int] = typer.Option(None, "--chapter", help="Restrict to a chapter of --book"),
    start: Optional[str] = typer.Option(None, "--from", help="Range start (book:chapter:verse)"),
    end: Optional[str] = typer.Option(None, "--to", help="Range end (book:chapter:verse)"),
    ids: Optional[str] = typer.Option(None, "--ids", help="Comma-separated verse ids"),
    limit: Optional[int] = typer.Option(None, "--limit", "-l", help="Maximum results"),
    offset: int = typer.Option(0, "--offset", help="Results to skip"),
    output: OutputFormat = typer.Option(OutputFormat.TABLE, "--format", "-o", help="Output format"),
):
    """Ranked search: phrase matches first, then verses containing every word."""
    state = _state(ctx)
    scope = _search_scope(book, chapter, start, end, ids)
    page = limit if limit is not None else state.page_size

    async def run() -> List[Verse]:
        async with _open_service(state) as service:
            return await service.search(query, scope, limit=page, offset=offset)

    _print_verses(asyncio.run(run()), output, title=f"Search: {query}")


@app.command("chapter")
@handle_errors
def chapter_command(
    ctx: typer.Context,
    book: str = typer.Argument(..., help="Book name, abbreviation or number"),
    chapter: int = typer.Argument(..., help="Chapter number"),
    output: OutputFormat = typer.Option(OutputFormat.TABLE, "--format", "-o", help="Output format"),
):
    """Show every verse of one chapter."""
    state = _state(ctx)
    entry = BIBLE.book(_book_key(book))

    async def run() -> List[Verse]:
        async with _open_service(state) as service:
            return await service.fetch_chapter(entry.index, chapter)

    _print_verses(asyncio.run(run()), output, title=f"{entry.name} {chapter}")


@app.command("book")
@handle_errors
def book_command(
    ctx: typer.Context,
    book: str = typer.Argument(..., help="Book name, abbreviation or number"),
    limit: Optional[int] = typer.Option(None, "--limit", "-l", help="Maximum verses"),
    offset: int = typer.Option(0, "--offset", help="Verses to skip"),
    output: OutputFormat = typer.Option(OutputFormat.TABLE, "--format", "-o", help="Output format"),
):
    """Show the verses of a whole book."""
    state = _state(ctx)
    entry = BIBLE.book(_book_key(book))

    async def run() -> List[Verse]:
        async with _open_service(state) as service:
            if limit is None:
                return await service.fetch_book(entry.index, offset=offset)
            return await service.fetch_book(entry.index, limit=limit, offset=offset)

    _print_verses(asyncio.run(run()), output, title=entry.name)


@app.command()
@handle_errors
def verses(
    ctx: typer.Context,
    ids: List[str] = typer.Argument(..., help="Verse ids (book:chapter:verse)"),
    output: OutputFormat = typer.Option(OutputFormat.TABLE, "--format", "-o", help="Output format"),
):
    """Show the given verses in the order requested."""
    state = _state(ctx)

    async def run() -> List[Verse]:
        async with _open_service(state) as service:
            return await service.fetch_by_ids(ids)

    _print_verses(asyncio.run(run()), output)


@app.command("expand")
@handle_errors
def expand_command(
    start: str = typer.Argument(..., help="First address (book:chapter:verse)"),
    end: str = typer.Argument(..., help="Last address (book:chapter:verse)"),
    output: OutputFormat = typer.Option(OutputFormat.TABLE, "--format", "-o", help="Output format"),
):
    """List every address between two addresses (in either order)."""
    reference = Reference.parse(start, end).fixup()
    addresses = expand(reference.start, reference.end)

    if output == OutputFormat.JSON:
        console.print_json(data=[address.id for address in addresses])
        return

    table = Table(title=f"{reference.start.book_chapter_verse()} - {reference.end.book_chapter_verse()}")
    table.add_column("Id", style="cyan", no_wrap=True)
    table.add_column("Reference", style="green")
    for address in addresses:
        table.add_row(address.id, address.book_chapter_verse())
    console.print(table)
    console.print(f"{len(addresses)} address(es)")


@app.command()
@handle_errors
def share(
    ctx: typer.Context,
    ids: List[str] = typer.Argument(..., help="Verse ids from one book"),
):
    """Print a citation with the verse text, ready to share."""
    state = _state(ctx)
    addresses = [Address.parse(value) for value in ids]

    async def run() -> List[Verse]:
        async with _open_service(state) as service:
            return await service.fetch_by_ids(addresses)

    found = asyncio.run(run())
    missing = sorted(set(addresses) - {verse.address for verse in found})
    if missing:
        err_console.print(
            f"[yellow]Not in corpus: {', '.join(address.id for address in missing)}[/yellow]",
            highlight=False,
        )
    if not found:
        raise typer.Exit(1)

    console.print(create_share_text(found), markup=False, highlight=False, soft_wrap=True)


@app.command()
def books(
    output: OutputFormat = typer.Option(OutputFormat.TABLE, "--format", "-o", help="Output format"),
):
    """List the book catalog."""
    if output == OutputFormat.JSON:
        console.print_json(data=[
            {
                "index": book.index,
                "name": book.name,
                "short_name": book.short_name,
                "testament": book.testament.value,
                "chapters": book.total_chapters,
                "verses": book.verse_count,
            }
            for book in BIBLE
        ])
        return

    table = Table(title="Books")
    table.add_column("#", justify="right")
    table.add_column("Name", style="cyan")
    table.add_column("Abbrev")
    table.add_column("Testament")
    table.add_column("Chapters", justify="right")
    table.add_column("Verses", justify="right", style="green")
    for book in BIBLE:
        table.add_row(
            str(book.index),
            book.name,
            book.short_name,
            book.testament.value,
            str(book.total_chapters),
            str(book.verse_count),
        )
    console.print(table)


def main():
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
