"""
VerseKit - Corpus Loaders

Readers turning corpus files into ``VerseRecord`` rows for bulk insert.

Supported formats (chosen by file suffix unless given explicitly):

- ``.json``: a list of objects, or an object mapping id -> text
- ``.jsonl``: one object per line
- ``.tsv`` / ``.txt``: ``id<TAB>text`` per line

Objects carry either ``{"id": "1:1:1", "text": ...}`` or
``{"book": 1, "chapter": 1, "verse": 1, "text": ...}``.
"""
import csv
import json
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Union

from core.errors import ErrorContext, VerseKitValidationError
from db.interfaces import VerseRecord
from observability.logging import get_logger

logger = get_logger(__name__)

FORMATS = ("json", "jsonl", "tsv")

_SUFFIXES: Dict[str, str] = {
    ".json": "json",
    ".jsonl": "jsonl",
    ".ndjson": "jsonl",
    ".tsv": "tsv",
    ".txt": "tsv",
}


def _format_error(path: Path, message: str, line: Optional[int] = None) -> VerseKitValidationError:
    location = f"{path}:{line}" if line is not None else str(path)
    return VerseKitValidationError(
        f"{location}: {message}",
        field_name="corpus",
        context=ErrorContext(
            operation="load",
            component="data.loaders",
            metadata={"path": str(path), "line": line},
        ),
    )


def detect_format(path: Union[str, Path]) -> str:
    """Infer the corpus format from the file suffix."""
    path = Path(path)
    fmt = _SUFFIXES.get(path.suffix.lower())
    if fmt is None:
        raise _format_error(path, f"cannot infer format from suffix {path.suffix!r}")
    return fmt


def record_from_object(obj: Any) -> VerseRecord:
    """Build a record from one decoded JSON object."""
    if not isinstance(obj, dict):
        raise VerseKitValidationError(f"Expected an object, got {type(obj).__name__}")
    if "text" not in obj:
        raise VerseKitValidationError("Missing 'text'", field_name="text")
    if "id" in obj:
        verse_id = str(obj["id"])
    elif all(key in obj for key in ("book", "chapter", "verse")):
        verse_id = f"{obj['book']}:{obj['chapter']}:{obj['verse']}"
    else:
        raise VerseKitValidationError(
            "Expected 'id' or 'book'/'chapter'/'verse'",
            field_name="id",
        )
    return VerseRecord(id=verse_id, text=obj["text"])


def read_json(path: Union[str, Path]) -> Iterator[VerseRecord]:
    path = Path(path)
    with path.open(encoding="utf-8") as handle:
        try:
            payload = json.load(handle)
        except json.JSONDecodeError as e:
            raise _format_error(path, f"invalid JSON: {e}", e.lineno) from e

    if isinstance(payload, dict):
        for verse_id, text in payload.items():
            try:
                yield VerseRecord(id=verse_id, text=text)
            except VerseKitValidationError as e:
                raise _format_error(path, e.message) from e
    elif isinstance(payload, list):
        for index, obj in enumerate(payload):
            try:
                yield record_from_object(obj)
            except VerseKitValidationError as e:
                raise _format_error(path, f"item {index}: {e.message}") from e
    else:
        raise _format_error(path, "expected a list or an object at top level")


def read_jsonl(path: Union[str, Path]) -> Iterator[VerseRecord]:
    path = Path(path)
    with path.open(encoding="utf-8") as handle:
        for line_number, line in enumerate(handle, start=1):
            if not line.strip():
                continue
            try:
                yield record_from_object(json.loads(line))
            except json.JSONDecodeError as e:
                raise _format_error(path, f"invalid JSON: {e.msg}", line_number) from e
            except VerseKitValidationError as e:
                raise _format_error(path, e.message, line_number) from e


def read_tsv(path: Union[str, Path]) -> Iterator[VerseRecord]:
    path = Path(path)
    with path.open(encoding="utf-8", newline="") as handle:
        reader = csv.reader(handle, delimiter="\t", quoting=csv.QUOTE_NONE)
        for row in reader:
            if not row or not "".join(row).strip():
                continue
            if len(row) < 2:
                raise _format_error(path, "expected id<TAB>text", reader.line_num)
            try:
                yield VerseRecord(id=row[0].strip(), text="\t".join(row[1:]))
            except VerseKitValidationError as e:
                raise _format_error(path, e.message, reader.line_num) from e


_READERS = {
    "json": read_json,
    "jsonl": read_jsonl,
    "tsv": read_tsv,
}


def load_records(path: Union[str, Path], fmt: Optional[str] = None) -> Iterator[VerseRecord]:
    """
    Stream records from a corpus file.

    Raises:
        VerseKitValidationError: On unknown formats or malformed rows
            (message carries path and line)
    """
    path = Path(path)
    fmt = fmt or detect_format(path)
    reader = _READERS.get(fmt)
    if reader is None:
        raise _format_error(path, f"unknown format {fmt!r} (expected one of {', '.join(FORMATS)})")
    logger.info("Loading corpus", path=str(path), format=fmt)
    return reader(path)


def batched(records: Iterable[VerseRecord], size: int) -> Iterator[List[VerseRecord]]:
    """Group records into lists of at most ``size``."""
    if size < 1:
        raise ValueError("Batch size must be positive")
    batch: List[VerseRecord] = []
    for record in records:
        batch.append(record)
        if len(batch) == size:
            yield batch
            batch = []
    if batch:
        yield batch
