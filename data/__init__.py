"""
VerseKit - Data Module

Corpus file readers producing ``VerseRecord`` rows for bulk loading.
"""
from data.loaders import (
    FORMATS,
    batched,
    detect_format,
    load_records,
    read_json,
    read_jsonl,
    read_tsv,
    record_from_object,
)

__all__ = [
    "FORMATS",
    "batched",
    "detect_format",
    "load_records",
    "read_json",
    "read_jsonl",
    "read_tsv",
    "record_from_object",
]
