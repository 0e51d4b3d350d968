"""Scanning engine: spans, note extractors, document scanner, ID writer."""

from .model import AnkiNote, HeadingNode, ParsedNote, ParseOutcome, ScanData, ScanState, Span
from .patch import id_string, insert_into_string
from .scanner import DocumentScanner
from .spans import contained_in, findignore, spans

__all__ = [
    "AnkiNote",
    "DocumentScanner",
    "HeadingNode",
    "ParsedNote",
    "ParseOutcome",
    "ScanData",
    "ScanState",
    "Span",
    "contained_in",
    "findignore",
    "id_string",
    "insert_into_string",
    "spans",
]
