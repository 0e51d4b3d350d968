"""Offset-stable text insertion."""

from collections.abc import Iterable

from .model import Insertion


def to_inline_html_comment(text: str) -> str:
    return f"<!--{text}-->"


def id_string(identifier: int, comment: bool = False) -> str:
    """Marker text for a note identifier, optionally wrapped in an HTML comment."""
    marker = f"ID: {identifier}"
    return to_inline_html_comment(marker) if comment else marker


def insert_into_string(text: str, insertions: Iterable[tuple[int, str]]) -> str:
    """
    Insert every (position, string) pair into text at once.

    Positions refer to the original text. Insertions are applied in ascending
    position order (stable for ties) while a running offset tracks how far
    earlier insertions have pushed the rest of the buffer.

        >>> insert_into_string("0123456789", [(7, "Y"), (3, "X")])
        '012X3456Y789'
    """
    offset = 0
    for position, insert_str in sorted(
        (Insertion(*pair) for pair in insertions), key=lambda ins: ins.position
    ):
        at = position + offset
        text = text[:at] + insert_str + text[at:]
        offset += len(insert_str)
    return text
