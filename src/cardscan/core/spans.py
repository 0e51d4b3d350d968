"""Span helpers for matching patterns while skipping ignored regions."""

import re
from collections.abc import Iterator, Sequence

from .model import Span


def spans(pattern: re.Pattern, text: str) -> list[Span]:
    """Return the span of every non-overlapping match of pattern, left to right."""
    return [Span.of(m) for m in pattern.finditer(text)]


def contained_in(span: Span, span_set: Sequence[Span]) -> bool:
    """
    Whether span lies inside any element of span_set.

    One character of leeway is allowed on each side, so a match that differs
    from a masking region only by a boundary newline still counts as inside.
    """
    return any(
        span.start >= element.start - 1 and span.end <= element.end + 1
        for element in span_set
    )


def findignore(
    pattern: re.Pattern, text: str, ignore_spans: Sequence[Span]
) -> Iterator[re.Match]:
    """
    Yield matches of pattern in text that are not inside ignore_spans.

    ignore_spans is read again before every yield, not copied up front. A
    caller may append to (or pop from) the same list while consuming the
    generator, and every later match is filtered against the list as it is
    at that moment. The generator cannot be restarted.
    """
    for match in pattern.finditer(text):
        if not contained_in(Span.of(match), ignore_spans):
            yield match
