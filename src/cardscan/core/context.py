"""Breadcrumb context for a position inside a document."""

from collections.abc import Sequence

from .model import HeadingNode

CONTEXT_SEP = " > "


def context_at_index(
    path: str, headings: Sequence[HeadingNode] | None, position: int
) -> str:
    """
    Get the breadcrumb for position: the file path followed by the headings
    whose sections enclose it.

    Headings are walked in document order up to the first one starting at or
    after position. A heading closes every open heading of the same or a
    deeper level before it is opened itself.
    """
    if headings is None:
        return path

    stack: list[HeadingNode] = []
    for heading in sorted(headings, key=lambda h: h.start):
        if heading.start >= position:
            break
        while stack and stack[-1].level >= heading.level:
            stack.pop()
        stack.append(heading)

    return CONTEXT_SEP.join([path, *(h.title for h in stack)])
