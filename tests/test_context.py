"""Tests for heading breadcrumbs."""

from cardscan.adapters.markdown_parser import MarkdownOutline
from cardscan.core.context import context_at_index
from cardscan.core.model import HeadingNode

HEADINGS = [
    HeadingNode("A", 1, 0),
    HeadingNode("B", 2, 10),
    HeadingNode("C", 1, 20),
]


def test_context_nested():
    assert context_at_index("doc.md", HEADINGS, 15) == "doc.md > A > B"


def test_context_sibling_closes_deeper_scope():
    """A same-level heading closes the previous one and everything under it."""
    assert context_at_index("doc.md", HEADINGS, 25) == "doc.md > C"


def test_context_before_second_heading():
    assert context_at_index("doc.md", HEADINGS, 5) == "doc.md > A"


def test_context_heading_at_position_not_included():
    assert context_at_index("doc.md", HEADINGS, 10) == "doc.md > A"
    assert context_at_index("doc.md", HEADINGS, 0) == "doc.md"


def test_context_shallower_heading_pops_several_levels():
    headings = [
        HeadingNode("A", 1, 0),
        HeadingNode("B", 2, 10),
        HeadingNode("C", 3, 20),
        HeadingNode("D", 2, 30),
    ]
    assert context_at_index("n.md", headings, 25) == "n.md > A > B > C"
    assert context_at_index("n.md", headings, 35) == "n.md > A > D"


def test_context_without_outline():
    assert context_at_index("doc.md", None, 100) == "doc.md"
    assert context_at_index("doc.md", [], 100) == "doc.md"


def test_markdown_outline_skips_fences():
    text = "# A\n\n```\n# not a heading\n```\n## B\n"
    headings = MarkdownOutline().headings(text)
    assert headings == [
        HeadingNode("A", 1, 0),
        HeadingNode("B", 2, text.index("## B")),
    ]
