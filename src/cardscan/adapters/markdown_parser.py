import re

from ..core.model import HeadingNode
from ..core.ports import OutlineParser

HEADING_RE = re.compile(r"^(#{1,6})\s+(.+)$")


class MarkdownOutline(OutlineParser):
    """ATX headings of a Markdown document, skipping fenced code blocks."""

    def headings(self, text: str) -> list[HeadingNode]:
        out: list[HeadingNode] = []
        offset = 0
        in_fence = False

        for ln in text.splitlines(keepends=True):
            line_stripped = ln.rstrip('\n\r')

            if line_stripped.startswith("```"):
                in_fence = not in_fence
            elif not in_fence:
                heading_match = HEADING_RE.match(line_stripped)
                if heading_match:
                    out.append(
                        HeadingNode(
                            title=heading_match.group(2).strip(),
                            level=len(heading_match.group(1)),
                            start=offset,
                        )
                    )

            offset += len(ln)

        return out
