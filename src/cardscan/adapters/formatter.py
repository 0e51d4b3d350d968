"""Default field formatter.

Converts curly-brace and highlight clozes, marks highlights and turns line
breaks into ``<br>``. Markdown, math and code rendering are left to richer
formatters plugged in through the FieldFormatter protocol.
"""

import re

from ..core.model import AnkiNote, FrozenFields
from ..core.ports import FieldFormatter

CURLY_CLOZE_RE = re.compile(
    r"(?<!{){(?:c?(\d+)[:|])?(?!{)((?:[^\n][\n]?)+?)(?<!})}(?!})"
)
HIGHLIGHT_RE = re.compile(r"==(.+?)==")


class DefaultFormatter(FieldFormatter):
    def _clozes(self, text: str, pattern: re.Pattern, group: int) -> str:
        counter = 0

        def repl(m: re.Match) -> str:
            nonlocal counter
            explicit = m.group(1) if group == 2 else None
            if explicit:
                number = int(explicit)
            else:
                counter += 1
                number = counter
            return "{{c%d::%s}}" % (number, m.group(group))

        return pattern.sub(repl, text)

    def format(self, text: str, cloze: bool, highlights_to_cloze: bool) -> str:
        if cloze:
            text = self._clozes(text, CURLY_CLOZE_RE, 2)
        if highlights_to_cloze:
            text = self._clozes(text, HIGHLIGHT_RE, 1)
        else:
            text = HIGHLIGHT_RE.sub(r"<mark>\1</mark>", text)
        return text.replace("\r\n", "\n").replace("\n", "<br>")

    def format_note_with_url(self, note: AnkiNote, url: str, field: str | None) -> None:
        if field and field in note.fields:
            note.fields[field] += (
                f'<br><a href="{url}" '
                f'class="obsidian-link">Obsidian</a>'
            )

    def format_note_with_frozen_fields(
        self, note: AnkiNote, frozen_fields: FrozenFields
    ) -> None:
        frozen = frozen_fields.get(note.model_name, {})
        for name in note.fields:
            note.fields[name] += frozen.get(name, "")
