"""Document scanner: find notes in a document and write new IDs back into it."""

import logging
import re
from collections.abc import Sequence

from .context import context_at_index
from .model import (
    AnkiNote,
    Finding,
    FrozenFields,
    HeadingNode,
    Insertion,
    ParsedNote,
    ParseOutcome,
    ScanData,
    ScanState,
    Span,
)
from .notes import (
    ID_REGEXP_STR,
    TAG_REGEXP_STR,
    BlockNoteExtractor,
    FieldParser,
    InlineNoteExtractor,
    RegexNoteExtractor,
    split_tags,
)
from .patch import id_string, insert_into_string
from .ports import FieldFormatter, NoteExtractor
from .spans import findignore, spans

logger = logging.getLogger(__name__)

INLINE_MATH_REGEXP = re.compile(r"(?<!\$)\$(?=[\S])(?=[^$])[\s\S]*?\S\$")
DISPLAY_MATH_REGEXP = re.compile(r"\$\$[\s\S]*?\$\$")
INLINE_CODE_REGEXP = re.compile(r"(?<!`)`(?=[^`])[\s\S]*?`")
DISPLAY_CODE_REGEXP = re.compile(r"```[\s\S]*?```")


class DocumentScanner:
    """
    Scan one document for notes and rewrite it with assigned identifiers.

    A scanner owns its text buffer and its ScanState; instances share no
    mutable state, so separate documents may be scanned independently.
    """

    def __init__(
        self,
        text: str,
        path: str,
        url: str,
        data: ScanData,
        formatter: FieldFormatter,
        headings: Sequence[HeadingNode] | None = None,
    ):
        self.text = text
        self.original_text = text
        self.path = path
        self.url = url
        self.data = data
        self.headings = headings
        self.field_parser = FieldParser(
            formatter, data.curly_cloze, data.highlights_to_cloze
        )
        self.state: ScanState | None = None

    @property
    def changed(self) -> bool:
        return self.text != self.original_text

    def context_at_index(self, position: int) -> str:
        return context_at_index(self.path, self.headings, position)

    def _context(self, position: int) -> str:
        return self.context_at_index(position) if self.data.add_context else ""

    def _warn(self, state: ScanState, message: str, span: Span | None = None) -> None:
        logger.warning(message)
        state.findings.append(Finding("warn", message, span))

    # Setup

    def frozen_fields(self) -> FrozenFields:
        frozen: FrozenFields = {
            note_type: {name: "" for name in names}
            for note_type, names in self.data.fields_dict.items()
        }
        for match in self.data.frozen_regexp.finditer(self.text):
            note_type, fields = match.group(1), match.group(2)
            if note_type not in self.data.fields_dict:
                continue
            virtual = BlockNoteExtractor(note_type + "\n" + fields, self.field_parser)
            frozen[note_type] = virtual.fields(self.data.fields_dict)
        return frozen

    def target_deck(self) -> str:
        m = self.data.deck_regexp.search(self.text)
        return m.group(1) if m else self.data.template.get("deckName", "Default")

    def global_tags(self) -> str:
        m = self.data.tag_regexp.search(self.text)
        return m.group(1) if m else ""

    def spans_to_ignore(self) -> list[Span]:
        ignore = spans(self.data.frozen_regexp, self.text)
        for pattern in (self.data.deck_regexp, self.data.tag_regexp):
            m = pattern.search(self.text)
            if m:
                ignore.append(Span.of(m))
        for pattern in (
            self.data.note_regexp,
            self.data.inline_regexp,
            INLINE_MATH_REGEXP,
            DISPLAY_MATH_REGEXP,
            INLINE_CODE_REGEXP,
            DISPLAY_CODE_REGEXP,
        ):
            ignore.extend(spans(pattern, self.text))
        return ignore

    def setup_scan(self) -> ScanState:
        return ScanState(
            frozen_fields=self.frozen_fields(),
            target_deck=self.target_deck(),
            global_tags=self.global_tags(),
            ignore_spans=self.spans_to_ignore(),
        )

    # Passes

    def _parse(self, extractor: NoteExtractor, state: ScanState, position: int) -> ParsedNote:
        return extractor.parse(
            state.target_deck,
            self.url,
            state.frozen_fields,
            self.data,
            self._context(position),
        )

    def _add_global_tags(self, note: AnkiNote, state: ScanState) -> None:
        note.tags.extend(split_tags(state.global_tags))

    def _route(
        self,
        parsed: ParsedNote,
        state: ScanState,
        notes: list[AnkiNote],
        positions: list[int],
        position: int,
        span: Span,
    ) -> None:
        """Queue a parsed block or inline note as new or edit, or report it."""
        if parsed.outcome is ParseOutcome.NEW:
            self._add_global_tags(parsed.note, state)
            notes.append(parsed.note)
            positions.append(position)
        elif parsed.outcome is ParseOutcome.NOT_A_NOTE:
            return
        elif parsed.outcome is ParseOutcome.UNRECOGNIZED_MODEL:
            self._warn(
                state,
                f"Did not recognise note type {parsed.note.model_name} in file {self.path}",
                span,
            )
        elif parsed.identifier not in self.data.existing_ids:
            self._warn(
                state,
                f"Note with id {parsed.identifier} in file {self.path} does not exist in Anki!",
                span,
            )
        else:
            state.notes_to_edit.append(parsed)

    def scan_notes(self, state: ScanState) -> None:
        for match in self.data.note_regexp.finditer(self.text):
            extractor = BlockNoteExtractor(match.group(1), self.field_parser)
            parsed = self._parse(extractor, state, match.start())
            self._route(
                parsed,
                state,
                state.notes_to_add,
                state.id_indexes,
                match.end(1),
                Span.of(match),
            )

    def scan_inline_notes(self, state: ScanState) -> None:
        for match in self.data.inline_regexp.finditer(self.text):
            extractor = InlineNoteExtractor(match.group(1), self.field_parser)
            parsed = self._parse(extractor, state, match.start())
            self._route(
                parsed,
                state,
                state.inline_notes_to_add,
                state.inline_id_indexes,
                match.end(1),
                Span.of(match),
            )

    def search(self, state: ScanState, note_type: str, regexp_str: str) -> None:
        """
        Find notes of note_type written in a custom pattern.

        The most specific combination (identifier and tags captured) runs
        first. Each match is claimed in state.ignore_spans before it is
        parsed, so less specific combinations skip it; a match that turns out
        not to be a note gives its claim back.
        """
        for search_id in (True, False):
            for search_tags in (True, False):
                pattern = re.compile(
                    regexp_str
                    + (TAG_REGEXP_STR if search_tags else "")
                    + (ID_REGEXP_STR if search_id else ""),
                    re.MULTILINE,
                )
                for match in findignore(pattern, self.text, state.ignore_spans):
                    span = Span.of(match)
                    state.ignore_spans.append(span)
                    extractor = RegexNoteExtractor(
                        match, note_type, search_tags, search_id, self.field_parser
                    )
                    parsed = self._parse(extractor, state, match.start())
                    if parsed.outcome is ParseOutcome.NOT_A_NOTE:
                        state.ignore_spans.pop()
                        continue
                    if parsed.outcome is ParseOutcome.UNRECOGNIZED_MODEL:
                        self._warn(
                            state,
                            f"Did not recognise note type {note_type} in file {self.path}",
                            span,
                        )
                    elif search_id:
                        if parsed.identifier in self.data.existing_ids:
                            state.notes_to_edit.append(parsed)
                        else:
                            self._warn(
                                state,
                                f"Note with id {parsed.identifier} in file {self.path} does not exist in Anki!",
                                span,
                            )
                    else:
                        self._add_global_tags(parsed.note, state)
                        state.regex_notes_to_add.append(parsed.note)
                        state.regex_id_indexes.append(match.end())

    def scan_deletions(self, state: ScanState) -> None:
        for match in self.data.empty_regexp.finditer(self.text):
            state.notes_to_delete.append(int(match.group(1)))

    def scan(self) -> ScanState:
        state = self.setup_scan()
        self.scan_notes(state)
        self.scan_inline_notes(state)
        for note_type, regexp_str in self.data.custom_regexps.items():
            if regexp_str:
                self.search(state, note_type, regexp_str)
        state.all_notes_to_add = [
            *state.notes_to_add,
            *state.inline_notes_to_add,
            *state.regex_notes_to_add,
        ]
        self.scan_deletions(state)
        logger.info(
            "Scanned %s: %d to add, %d to edit, %d to delete",
            self.path,
            len(state.all_notes_to_add),
            len(state.notes_to_edit),
            len(state.notes_to_delete),
        )
        self.state = state
        return state

    # Write-back

    def write_ids(self, note_ids: Sequence[int | None]) -> str:
        """
        Insert identifiers for the notes queued by scan().

        note_ids is aligned with state.all_notes_to_add (block notes, then
        inline, then regex); a None entry means creation failed and nothing
        is written for that note.
        """
        state = self.state
        if state is None:
            raise RuntimeError("write_ids() called before scan()")
        if len(note_ids) != len(state.all_notes_to_add):
            raise ValueError(
                f"Expected {len(state.all_notes_to_add)} note ids, got {len(note_ids)}"
            )

        comment = self.data.comment
        n_block = len(state.notes_to_add)
        n_inline = len(state.inline_notes_to_add)
        inserts: list[Insertion] = []

        for i, pos in enumerate(state.id_indexes):
            nid = note_ids[i]
            if nid:
                inserts.append(Insertion(pos, id_string(nid, comment) + "\n"))

        for i, pos in enumerate(state.inline_id_indexes):
            nid = note_ids[i + n_block]
            if nid:
                inserts.append(Insertion(pos, id_string(nid, comment)))

        for i, pos in enumerate(state.regex_id_indexes):
            nid = note_ids[i + n_block + n_inline]
            if nid:
                inserts.append(Insertion(pos, "\n" + id_string(nid, comment)))

        self.text = insert_into_string(self.text, inserts)
        return self.text

    def remove_empties(self) -> str:
        """Strip every delete marker from the text."""
        self.text = self.data.empty_regexp.sub("", self.text)
        return self.text
