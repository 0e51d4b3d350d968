"""Note extractors for the three note syntaxes.

Each extractor carves fields, tags and an optional identifier out of its own
kind of captured text, then hands assembly of the final note to a shared
``FieldParser``.
"""

import re

from .model import AnkiNote, FrozenFields, ParsedNote, ScanData
from .ports import FieldFormatter

TAG_PREFIX = "Tags: "
TAG_SEP = " "
ID_REGEXP_STR = r"\n?(?:<!--)?(?:ID: (\d+).*)"
TAG_REGEXP_STR = r"(Tags: .*)"

ID_REGEXP = re.compile(r"(?:<!--)?ID: (\d+)")
INLINE_TAG_REGEXP = re.compile(r"Tags: (.*)")
INLINE_TYPE_REGEXP = re.compile(r"\[(.*?)\]")
OBS_TAG_REGEXP = re.compile(r"#(\w+)")
ANKI_CLOZE_REGEXP = re.compile(r"{{c\d+::[\s\S]+?}}")


def split_tags(tag_str: str) -> list[str]:
    return [tag for tag in tag_str.split(TAG_SEP) if tag]


def has_clozes(text: str) -> bool:
    return ANKI_CLOZE_REGEXP.search(text) is not None


def note_has_clozes(note: AnkiNote) -> bool:
    return any(has_clozes(value) for value in note.fields.values())


class FieldParser:
    """Formatting and note assembly shared by every extractor."""

    def __init__(
        self,
        formatter: FieldFormatter,
        curly_cloze: bool = False,
        highlights_to_cloze: bool = False,
    ):
        self.formatter = formatter
        self.curly_cloze = curly_cloze
        self.highlights_to_cloze = highlights_to_cloze

    def format_fields(self, note_type: str, raw: dict[str, str]) -> dict[str, str]:
        cloze = "Cloze" in note_type and self.curly_cloze
        return {
            name: self.formatter.format(
                value.strip(), cloze, self.highlights_to_cloze
            ).strip()
            for name, value in raw.items()
        }

    def build(
        self,
        note_type: str,
        fields: dict[str, str],
        tags: list[str],
        deck: str,
        url: str,
        frozen_fields: FrozenFields,
        data: ScanData,
        context: str,
    ) -> AnkiNote:
        note = AnkiNote.from_template(data.template, note_type)
        note.fields = fields
        if url:
            self.formatter.format_note_with_url(
                note, url, data.file_link_fields.get(note_type)
            )
        if frozen_fields:
            self.formatter.format_note_with_frozen_fields(note, frozen_fields)
        if context:
            context_field = data.context_fields.get(note_type)
            if context_field in note.fields:
                note.fields[context_field] += context
        if data.add_obs_tags:
            for name, value in note.fields.items():
                tags = tags + OBS_TAG_REGEXP.findall(value)
                note.fields[name] = OBS_TAG_REGEXP.sub("", value)
        note.tags.extend(tags)
        note.deck_name = deck
        return note

    def outcome(
        self, note_type: str, note: AnkiNote, identifier: int | None
    ) -> ParsedNote:
        """Classify a built note: a cloze type needs at least one deletion."""
        if "Cloze" in note_type and not note_has_clozes(note):
            return ParsedNote.not_a_note(note)
        if identifier is None:
            return ParsedNote.new(note)
        return ParsedNote.existing(note, identifier)


class BlockNoteExtractor:
    """
    A multi-line note: note type on the first line, field lines after it,
    then optional ``Tags: ...`` and ``ID: n`` lines at the end.
    """

    def __init__(self, text: str, field_parser: FieldParser):
        self.field_parser = field_parser
        self.lines = text.strip().split("\n")
        self.identifier = self._pop_identifier()
        self.tags = self._pop_tags()
        self.note_type = self.lines[0] if self.lines else ""

    def _pop_identifier(self) -> int | None:
        m = ID_REGEXP.search(self.lines[-1])
        if m is None:
            return None
        self.lines.pop()
        return int(m.group(1))

    def _pop_tags(self) -> list[str]:
        if self.lines and self.lines[-1].startswith(TAG_PREFIX):
            return split_tags(self.lines.pop()[len(TAG_PREFIX):])
        return []

    def fields(self, fields_dict: dict[str, list[str]]) -> dict[str, str]:
        field_names = fields_dict[self.note_type]
        raw = {name: "" for name in field_names}
        current = field_names[0]
        for line in self.lines[1:]:
            for name in field_names:
                if line.startswith(name + ":"):
                    line = line[len(name) + 1:]
                    current = name
                    break
            raw[current] += line + "\n"
        return self.field_parser.format_fields(self.note_type, raw)

    def parse(
        self,
        deck: str,
        url: str,
        frozen_fields: FrozenFields,
        data: ScanData,
        context: str,
    ) -> ParsedNote:
        if self.note_type not in data.fields_dict:
            return ParsedNote.unrecognized_model(
                AnkiNote.from_template(data.template, self.note_type)
            )
        note = self.field_parser.build(
            self.note_type,
            self.fields(data.fields_dict),
            self.tags,
            deck,
            url,
            frozen_fields,
            data,
            context,
        )
        return self.field_parser.outcome(self.note_type, note, self.identifier)


class InlineNoteExtractor:
    """
    A single-line note: ``[Type] words Field: words Tags: a b ID: n``.
    """

    def __init__(self, text: str, field_parser: FieldParser):
        self.field_parser = field_parser
        self.text = text.strip()
        self.identifier = self._cut_identifier()
        self.tags = self._cut_tags()
        self.note_type = self._cut_note_type()

    def _cut_identifier(self) -> int | None:
        m = ID_REGEXP.search(self.text)
        if m is None:
            return None
        self.text = self.text[:m.start()].strip()
        return int(m.group(1))

    def _cut_tags(self) -> list[str]:
        m = INLINE_TAG_REGEXP.search(self.text)
        if m is None:
            return []
        self.text = self.text[:m.start()].strip()
        return split_tags(m.group(1))

    def _cut_note_type(self) -> str | None:
        m = INLINE_TYPE_REGEXP.search(self.text)
        if m is None:
            return None
        self.text = self.text[m.end():]
        return m.group(1)

    def fields(self, fields_dict: dict[str, list[str]]) -> dict[str, str]:
        field_names = fields_dict[self.note_type]
        raw = {name: "" for name in field_names}
        current = field_names[0]
        for word in self.text.split(" "):
            for name in field_names:
                if word == name + ":":
                    current = name
                    word = ""
            raw[current] += word + " "
        return self.field_parser.format_fields(self.note_type, raw)

    def parse(
        self,
        deck: str,
        url: str,
        frozen_fields: FrozenFields,
        data: ScanData,
        context: str,
    ) -> ParsedNote:
        if self.note_type is None or self.note_type not in data.fields_dict:
            return ParsedNote.unrecognized_model(
                AnkiNote.from_template(data.template, self.note_type or "")
            )
        note = self.field_parser.build(
            self.note_type,
            self.fields(data.fields_dict),
            self.tags,
            deck,
            url,
            frozen_fields,
            data,
            context,
        )
        return self.field_parser.outcome(self.note_type, note, self.identifier)


class RegexNoteExtractor:
    """
    A note matched by a user-supplied pattern. Capture groups fill the
    fields of note_type in order; when tags and/or the identifier were
    searched for, they occupy the trailing groups (identifier last).
    """

    def __init__(
        self,
        match: re.Match,
        note_type: str,
        search_tags: bool,
        search_id: bool,
        field_parser: FieldParser,
    ):
        self.note_type = note_type
        self.field_parser = field_parser
        groups = list(match.groups())
        self.identifier = int(groups.pop()) if search_id else None
        self.tags = split_tags(groups.pop()[len(TAG_PREFIX):]) if search_tags else []
        self.groups = groups

    def fields(self, fields_dict: dict[str, list[str]]) -> dict[str, str]:
        field_names = fields_dict[self.note_type]
        raw = {name: "" for name in field_names}
        for name, value in zip(field_names, self.groups):
            raw[name] = value or ""
        return self.field_parser.format_fields(self.note_type, raw)

    def parse(
        self,
        deck: str,
        url: str,
        frozen_fields: FrozenFields,
        data: ScanData,
        context: str,
    ) -> ParsedNote:
        if self.note_type not in data.fields_dict:
            return ParsedNote.unrecognized_model(
                AnkiNote.from_template(data.template, self.note_type)
            )
        note = self.field_parser.build(
            self.note_type,
            self.fields(data.fields_dict),
            self.tags,
            deck,
            url,
            frozen_fields,
            data,
            context,
        )
        return self.field_parser.outcome(self.note_type, note, self.identifier)
