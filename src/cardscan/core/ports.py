from typing import Protocol

from .model import AnkiNote, FrozenFields, HeadingNode, ParsedNote, ScanData


class NoteExtractor(Protocol):
    """
    Turn one captured piece of text into a note record.

    The block, inline and regex extractors differ only in how the raw text
    was carved out of the surrounding match.
    """

    def parse(
        self,
        deck: str,
        url: str,
        frozen_fields: FrozenFields,
        data: ScanData,
        context: str,
    ) -> ParsedNote:
        pass


class FieldFormatter(Protocol):
    """
    Opaque conversion of raw captured text into card field contents.
    """

    def format(self, text: str, cloze: bool, highlights_to_cloze: bool) -> str:
        pass

    def format_note_with_url(self, note: AnkiNote, url: str, field: str | None) -> None:
        pass

    def format_note_with_frozen_fields(
        self, note: AnkiNote, frozen_fields: FrozenFields
    ) -> None:
        pass


class OutlineParser(Protocol):
    """
    Produce the heading outline of a document, ordered by start offset.
    """

    def headings(self, text: str) -> list[HeadingNode]:
        pass
