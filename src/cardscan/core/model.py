from __future__ import annotations

import copy
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, NamedTuple

FrozenFields = dict[str, dict[str, str]]


@dataclass(frozen=True)
class Span:
    start: int  # character offsets into one text buffer, half-open
    end: int

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(f"Span start {self.start} is after end {self.end}")

    @classmethod
    def of(cls, match: re.Match) -> "Span":
        return cls(match.start(), match.end())


class Insertion(NamedTuple):
    position: int  # offset in the original text
    text: str


@dataclass(frozen=True)
class HeadingNode:
    title: str
    level: int
    start: int


@dataclass
class AnkiNote:
    model_name: str
    fields: dict[str, str] = field(default_factory=dict)
    tags: list[str] = field(default_factory=list)
    deck_name: str = "Default"
    options: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_template(cls, template: dict[str, Any], model_name: str) -> "AnkiNote":
        """Build a fresh note from the default note template (deep copied)."""
        template = copy.deepcopy(template)
        return cls(
            model_name=model_name,
            fields=dict(template.get("fields", {})),
            tags=list(template.get("tags", [])),
            deck_name=template.get("deckName", "Default"),
            options=dict(template.get("options", {})),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "deckName": self.deck_name,
            "modelName": self.model_name,
            "fields": dict(self.fields),
            "options": dict(self.options),
            "tags": list(self.tags),
        }


class ParseOutcome(Enum):
    NEW = "new"
    EXISTING = "existing"
    NOT_A_NOTE = "not_a_note"  # e.g. a cloze type without any cloze deletion
    UNRECOGNIZED_MODEL = "unrecognized_model"


@dataclass
class ParsedNote:
    outcome: ParseOutcome
    note: AnkiNote
    identifier: int | None = None

    @classmethod
    def new(cls, note: AnkiNote) -> "ParsedNote":
        return cls(ParseOutcome.NEW, note)

    @classmethod
    def existing(cls, note: AnkiNote, identifier: int) -> "ParsedNote":
        return cls(ParseOutcome.EXISTING, note, identifier)

    @classmethod
    def not_a_note(cls, note: AnkiNote) -> "ParsedNote":
        return cls(ParseOutcome.NOT_A_NOTE, note)

    @classmethod
    def unrecognized_model(cls, note: AnkiNote) -> "ParsedNote":
        return cls(ParseOutcome.UNRECOGNIZED_MODEL, note)


@dataclass
class Finding:
    severity: str  # "info" | "warn" | "error"
    message: str
    span: Span | None = None


@dataclass
class ScanData:
    """Everything a scan needs, fully materialized before scanning starts."""
    fields_dict: dict[str, list[str]]
    existing_ids: set[int]
    note_regexp: re.Pattern
    inline_regexp: re.Pattern
    deck_regexp: re.Pattern
    tag_regexp: re.Pattern
    frozen_regexp: re.Pattern
    empty_regexp: re.Pattern
    template: dict[str, Any]
    custom_regexps: dict[str, str] = field(default_factory=dict)
    context_fields: dict[str, str] = field(default_factory=dict)
    file_link_fields: dict[str, str] = field(default_factory=dict)
    add_context: bool = False
    comment: bool = False
    curly_cloze: bool = False
    highlights_to_cloze: bool = False
    add_obs_tags: bool = False


@dataclass
class ScanState:
    """Accumulated results of one document scan."""
    frozen_fields: FrozenFields = field(default_factory=dict)
    target_deck: str = ""
    global_tags: str = ""
    ignore_spans: list[Span] = field(default_factory=list)

    notes_to_add: list[AnkiNote] = field(default_factory=list)
    id_indexes: list[int] = field(default_factory=list)
    inline_notes_to_add: list[AnkiNote] = field(default_factory=list)
    inline_id_indexes: list[int] = field(default_factory=list)
    regex_notes_to_add: list[AnkiNote] = field(default_factory=list)
    regex_id_indexes: list[int] = field(default_factory=list)

    all_notes_to_add: list[AnkiNote] = field(default_factory=list)
    notes_to_edit: list[ParsedNote] = field(default_factory=list)
    notes_to_delete: list[int] = field(default_factory=list)
    findings: list[Finding] = field(default_factory=list)
