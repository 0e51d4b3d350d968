"""AnkiConnect request payloads built from a finished scan.

Nothing here talks to Anki; the payloads are plain dicts for whatever client
sends them.
"""

from dataclasses import dataclass, field
from typing import Any

from .core.model import AnkiNote, ScanState

ANKICONNECT_VERSION = 6

Request = dict[str, Any]


def request(action: str, **params: Any) -> Request:
    return {"action": action, "version": ANKICONNECT_VERSION, "params": params}


def multi(actions: list[Request]) -> Request:
    return request("multi", actions=actions)


def add_note(note: AnkiNote) -> Request:
    return request("addNote", note=note.to_dict())


def delete_notes(note_ids: list[int]) -> Request:
    return request("deleteNotes", notes=note_ids)


def update_note_fields(note_id: int, fields: dict[str, str]) -> Request:
    return request("updateNoteFields", note={"id": note_id, "fields": fields})


def notes_info(note_ids: list[int]) -> Request:
    return request("notesInfo", notes=note_ids)


def change_deck(card_ids: list[int], deck: str) -> Request:
    return request("changeDeck", cards=card_ids, deck=deck)


def remove_tags(note_ids: list[int], tags: str) -> Request:
    return request("removeTags", notes=note_ids, tags=tags)


def add_tags(note_ids: list[int], tags: str) -> Request:
    return request("addTags", notes=note_ids, tags=tags)


@dataclass
class DocumentRequests:
    """
    Requests for one scanned document.

    card_ids and tags come back from a notesInfo round trip and are only
    needed for change_decks() and clear_tags().
    """
    state: ScanState
    card_ids: list[int] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)

    def _edit_ids(self) -> list[int]:
        return [parsed.identifier for parsed in self.state.notes_to_edit]

    def add_notes(self) -> Request:
        return multi([add_note(note) for note in self.state.all_notes_to_add])

    def delete_notes(self) -> Request:
        return delete_notes(list(self.state.notes_to_delete))

    def update_fields(self) -> Request:
        return multi(
            [
                update_note_fields(parsed.identifier, dict(parsed.note.fields))
                for parsed in self.state.notes_to_edit
            ]
        )

    def note_info(self) -> Request:
        return notes_info(self._edit_ids())

    def change_decks(self) -> Request:
        return change_deck(list(self.card_ids), self.state.target_deck)

    def clear_tags(self) -> Request:
        return remove_tags(self._edit_ids(), " ".join(self.tags))

    def add_tags(self) -> Request:
        return multi(
            [
                add_tags(
                    [parsed.identifier],
                    " ".join(parsed.note.tags) + " " + self.state.global_tags,
                )
                for parsed in self.state.notes_to_edit
            ]
        )

    def all(self) -> dict[str, Request]:
        return {
            "add_notes": self.add_notes(),
            "delete_notes": self.delete_notes(),
            "update_fields": self.update_fields(),
            "note_info": self.note_info(),
            "change_decks": self.change_decks(),
            "clear_tags": self.clear_tags(),
            "add_tags": self.add_tags(),
        }
