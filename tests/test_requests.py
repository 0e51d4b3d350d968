"""Tests for AnkiConnect request payloads."""

from cardscan.core.model import AnkiNote
from cardscan.requests import (
    DocumentRequests,
    add_note,
    change_deck,
    delete_notes,
    multi,
    update_note_fields,
)

from conftest import make_scanner
from test_scanner import DOC


def test_request_shape():
    assert delete_notes([1, 2]) == {
        "action": "deleteNotes",
        "version": 6,
        "params": {"notes": [1, 2]},
    }
    assert update_note_fields(5, {"Front": "x"})["params"] == {
        "note": {"id": 5, "fields": {"Front": "x"}}
    }
    assert change_deck([7], "Geo")["params"] == {"cards": [7], "deck": "Geo"}
    assert multi([])["params"] == {"actions": []}


def test_add_note_payload():
    note = AnkiNote("Basic", {"Front": "q", "Back": "a"}, ["t"], "Geo", {"allowDuplicate": False})
    assert add_note(note)["params"]["note"] == {
        "deckName": "Geo",
        "modelName": "Basic",
        "fields": {"Front": "q", "Back": "a"},
        "options": {"allowDuplicate": False},
        "tags": ["t"],
    }


def test_document_requests_from_scan():
    state = make_scanner(DOC).scan()
    reqs = DocumentRequests(state, card_ids=[42], tags=["old", "tags"])

    add = reqs.add_notes()
    assert add["action"] == "multi"
    assert [a["action"] for a in add["params"]["actions"]] == ["addNote", "addNote"]

    assert reqs.delete_notes()["params"]["notes"] == [111, 222]

    update = reqs.update_fields()["params"]["actions"]
    assert [a["params"]["note"]["id"] for a in update] == [1000]

    assert reqs.note_info()["params"]["notes"] == [1000]
    assert reqs.change_decks()["params"] == {"cards": [42], "deck": "Geo"}
    assert reqs.clear_tags()["params"] == {"notes": [1000], "tags": "old tags"}

    add_tags = reqs.add_tags()["params"]["actions"]
    assert add_tags[0]["params"] == {
        "notes": [1000],
        "tags": "Obsidian_to_Anki geo europe",
    }


def test_document_requests_all_keys():
    state = make_scanner(DOC).scan()
    assert set(DocumentRequests(state).all()) == {
        "add_notes",
        "delete_notes",
        "update_fields",
        "note_info",
        "change_decks",
        "clear_tags",
        "add_tags",
    }
