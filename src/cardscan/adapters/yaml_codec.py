import io
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

DEFAULT_NOTE_TYPES = {"Basic": ["Front", "Back"]}


@dataclass
class CollectionSnapshot:
    """
    What the note store looked like at the last sync: field names per note
    type and the identifiers of every note it holds.
    """
    note_types: dict[str, list[str]] = field(
        default_factory=lambda: {k: list(v) for k, v in DEFAULT_NOTE_TYPES.items()}
    )
    existing_ids: set[int] = field(default_factory=set)


def decode_snapshot(text: str) -> CollectionSnapshot:
    raw = yaml.safe_load(io.StringIO(text)) or {}
    if not isinstance(raw, dict):
        raise ValueError("Collection snapshot must be a mapping")

    note_types = raw.get("note_types") or DEFAULT_NOTE_TYPES
    if not isinstance(note_types, dict):
        raise ValueError("note_types must map note type names to field lists")
    for name, fields in note_types.items():
        if not isinstance(fields, list) or not fields:
            raise ValueError(f"Note type {name!r} needs a non-empty list of fields")

    try:
        existing_ids = {int(i) for i in raw.get("existing_ids") or []}
    except (TypeError, ValueError) as e:
        raise ValueError(f"existing_ids must be integers: {e}") from e

    return CollectionSnapshot(
        note_types={str(k): [str(f) for f in v] for k, v in note_types.items()},
        existing_ids=existing_ids,
    )


def encode_snapshot(snapshot: CollectionSnapshot) -> str:
    buf = io.StringIO()
    yaml.safe_dump(
        {
            "note_types": snapshot.note_types,
            "existing_ids": sorted(snapshot.existing_ids),
        },
        buf,
        sort_keys=False,
        allow_unicode=True,
    )
    return buf.getvalue()


def load_snapshot(path: Path | None) -> CollectionSnapshot:
    """Read a snapshot file; a missing file means an empty collection."""
    if path is None or not path.exists():
        return CollectionSnapshot()
    return decode_snapshot(path.read_text(encoding="utf-8"))


def dump_yaml(data: Any) -> str:
    buf = io.StringIO()
    yaml.safe_dump(data, buf, sort_keys=False, allow_unicode=True)
    return buf.getvalue()


def save_snapshot(path: Path, snapshot: CollectionSnapshot) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(encode_snapshot(snapshot), encoding="utf-8")
