"""Tests for file storage."""

import tempfile
from pathlib import Path

from cardscan.adapters.fs_storage import FsStorage


def test_read_write_roundtrip():
    with tempfile.TemporaryDirectory() as tmpdir:
        storage = FsStorage(Path(tmpdir))
        assert storage.read_raw("missing.md") is None

        storage.write_raw("sub/note.md", "START\nBasic\nq\nEND\n")
        assert storage.read_raw("sub/note.md") == "START\nBasic\nq\nEND\n"
        assert not (Path(tmpdir) / "sub" / "note.md.tmp").exists()


def test_relative_path():
    with tempfile.TemporaryDirectory() as tmpdir:
        storage = FsStorage(Path(tmpdir))
        assert storage.relative(Path(tmpdir) / "a" / "b.md") == "a/b.md"


def test_url_quotes_vault_and_file():
    storage = FsStorage(Path("vault"), vault_name="My Vault")
    assert storage.url("dir/note one.md") == (
        "obsidian://open?vault=My%20Vault&file=dir%2Fnote%20one.md"
    )


def test_vault_name_defaults_to_directory():
    assert FsStorage(Path("/tmp/notes")).vault_name == "notes"
