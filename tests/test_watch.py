"""Tests for watch mode functionality."""

import tempfile
import threading
from pathlib import Path

from watchdog.events import FileCreatedEvent, FileModifiedEvent, DirModifiedEvent

from cardscan.watch import DebounceHandler


def test_watch_skip_temp_files():
    """Test that watch mode skips temp and swap files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        vault_path = Path(tmpdir)
        handler = DebounceHandler(vault_path, None, debounce_ms=50)

        temp_files = [
            vault_path / "test.swp",
            vault_path / "test~",
            vault_path / ".#test.md",
            vault_path / ".hidden.md",
            vault_path / "image.png",
        ]

        for temp_file in temp_files:
            assert handler._should_skip(temp_file)
            handler.on_created(FileCreatedEvent(str(temp_file)))

        assert not handler._should_skip(vault_path / "note.md")
        assert len(handler.changed) == 0


def test_watch_ignores_directories():
    with tempfile.TemporaryDirectory() as tmpdir:
        handler = DebounceHandler(Path(tmpdir), None)
        handler.on_modified(DirModifiedEvent(str(Path(tmpdir) / "sub.md")))
        assert len(handler.changed) == 0


def test_watch_debounce():
    """Test that debouncing coalesces multiple events."""
    with tempfile.TemporaryDirectory() as tmpdir:
        vault_path = Path(tmpdir)

        batches = []
        handler = DebounceHandler(vault_path, lambda changed: batches.append(changed), debounce_ms=100)

        note1 = vault_path / "note1.md"
        note2 = vault_path / "note2.md"
        handler.on_created(FileCreatedEvent(str(note1)))
        handler.on_modified(FileModifiedEvent(str(note1)))
        handler.on_modified(FileModifiedEvent(str(note2)))

        handler.flush()

        assert batches == [{note1, note2}]
        assert len(handler.changed) == 0

        # Nothing pending, nothing flushed
        handler.flush()
        assert len(batches) == 1


def test_watch_check_and_flush_waits_for_quiet_period():
    with tempfile.TemporaryDirectory() as tmpdir:
        vault_path = Path(tmpdir)
        batches = []
        handler = DebounceHandler(vault_path, lambda changed: batches.append(changed), debounce_ms=60_000)

        handler.on_modified(FileModifiedEvent(str(vault_path / "note.md")))
        handler.check_and_flush()
        assert batches == []

        handler.debounce_ms = 0
        handler.check_and_flush()
        assert len(batches) == 1


def test_watch_events_from_another_thread_are_not_lost():
    """Events recorded while flushing land in this batch or the next one."""
    with tempfile.TemporaryDirectory() as tmpdir:
        vault_path = Path(tmpdir)
        seen = set()
        handler = DebounceHandler(vault_path, seen.update, debounce_ms=0)
        paths = [vault_path / f"note{i}.md" for i in range(500)]

        def produce():
            for path in paths:
                handler.on_modified(FileModifiedEvent(str(path)))

        producer = threading.Thread(target=produce)
        producer.start()
        while producer.is_alive():
            handler.flush()
        producer.join()
        handler.flush()

        assert seen == set(paths)
