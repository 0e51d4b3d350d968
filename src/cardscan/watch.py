"""Watch mode for cardscan - rescan Markdown files as they change."""

import json
import logging
import signal
import sys
import threading
import time
from pathlib import Path
from typing import Any, Callable

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

logger = logging.getLogger(__name__)


class DebounceHandler(FileSystemEventHandler):
    """File system event handler with debouncing."""

    def __init__(
        self,
        vault_path: Path,
        on_batch: Callable[[set[Path]], None] | None,
        debounce_ms: int = 150,
    ):
        super().__init__()
        self.vault_path = vault_path
        self.on_batch = on_batch
        self.debounce_ms = debounce_ms

        self.changed: set[Path] = set()
        self._lock = threading.Lock()
        self.last_event_time = 0.0

    def _should_skip(self, path: Path) -> bool:
        """Check if file should be skipped."""
        name = path.name

        # Skip hidden files
        if name.startswith("."):
            return True

        # Skip temp/swap files
        if name.endswith("~") or name.endswith(".swp") or name.startswith(".#"):
            return True

        # Only process .md files
        if not name.endswith(".md"):
            return True

        return False

    def _record(self, event: FileSystemEvent, path_attr: str = "src_path") -> None:
        if event.is_directory:
            return
        path = Path(str(getattr(event, path_attr)))
        if not self._should_skip(path):
            with self._lock:
                self.changed.add(path)
                self.last_event_time = time.time()

    def on_created(self, event: FileSystemEvent) -> None:
        self._record(event)

    def on_modified(self, event: FileSystemEvent) -> None:
        self._record(event)

    def on_moved(self, event: FileSystemEvent) -> None:
        self._record(event, "dest_path")

    def check_and_flush(self) -> None:
        """Check if debounce period has elapsed and flush if so."""
        if not self.changed:
            return

        elapsed = (time.time() - self.last_event_time) * 1000
        if elapsed >= self.debounce_ms:
            self.flush()

    def flush(self) -> None:
        """Process accumulated events."""
        with self._lock:
            if not self.changed:
                return
            changed = set(self.changed)
            self.changed.clear()

        if self.on_batch:
            self.on_batch(changed)


def watch_vault(
    rt: Any,
    debounce_ms: int = 150,
    quiet: bool = False,
    json_output: bool = False,
) -> int:
    """
    Watch the vault directory and rescan each Markdown file that changes.

    Args:
        rt: Runtime with storage and scan data
        debounce_ms: Debounce window in milliseconds
        quiet: Suppress output
        json_output: Output JSON events instead of human-readable

    Returns:
        Exit code
    """
    vault_path = rt.storage.root
    if not vault_path.exists():
        print(f"Error: Vault not found: {vault_path}", file=sys.stderr)
        return 1

    running = True

    def handle_batch(changed: set[Path]) -> None:
        for path in sorted(changed):
            if not path.exists():
                continue
            rel = rt.storage.relative(path)
            try:
                state = rt.scanner_for(rel).scan()
            except Exception as e:
                logger.exception("Scan of %s failed", rel)
                if json_output:
                    print(json.dumps({"type": "error", "file": rel, "message": str(e)}), flush=True)
                continue

            if json_output:
                event = {
                    "type": "scan",
                    "file": rel,
                    "add": len(state.all_notes_to_add),
                    "edit": len(state.notes_to_edit),
                    "delete": len(state.notes_to_delete),
                    "warnings": [f.message for f in state.findings],
                }
                print(json.dumps(event), flush=True)
            elif not quiet:
                print(
                    f"{rel}: +{len(state.all_notes_to_add)} "
                    f"~{len(state.notes_to_edit)} -{len(state.notes_to_delete)}",
                    flush=True,
                )

    def signal_handler(signum: int, frame: Any) -> None:
        nonlocal running
        running = False
        if not quiet and not json_output:
            print("\nShutting down...", flush=True)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    handler = DebounceHandler(vault_path, handle_batch, debounce_ms)
    observer = Observer()
    observer.schedule(handler, str(vault_path), recursive=True)

    if not quiet and not json_output:
        print(f"Watching {vault_path} (debounce: {debounce_ms}ms)", flush=True)
        print("Press Ctrl+C to stop", flush=True)

    observer.start()

    try:
        while running:
            time.sleep(0.1)
            handler.check_and_flush()
    finally:
        handler.flush()
        observer.stop()
        observer.join()

    if not quiet and not json_output:
        print("Watch stopped", flush=True)

    return 0
