"""CLI for cardscan - find flashcard notes in Markdown and sync their IDs."""

import argparse
import difflib
import json
import logging
import platform
import sys
from pathlib import Path
from typing import Any

from . import __version__
from .adapters.yaml_codec import dump_yaml, save_snapshot
from .core.model import ScanState
from .core.scanner import DocumentScanner
from .requests import DocumentRequests
from .runtime import build_runtime
from .watch import watch_vault

logger = logging.getLogger(__name__)


def _emit(data: Any, fmt: str) -> None:
    if fmt == "yaml":
        print(dump_yaml(data), end="")
    else:
        print(json.dumps(data, indent=2, ensure_ascii=False))


def _rel(rt: Any, file: str) -> str:
    path = Path(file)
    if path.is_absolute() or path.exists():
        return rt.storage.relative(path)
    return file


def scan_report(scanner: DocumentScanner, state: ScanState) -> dict[str, Any]:
    """Summarize a scan for display."""
    passes = (
        ("block", state.notes_to_add, state.id_indexes),
        ("inline", state.inline_notes_to_add, state.inline_id_indexes),
        ("regex", state.regex_notes_to_add, state.regex_id_indexes),
    )
    return {
        "file": scanner.path,
        "target_deck": state.target_deck,
        "global_tags": state.global_tags,
        "add": [
            {"pass": name, "position": pos, "note": note.to_dict()}
            for name, notes, positions in passes
            for note, pos in zip(notes, positions)
        ],
        "edit": [
            {"id": parsed.identifier, "fields": dict(parsed.note.fields)}
            for parsed in state.notes_to_edit
        ],
        "delete": list(state.notes_to_delete),
        "warnings": [f.message for f in state.findings],
    }


def _parse_ids(values: list[str]) -> list[int | None]:
    ids: list[int | None] = []
    for v in values:
        if v.lower() in ("null", "none", "-"):
            ids.append(None)
        else:
            try:
                ids.append(int(v))
            except ValueError:
                raise ValueError(f"Invalid note id: {v}. Expected an integer or null")
    return ids


def _write_back(rt: Any, scanner: DocumentScanner, dry_run: bool, quiet: bool) -> int:
    if not scanner.changed:
        if not quiet:
            print(f"{scanner.path}: unchanged")
        return 0
    if dry_run:
        diff = difflib.unified_diff(
            scanner.original_text.splitlines(keepends=True),
            scanner.text.splitlines(keepends=True),
            fromfile=f"a/{scanner.path}",
            tofile=f"b/{scanner.path}",
        )
        sys.stdout.writelines(diff)
        return 0
    rt.storage.write_raw(scanner.path, scanner.text)
    if not quiet:
        print(f"{scanner.path}: written")
    return 0


def cmd_scan(args: argparse.Namespace, rt: Any) -> int:
    """Scan a document and report what would be synced."""
    scanner = rt.scanner_for(_rel(rt, args.file))
    state = scanner.scan()
    _emit(scan_report(scanner, state), args.format)
    return 0


def cmd_requests(args: argparse.Namespace, rt: Any) -> int:
    """Print the AnkiConnect requests for a document."""
    scanner = rt.scanner_for(_rel(rt, args.file))
    state = scanner.scan()
    _emit(DocumentRequests(state).all(), args.format)
    return 0


def cmd_write_ids(args: argparse.Namespace, rt: Any) -> int:
    """Insert assigned note IDs into a document."""
    note_ids = _parse_ids(args.ids)
    scanner = rt.scanner_for(_rel(rt, args.file))
    state = scanner.scan()
    if len(note_ids) != len(state.all_notes_to_add):
        print(
            f"Error: {scanner.path} has {len(state.all_notes_to_add)} new notes, "
            f"got {len(note_ids)} ids",
            file=sys.stderr,
        )
        return 1
    scanner.write_ids(note_ids)
    code = _write_back(rt, scanner, args.dry_run, args.quiet)
    written = {nid for nid in note_ids if nid}
    if written and not args.dry_run:
        # Later scans treat these notes as existing
        rt.snapshot.existing_ids |= written
        rt.data.existing_ids |= written
        save_snapshot(rt.snapshot_path, rt.snapshot)
        logger.info("Recorded %d new ids in %s", len(written), rt.snapshot_path)
    return code


def cmd_remove_empties(args: argparse.Namespace, rt: Any) -> int:
    """Strip delete markers from a document."""
    scanner = rt.scanner_for(_rel(rt, args.file))
    scanner.remove_empties()
    return _write_back(rt, scanner, args.dry_run, args.quiet)


def cmd_watch(args: argparse.Namespace, rt: Any) -> int:
    """Watch vault for changes."""
    return watch_vault(
        rt,
        debounce_ms=args.debounce_ms,
        quiet=args.quiet,
        json_output=args.json,
    )


def _configure_logging(verbose: int, quiet: bool) -> None:
    if quiet:
        level = logging.ERROR
    elif verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="cardscan", description="Find flashcard notes in Markdown files"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=(
            f"cardscan {__version__} "
            f"(python {platform.python_version()}, platform {platform.system().lower()})"
        ),
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config file (default: search cwd/cardscan.toml, vault/cardscan.toml)",
    )
    parser.add_argument(
        "--vault",
        type=Path,
        default=None,
        help="Path to vault directory (overrides config)",
    )
    parser.add_argument(
        "--snapshot",
        type=Path,
        default=None,
        help="Path to collection snapshot YAML (overrides config)",
    )
    parser.add_argument(
        "-q", "--quiet", action="store_true", help="Minimize output"
    )
    parser.add_argument(
        "-v", "--verbose", action="count", default=0, help="More log output (repeatable)"
    )
    parser.add_argument(
        "--json", action="store_true", help="Machine-readable output"
    )

    subparsers = parser.add_subparsers(dest="cmd", required=True)

    # scan command
    parser_scan = subparsers.add_parser("scan", help="Report notes found in a file")
    parser_scan.add_argument("file", help="Markdown file (relative to the vault)")
    parser_scan.add_argument(
        "--format", choices=["json", "yaml"], default="json",
        help="Output format (default: json)"
    )

    # requests command
    parser_requests = subparsers.add_parser(
        "requests", help="Print AnkiConnect requests for a file"
    )
    parser_requests.add_argument("file", help="Markdown file (relative to the vault)")
    parser_requests.add_argument(
        "--format", choices=["json", "yaml"], default="json",
        help="Output format (default: json)"
    )

    # write-ids command
    parser_write = subparsers.add_parser(
        "write-ids", help="Insert assigned note IDs into a file"
    )
    parser_write.add_argument("file", help="Markdown file (relative to the vault)")
    parser_write.add_argument(
        "ids", nargs="*",
        help="One id per new note, in scan order; 'null' where creation failed",
    )
    parser_write.add_argument(
        "--dry-run", action="store_true",
        help="Print unified diff without writing"
    )

    # remove-empties command
    parser_remove = subparsers.add_parser(
        "remove-empties", help="Strip delete markers from a file"
    )
    parser_remove.add_argument("file", help="Markdown file (relative to the vault)")
    parser_remove.add_argument(
        "--dry-run", action="store_true",
        help="Print unified diff without writing"
    )

    # watch command
    parser_watch = subparsers.add_parser("watch", help="Watch vault for changes")
    parser_watch.add_argument(
        "--debounce-ms", type=int, default=150,
        help="Debounce window in milliseconds (default: 150)"
    )

    args = parser.parse_args(argv)
    if getattr(args, "format", None) is None or args.json:
        args.format = "json"

    _configure_logging(args.verbose, args.quiet)

    handlers = {
        "scan": cmd_scan,
        "requests": cmd_requests,
        "write-ids": cmd_write_ids,
        "remove-empties": cmd_remove_empties,
        "watch": cmd_watch,
    }

    handler = handlers.get(args.cmd)
    if handler:
        try:
            rt = build_runtime(
                vault_path=args.vault,
                snapshot_path=args.snapshot,
                config_path=args.config,
            )
            exit_code = handler(args, rt)
            sys.exit(exit_code)
        except Exception as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
    else:
        print(f"Unknown command: {args.cmd}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
