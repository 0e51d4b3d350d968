"""Runtime wiring helper for CLI applications."""

from dataclasses import dataclass
from pathlib import Path

from .adapters.formatter import DefaultFormatter
from .adapters.fs_storage import FsStorage
from .adapters.markdown_parser import MarkdownOutline
from .adapters.yaml_codec import CollectionSnapshot, load_snapshot
from .config import CardscanConfig, build_scan_data, load_config
from .core.model import ScanData
from .core.scanner import DocumentScanner


@dataclass
class Runtime:
    """Container for all wired components."""
    storage: FsStorage
    outline: MarkdownOutline
    formatter: DefaultFormatter
    snapshot: CollectionSnapshot
    data: ScanData
    config: CardscanConfig
    snapshot_path: Path

    def scanner_for(self, rel: str) -> DocumentScanner:
        """Build a scanner for one document in the vault."""
        text = self.storage.read_raw(rel)
        if text is None:
            raise FileNotFoundError(f"File {rel} not found")
        return DocumentScanner(
            text,
            path=rel,
            url=self.storage.url(rel) if self.data.file_link_fields else "",
            data=self.data,
            formatter=self.formatter,
            headings=self.outline.headings(text),
        )


def build_runtime(
    vault_path: Path | None = None,
    snapshot_path: Path | None = None,
    config_path: Path | None = None,
) -> Runtime:
    """Build and wire all components for a vault."""
    config = load_config(config_path=config_path, vault_path=vault_path)

    # Use config values if CLI args not provided
    if vault_path is None:
        vault_path = config.vault.root
    if snapshot_path is None:
        snapshot_path = config.vault.snapshot

    storage = FsStorage(vault_path, vault_name=config.vault.name)
    snapshot = load_snapshot(snapshot_path)
    data = build_scan_data(config, snapshot)

    return Runtime(
        storage=storage,
        outline=MarkdownOutline(),
        formatter=DefaultFormatter(),
        snapshot=snapshot,
        data=data,
        config=config,
        snapshot_path=snapshot_path,
    )
