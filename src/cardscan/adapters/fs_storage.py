from pathlib import Path
from urllib.parse import quote


class FsStorage:
    """Markdown documents under one vault directory, addressed by relative path."""

    def __init__(self, root: Path, vault_name: str = ""):
        self.root = root
        self.vault_name = vault_name or root.name

    def _path(self, rel: str) -> Path:
        return self.root / rel

    def relative(self, path: Path) -> str:
        try:
            return path.resolve().relative_to(self.root.resolve()).as_posix()
        except ValueError:
            return path.as_posix()

    def read_raw(self, rel: str) -> str | None:
        p = self._path(rel)
        return p.read_text(encoding="utf-8") if p.exists() else None

    def write_raw(self, rel: str, contents: str) -> None:
        p = self._path(rel)
        p.parent.mkdir(parents=True, exist_ok=True)
        # Atomic write using temp file
        tmp_path = p.with_suffix(p.suffix + ".tmp")
        try:
            tmp_path.write_text(contents, encoding="utf-8")
            tmp_path.replace(p)
        except Exception:
            if tmp_path.exists():
                tmp_path.unlink()
            raise

    def url(self, rel: str) -> str:
        """Link that opens the document in Obsidian."""
        return (
            f"obsidian://open?vault={quote(self.vault_name, safe='')}"
            f"&file={quote(rel, safe='')}"
        )
