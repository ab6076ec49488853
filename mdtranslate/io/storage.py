"""Output storage for translated documents and run artifacts.

Responsibilities:
- Write translated documents to paths mirroring the source tree.
- Copy the manifest and persist the JSON run report for downstream packaging.
"""

from __future__ import annotations

import json
from pathlib import Path
import shutil


class ArtifactStore:
    """Filesystem-backed store rooted at the translation output directory."""

    def __init__(self, root: Path) -> None:
        """Initialize the store with a root output directory."""

        self.root = root

    def save_document(self, path: Path, content: str) -> Path:
        """Write one document, creating parent directories as needed."""

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    def save_json(self, relative_path: Path, payload: dict[str, object]) -> Path:
        """Save JSON-serializable payload and return final path."""

        path = self.root / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True),
            encoding="utf-8",
        )
        return path

    def copy_file(self, source: Path, relative_path: Path) -> Path:
        """Copy a file into the store and return its new path."""

        path = self.root / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, path)
        return path

    def load_text(self, relative_path: Path) -> str:
        """Load text content from the store."""

        return (self.root / relative_path).read_text(encoding="utf-8")

    def exists(self, relative_path: Path) -> bool:
        """Return whether the given artifact exists."""

        return (self.root / relative_path).exists()
