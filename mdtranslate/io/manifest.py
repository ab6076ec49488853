"""Table-of-contents manifest traversal.

Responsibilities:
- Parse `toc.json` section/topic trees into flat document descriptors.
- Map manifest document paths to source and output Markdown files.

The manifest root is a list of sections `{"name": ..., "topics": [...]}`.
Each topic is `[title, "/docs/<path>"]`, optionally followed by a nested node
`{"name": ..., "topics": [...]}`.
"""

from __future__ import annotations

import json
from pathlib import Path, PurePosixPath
from typing import Any, Callable

from ..errors import ManifestError
from ..models.datatypes import DocumentDescriptor

_DOCS_PREFIX = "/docs/"
_MARKDOWN_SUFFIX = ".md"


def read_manifest(manifest_path: Path) -> list[Any]:
    """Read and minimally validate the manifest root list."""

    try:
        raw_text = manifest_path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ManifestError(f"Manifest not found: `{manifest_path}`.") from exc
    except OSError as exc:
        raise ManifestError(f"Cannot read manifest `{manifest_path}`: {exc}") from exc

    try:
        payload = json.loads(raw_text)
    except json.JSONDecodeError as exc:
        raise ManifestError(f"Manifest `{manifest_path}` is not valid JSON: {exc}") from exc

    if not isinstance(payload, list):
        raise ManifestError(f"Manifest `{manifest_path}` must contain a top-level list.")
    return payload


def manifest_relative_path(document_path: str) -> str:
    """Strip the `/docs/` prefix and leading slashes from a manifest path."""

    relative = document_path.replace(_DOCS_PREFIX, "", 1).lstrip("/")
    parts = PurePosixPath(relative).parts
    if not relative or ".." in parts:
        raise ManifestError(f"Invalid manifest document path `{document_path}`.")
    return relative


def load_manifest(
    manifest_path: Path,
    docs_dir: Path,
    output_dir: Path,
    on_missing: Callable[[str, Path], None] | None = None,
) -> list[DocumentDescriptor]:
    """Flatten a manifest into descriptors in depth-first manifest order.

    Args:
        manifest_path: Path to `toc.json`.
        docs_dir: Directory holding source Markdown documents.
        output_dir: Directory translated documents are written to.
        on_missing: Optional callback invoked with `(title, path)` for entries
            whose source file does not exist; such entries are skipped.

    Returns:
        Ordered descriptor list.
    """

    sections = read_manifest(manifest_path)
    descriptors: list[DocumentDescriptor] = []

    def _traverse(topics: Any, section_name: str) -> None:
        if not isinstance(topics, list):
            raise ManifestError(
                f"Manifest `{manifest_path}` section `{section_name}` has non-list topics."
            )
        for topic in topics:
            if not isinstance(topic, list) or len(topic) < 2:
                continue
            title, document_path = topic[0], topic[1]
            if title and isinstance(document_path, str) and document_path:
                relative = manifest_relative_path(document_path)
                source_path = docs_dir / f"{relative}{_MARKDOWN_SUFFIX}"
                if source_path.exists():
                    descriptors.append(
                        DocumentDescriptor(
                            title=str(title),
                            source_path=source_path,
                            output_path=output_dir / f"{relative}{_MARKDOWN_SUFFIX}",
                            section=section_name,
                            relative_path=relative,
                        )
                    )
                elif on_missing is not None:
                    on_missing(str(title), source_path)
            if len(topic) == 3 and isinstance(topic[2], dict) and "topics" in topic[2]:
                nested = topic[2]
                nested_name = nested.get("name") or section_name
                _traverse(nested["topics"], str(nested_name))

    for section in sections:
        if isinstance(section, dict) and "topics" in section:
            _traverse(section["topics"], str(section.get("name") or ""))

    return descriptors
