"""Unit tests for table-of-contents manifest traversal."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from mdtranslate.errors import ManifestError
from mdtranslate.io.manifest import load_manifest, manifest_relative_path, read_manifest


def test_load_manifest_flattens_nested_topics_depth_first(docs_tree: Path, tmp_path: Path) -> None:
    missing: list[tuple[str, Path]] = []

    descriptors = load_manifest(
        docs_tree / "toc.json",
        docs_tree,
        tmp_path / "out",
        on_missing=lambda title, path: missing.append((title, path)),
    )

    assert [(item.title, item.section, item.relative_path) for item in descriptors] == [
        ("Introduction", "Getting Started", "intro"),
        ("Guide", "Getting Started", "guide/index"),
        ("Install", "Guide Topics", "guide/install"),
    ]
    assert descriptors[2].source_path == docs_tree / "guide" / "install.md"
    assert descriptors[2].output_path == tmp_path / "out" / "guide" / "install.md"
    assert missing == [("Missing Page", docs_tree / "missing.md")]


def test_load_manifest_nested_node_without_name_inherits_section(tmp_path: Path) -> None:
    (tmp_path / "a.md").write_text("A", encoding="utf-8")
    (tmp_path / "b.md").write_text("B", encoding="utf-8")
    (tmp_path / "toc.json").write_text(
        json.dumps(
            [{"name": "Top", "topics": [["A", "/docs/a", {"topics": [["B", "/docs/b"]]}]]}]
        ),
        encoding="utf-8",
    )

    descriptors = load_manifest(tmp_path / "toc.json", tmp_path, tmp_path / "out")

    assert [item.section for item in descriptors] == ["Top", "Top"]


def test_load_manifest_skips_malformed_topics(tmp_path: Path) -> None:
    (tmp_path / "a.md").write_text("A", encoding="utf-8")
    (tmp_path / "toc.json").write_text(
        json.dumps([{"name": "S", "topics": ["bad", ["only-title"], ["", "/docs/a"], ["A", "/docs/a"]]}]),
        encoding="utf-8",
    )

    descriptors = load_manifest(tmp_path / "toc.json", tmp_path, tmp_path / "out")

    assert [item.title for item in descriptors] == ["A"]


def test_read_manifest_reports_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ManifestError, match="Manifest not found"):
        read_manifest(tmp_path / "toc.json")


def test_read_manifest_reports_invalid_json(tmp_path: Path) -> None:
    (tmp_path / "toc.json").write_text("{oops", encoding="utf-8")

    with pytest.raises(ManifestError, match="not valid JSON"):
        read_manifest(tmp_path / "toc.json")


def test_read_manifest_requires_top_level_list(tmp_path: Path) -> None:
    (tmp_path / "toc.json").write_text('{"name": "x"}', encoding="utf-8")

    with pytest.raises(ManifestError, match="top-level list"):
        read_manifest(tmp_path / "toc.json")


def test_load_manifest_rejects_non_list_topics(tmp_path: Path) -> None:
    (tmp_path / "toc.json").write_text('[{"name": "S", "topics": "nope"}]', encoding="utf-8")

    with pytest.raises(ManifestError, match="non-list topics"):
        load_manifest(tmp_path / "toc.json", tmp_path, tmp_path / "out")


@pytest.mark.parametrize(
    ("document_path", "expected"),
    [
        ("/docs/intro", "intro"),
        ("/docs/guide/install", "guide/install"),
        ("/other/page", "other/page"),
    ],
)
def test_manifest_relative_path_strips_docs_prefix(document_path: str, expected: str) -> None:
    assert manifest_relative_path(document_path) == expected


@pytest.mark.parametrize("document_path", ["/docs/", "/docs/../secrets"])
def test_manifest_relative_path_rejects_escaping_paths(document_path: str) -> None:
    with pytest.raises(ManifestError, match="Invalid manifest document path"):
        manifest_relative_path(document_path)
