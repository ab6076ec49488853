"""Shared pytest fixtures for the full mdtranslate test suite."""

from __future__ import annotations

import json
from pathlib import Path
import threading

import pytest

from mdtranslate.errors import ServiceError
from mdtranslate.models.datatypes import TransformHint


class RecordingTransformClient:
    """Deterministic transform client that tags text and records every call."""

    def __init__(self, prefix: str = "[zh] ", fail_on: str | None = None) -> None:
        """Initialize the tag prefix and an optional failure trigger substring."""

        self.prefix = prefix
        self.fail_on = fail_on
        self.calls: list[tuple[str, TransformHint]] = []
        self._lock = threading.Lock()

    def transform(self, text: str, hint: TransformHint) -> str:
        """Return tagged text, or raise when the failure trigger is present."""

        with self._lock:
            self.calls.append((text, hint))
        if self.fail_on is not None and self.fail_on in text:
            raise ServiceError("scripted provider failure", failure_kind="http_error")
        return f"{self.prefix}{text}"


@pytest.fixture
def transform_client() -> RecordingTransformClient:
    """Provide a recording transform client that always succeeds."""

    return RecordingTransformClient()


@pytest.fixture
def make_transform_client():  # type: ignore[no-untyped-def]
    """Provide a factory for recording transform clients with custom behavior."""

    return RecordingTransformClient


def write_docs_tree(root: Path) -> Path:
    """Write a small docs tree with a nested manifest and return its directory."""

    docs_dir = root / "docs"
    (docs_dir / "guide").mkdir(parents=True)
    manifest = [
        {
            "name": "Getting Started",
            "topics": [
                ["Introduction", "/docs/intro"],
                [
                    "Guide",
                    "/docs/guide/index",
                    {
                        "name": "Guide Topics",
                        "topics": [["Install", "/docs/guide/install"]],
                    },
                ],
            ],
        },
        {"name": "Reference", "topics": [["Missing Page", "/docs/missing"]]},
    ]
    (docs_dir / "toc.json").write_text(json.dumps(manifest), encoding="utf-8")
    (docs_dir / "intro.md").write_text(
        "---\nTitle: Intro\nMetaDescription: Intro\n---\n\n# Welcome\n\nHello world.",
        encoding="utf-8",
    )
    (docs_dir / "guide" / "index.md").write_text("# Guide\n\nRead this first.", encoding="utf-8")
    (docs_dir / "guide" / "install.md").write_text(
        "# Install\n\nRun `pip install`.", encoding="utf-8"
    )
    return docs_dir


@pytest.fixture
def docs_tree(tmp_path: Path) -> Path:
    """Provide a docs directory holding `toc.json` and three Markdown documents."""

    return write_docs_tree(tmp_path)
