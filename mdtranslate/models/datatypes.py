"""Core datatypes shared across mdtranslate modules.

Responsibilities:
- Represent immutable records exchanged between pipeline components.
- Provide explicit typing for outcomes reported at the end of a run.

Key types:
- `DocumentDescriptor`, `RawDocument`, `Chunk`, `TransformHint`, `CacheEntry`,
  `TranslationOutcome`, `TranslationResult`, and `RunSummary`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TypeAlias

Fingerprint: TypeAlias = str


@dataclass(frozen=True, slots=True)
class DocumentDescriptor:
    """One document listed by the table-of-contents manifest.

    Attributes:
        title: Human-readable title from the manifest leaf.
        source_path: Path of the source Markdown file.
        output_path: Path the translated document is written to.
        section: Name of the manifest section this document belongs to.
        relative_path: Manifest-relative document path without extension.
    """

    title: str
    source_path: Path
    output_path: Path
    section: str
    relative_path: str = ""


@dataclass(frozen=True, slots=True)
class RawDocument:
    """Document text split into optional front matter and body.

    Attributes:
        metadata_block: Text between the `---` delimiters, or `None`.
        body: Markdown body following the front matter.
    """

    metadata_block: str | None
    body: str


@dataclass(frozen=True, slots=True)
class Chunk:
    """A bounded, order-tagged fragment of one document body.

    Attributes:
        index: 0-based position of the chunk within its document.
        text: Chunk text content.
    """

    index: int
    text: str


@dataclass(frozen=True, slots=True)
class TransformHint:
    """Positional hint passed to the transform service with each call.

    `sequence_total == 0` marks a stand-alone call outside any chunk sequence.
    """

    sequence_position: int
    sequence_total: int

    @property
    def is_partial(self) -> bool:
        """Return whether the text is one part of a multi-part document."""

        return self.sequence_total > 1


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """Translated content stored under a source-content fingerprint."""

    fingerprint: Fingerprint
    translated_content: str


class TranslationOutcome(str, Enum):
    """Terminal state of one document within a run."""

    SUCCESS = "success"
    CACHE_HIT = "cache_hit"
    FALLBACK = "fallback"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class TranslationResult:
    """Per-document result produced once per run.

    Attributes:
        document: Descriptor of the processed document.
        content: Output content (translated, cached, or original on fallback).
        outcome: Terminal outcome for the document.
        chunk_count: Number of body chunks sent for translation.
        error: Short diagnostic for fallback/failed outcomes.
    """

    document: DocumentDescriptor
    content: str
    outcome: TranslationOutcome
    chunk_count: int = 0
    error: str | None = None

    @property
    def needs_attention(self) -> bool:
        """Return whether the document was left untranslated."""

        return self.outcome in (TranslationOutcome.FALLBACK, TranslationOutcome.FAILED)


@dataclass(frozen=True, slots=True)
class RunSummary:
    """Aggregate record of one pipeline run.

    Attributes:
        results: Per-document results in manifest order.
        elapsed_seconds: Wall-clock run duration.
        output_dir: Directory holding translated documents.
        report_path: Path of the written JSON run report, when written.
    """

    results: tuple[TranslationResult, ...]
    elapsed_seconds: float
    output_dir: Path
    report_path: Path | None = None
    counts: dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_results(
        cls,
        results: list[TranslationResult],
        *,
        elapsed_seconds: float,
        output_dir: Path,
        report_path: Path | None = None,
    ) -> RunSummary:
        """Build a summary with outcome counts for every outcome kind."""

        counts = {outcome.value: 0 for outcome in TranslationOutcome}
        for result in results:
            counts[result.outcome.value] += 1
        return cls(
            results=tuple(results),
            elapsed_seconds=elapsed_seconds,
            output_dir=output_dir,
            report_path=report_path,
            counts=counts,
        )

    @property
    def attention_required(self) -> tuple[TranslationResult, ...]:
        """Return results that fell back or failed."""

        return tuple(result for result in self.results if result.needs_attention)
