"""Run report payload builders.

Responsibilities:
- Serialize per-document outcomes into a deterministic JSON payload.
- Carry non-secret provider metadata alongside the outcome counts.
"""

from __future__ import annotations

from ..config import ProviderRuntimeConfig
from ..models.datatypes import RunSummary, TranslationResult


def result_payload(result: TranslationResult) -> dict[str, object]:
    """Serialize one document result without its content."""

    document = result.document
    return {
        "title": document.title,
        "section": document.section,
        "path": document.relative_path,
        "source": str(document.source_path),
        "output": str(document.output_path),
        "outcome": result.outcome.value,
        "chunks": result.chunk_count,
        "error": result.error,
    }


def report_payload(
    summary: RunSummary,
    runtime_config: ProviderRuntimeConfig,
    *,
    language: str,
    cache_hit_rate: float,
) -> dict[str, object]:
    """Build the `translation-report.json` payload for one run."""

    return {
        "language": language,
        "runtime": runtime_config.as_report_metadata(),
        "elapsed_seconds": round(summary.elapsed_seconds, 3),
        "counts": dict(summary.counts),
        "cache_hit_rate": f"{cache_hit_rate:.4f}",
        "documents": [result_payload(result) for result in summary.results],
    }
