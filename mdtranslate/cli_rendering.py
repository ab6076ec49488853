"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics,
per-document outcome rows, manifest listings, and run summaries.
"""

from __future__ import annotations

from typing import NoReturn

import typer

from .errors import PipelineStageError
from .models.datatypes import DocumentDescriptor, RunSummary, TranslationOutcome

_OUTCOME_COLORS = {
    TranslationOutcome.SUCCESS: typer.colors.GREEN,
    TranslationOutcome.CACHE_HIT: typer.colors.CYAN,
    TranslationOutcome.FALLBACK: typer.colors.YELLOW,
    TranslationOutcome.FAILED: typer.colors.RED,
}


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, PipelineStageError):
        typer.secho(
            f"{command_name} failed at stage `{exc.stage}`: {exc.detail}",
            fg=typer.colors.RED,
            err=True,
        )
        if exc.hint:
            typer.secho(f"Hint: {exc.hint}", fg=typer.colors.YELLOW, err=True)
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


def echo_run_summary(summary: RunSummary) -> None:
    """Print one row per document followed by outcome counts."""

    for result in summary.results:
        label = result.document.relative_path or str(result.document.source_path)
        line = f"[{result.outcome.value}] {label}"
        if result.error:
            line = f"{line} ({result.error})"
        typer.secho(line, fg=_OUTCOME_COLORS[result.outcome])

    counts = ", ".join(f"{name}={count}" for name, count in summary.counts.items())
    typer.echo(f"Documents: {len(summary.results)} ({counts})")
    typer.echo(f"Elapsed: {summary.elapsed_seconds:.2f}s")
    typer.echo(f"Output: {summary.output_dir}")
    if summary.report_path is not None:
        typer.echo(f"Report: {summary.report_path}")


def echo_document_list(descriptors: list[DocumentDescriptor]) -> None:
    """Print manifest documents in traversal order."""

    for index, descriptor in enumerate(descriptors, start=1):
        typer.echo(f"{index}. [{descriptor.section}] {descriptor.title} -> {descriptor.relative_path}")
