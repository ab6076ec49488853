"""Pipeline orchestration for mdtranslate.

Responsibilities:
- Define the high-level stage order for a documentation translation run.
- Wire manifest, cache, pacing, translators, and output storage together.
- Produce a `RunSummary` and a JSON run report for every completed run.

Key types:
- `TranslationPipeline`: orchestration facade.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace
from pathlib import Path
import time

from ..config import ProviderRuntimeConfig, TranslateConfig
from ..errors import ManifestError, PipelineStageError
from ..io.cache_store import FileCacheStore
from ..io.manifest import load_manifest
from ..io.storage import ArtifactStore
from ..llm.rate_limiter import RateLimiter
from ..llm.transform import TransformClient
from ..models.datatypes import (
    DocumentDescriptor,
    RunSummary,
    TranslationOutcome,
    TranslationResult,
)
from ..provider_factory import ProviderFactory
from ..telemetry.logger import RunLogger
from .chunk_translator import ChunkTranslator
from .document_translator import DocumentTranslator
from .report import report_payload
from .runtime import PipelineRuntimeMixin
from .scheduler import PipelineScheduler
from .telemetry import PipelineTelemetryMixin, summarize_descriptors, summarize_results

_REPORT_NAME = "translation-report.json"


class TranslationPipeline(PipelineRuntimeMixin, PipelineTelemetryMixin):
    """Coordinate all stages for a single translation run."""

    def __init__(
        self,
        run_logger: RunLogger | None = None,
        transform_client: TransformClient | None = None,
        stage_progress_callback: Callable[[str, int, int], None] | None = None,
    ) -> None:
        """Initialize optional logging, progress hooks, and a client override.

        Args:
            run_logger: Structured logger shared by every component of the run.
            transform_client: Client used instead of the configured provider.
            stage_progress_callback: Called with `(stage, index, total)` on stage start.
        """

        self._run_logger = run_logger
        self._transform_client = transform_client
        self._stage_progress_callback = stage_progress_callback

    def list_documents(
        self, docs_dir: Path, manifest_name: str = "toc.json"
    ) -> list[DocumentDescriptor]:
        """Flatten the manifest of a docs directory without translating anything."""

        return self._load_descriptors(docs_dir / manifest_name, docs_dir, docs_dir)

    def run(self, config: TranslateConfig) -> RunSummary:
        """Translate every manifest document and return the run summary."""

        started_at = time.monotonic()
        runtime_config = self._run_stage("config", lambda: self._prepare(config))
        descriptors = self._run_stage(
            "manifest",
            lambda: self._load_descriptors(
                config.manifest_path, config.docs_dir, config.output_dir
            ),
            summarize=summarize_descriptors,
        )
        cache_store = FileCacheStore(config.language_cache_dir(), run_logger=self._run_logger)
        store = ArtifactStore(config.output_dir)
        results = self._run_stage(
            "translate",
            lambda: self._translate(config, runtime_config, descriptors, cache_store, store),
            summarize=summarize_results,
        )
        elapsed = time.monotonic() - started_at
        return self._run_stage(
            "report",
            lambda: self._write_report(
                config, runtime_config, results, cache_store, store, elapsed
            ),
        )

    def _prepare(self, config: TranslateConfig) -> ProviderRuntimeConfig:
        """Validate config and resolve provider runtime values."""

        self._validate_config(config)
        return self._resolve_runtime_config(config)

    def _load_descriptors(
        self,
        manifest_path: Path,
        docs_dir: Path,
        output_dir: Path,
    ) -> list[DocumentDescriptor]:
        """Load manifest descriptors, mapping manifest errors to a stage error."""

        try:
            return load_manifest(
                manifest_path,
                docs_dir,
                output_dir,
                on_missing=self._on_missing_document,
            )
        except ManifestError as exc:
            raise PipelineStageError(
                stage="manifest",
                detail=str(exc),
                hint="Check that the docs directory contains a valid `toc.json` manifest.",
            ) from exc

    def _on_missing_document(self, title: str, path: Path) -> None:
        """Warn about a manifest entry whose source file does not exist."""

        if self._run_logger is not None:
            self._run_logger.log_warning("manifest", "missing_document", title=title, path=path)

    def _build_transform_client(
        self,
        config: TranslateConfig,
        runtime_config: ProviderRuntimeConfig,
    ) -> TransformClient:
        """Return the injected client or build one for the resolved provider."""

        if self._transform_client is not None:
            return self._transform_client
        return ProviderFactory.create_transform_client(
            runtime_config.provider,
            target_language=config.language,
            model=runtime_config.model,
            api_key=runtime_config.api_key,
            base_url=runtime_config.base_url,
            timeout_seconds=config.request_timeout_seconds,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
        )

    def _translate(
        self,
        config: TranslateConfig,
        runtime_config: ProviderRuntimeConfig,
        descriptors: list[DocumentDescriptor],
        cache_store: FileCacheStore,
        store: ArtifactStore,
    ) -> list[TranslationResult]:
        """Translate all documents, writing each output as it completes."""

        transform_client = self._build_transform_client(config, runtime_config)
        chunk_translator = ChunkTranslator(
            transform_client,
            concurrency=config.chunk_concurrency,
            pacer=RateLimiter(min_interval_seconds=config.chunk_delay_seconds),
            run_logger=self._run_logger,
        )
        document_translator = DocumentTranslator(
            transform_client=transform_client,
            cache_store=cache_store,
            chunk_translator=chunk_translator,
            max_chunk_chars=config.max_chunk_chars,
            run_logger=self._run_logger,
        )
        scheduler = PipelineScheduler(
            document_translator,
            concurrency=config.document_concurrency,
            pacer=RateLimiter(min_interval_seconds=config.document_delay_seconds),
            run_logger=self._run_logger,
        )

        def _write_output(result: TranslationResult) -> TranslationResult | None:
            if result.outcome is TranslationOutcome.FAILED:
                return None
            try:
                store.save_document(result.document.output_path, result.content)
            except OSError as exc:
                return replace(
                    result,
                    content="",
                    outcome=TranslationOutcome.FAILED,
                    error=f"Failed to write translated output: {exc}",
                )
            return None

        return scheduler.run(descriptors, on_result=_write_output)

    def _write_report(
        self,
        config: TranslateConfig,
        runtime_config: ProviderRuntimeConfig,
        results: list[TranslationResult],
        cache_store: FileCacheStore,
        store: ArtifactStore,
        elapsed_seconds: float,
    ) -> RunSummary:
        """Copy the manifest and persist the run report next to the outputs."""

        report_path = store.root / _REPORT_NAME
        summary = RunSummary.from_results(
            results,
            elapsed_seconds=elapsed_seconds,
            output_dir=config.output_dir,
            report_path=report_path,
        )
        try:
            store.copy_file(config.manifest_path, Path(config.manifest_name))
            store.save_json(
                Path(_REPORT_NAME),
                report_payload(
                    summary,
                    runtime_config,
                    language=config.language,
                    cache_hit_rate=cache_store.hit_rate(),
                ),
            )
        except OSError as exc:
            raise PipelineStageError(
                stage="report",
                detail=f"Failed to write run report: {exc}",
                hint=f"Check that `{config.output_dir}` is writable and rerun the command.",
            ) from exc
        return summary
