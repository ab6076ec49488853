"""Bounded document-level dispatch across a whole manifest.

Responsibilities:
- Run document translations through a bounded worker pool with dispatch pacing.
- Isolate per-document failures so the batch always completes.
- Aggregate results in manifest order for reporting.
"""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Callable

from ..llm.rate_limiter import RateLimiter
from ..models.datatypes import DocumentDescriptor, TranslationResult
from ..telemetry.logger import RunLogger
from .document_translator import DocumentTranslator

_DOCUMENT_PACING_KEY = "documents"


class PipelineScheduler:
    """Fan documents out to a `DocumentTranslator` with bounded concurrency."""

    def __init__(
        self,
        document_translator: DocumentTranslator,
        *,
        concurrency: int = 3,
        pacer: RateLimiter | None = None,
        run_logger: RunLogger | None = None,
    ) -> None:
        """Initialize the scheduler.

        Args:
            document_translator: Translator applied to each descriptor.
            concurrency: Maximum documents in flight; nests outside chunk concurrency.
            pacer: Limiter acquired before each document dispatch.
            run_logger: Optional structured logger for per-document outcomes.
        """

        if concurrency <= 0:
            raise ValueError("`concurrency` must be a positive integer.")
        self._translator = document_translator
        self._concurrency = concurrency
        self._pacer = pacer
        self._run_logger = run_logger

    def run(
        self,
        descriptors: list[DocumentDescriptor],
        on_result: Callable[[TranslationResult], TranslationResult | None] | None = None,
    ) -> list[TranslationResult]:
        """Translate all descriptors and return results in descriptor order.

        Args:
            descriptors: Documents to translate.
            on_result: Callback invoked in the worker thread as each document
                completes; completion order is not guaranteed. A returned
                result replaces the translated one, so hand-off failures stay
                scoped to their document.
        """

        if not descriptors:
            return []

        results: list[TranslationResult | None] = [None] * len(descriptors)
        workers = min(self._concurrency, len(descriptors))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="document") as executor:
            future_map: dict[Future[TranslationResult], int] = {
                executor.submit(self._run_one, descriptor, on_result): slot
                for slot, descriptor in enumerate(descriptors)
            }
            for future in as_completed(future_map):
                results[future_map[future]] = future.result()

        return [result for result in results if result is not None]

    def _run_one(
        self,
        descriptor: DocumentDescriptor,
        on_result: Callable[[TranslationResult], TranslationResult | None] | None,
    ) -> TranslationResult:
        """Pace, translate, hand off, and report one document."""

        if self._pacer is not None:
            self._pacer.acquire(_DOCUMENT_PACING_KEY)
        result = self._translator.translate_document(descriptor)
        if on_result is not None:
            result = on_result(result) or result
        if self._run_logger is not None:
            context: dict[str, object] = {"chunks": result.chunk_count}
            if result.error:
                context["reason"] = result.error[:120]
            self._run_logger.log_document(
                result.outcome.value,
                descriptor.relative_path or str(descriptor.source_path),
                **context,
            )
        return result
