"""Concurrent, order-preserving translation of one document's chunks.

Responsibilities:
- Dispatch chunk translations through a bounded worker pool.
- Pace successive dispatches for one document.
- Return translated texts in original chunk order, or fail as a unit.
"""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor, as_completed

from ..errors import ServiceError
from ..llm.rate_limiter import RateLimiter
from ..llm.transform import TransformClient
from ..models.datatypes import Chunk, TransformHint
from ..telemetry.logger import RunLogger


class ChunkTranslator:
    """Translate chunk sequences with bounded concurrency and dispatch pacing."""

    def __init__(
        self,
        transform_client: TransformClient,
        *,
        concurrency: int = 2,
        pacer: RateLimiter | None = None,
        run_logger: RunLogger | None = None,
    ) -> None:
        """Initialize the translator.

        Args:
            transform_client: Provider adapter used for each chunk.
            concurrency: Maximum chunks in flight for one document.
            pacer: Limiter acquired before each dispatch; `None` disables pacing.
            run_logger: Optional structured logger.
        """

        if concurrency <= 0:
            raise ValueError("`concurrency` must be a positive integer.")
        self._client = transform_client
        self._concurrency = concurrency
        self._pacer = pacer
        self._run_logger = run_logger

    def translate_chunks(self, chunks: list[Chunk], pacing_key: str = "chunks") -> list[str]:
        """Translate chunks and return texts in input order.

        Raises:
            ServiceError: If any chunk fails; remaining queued chunks are cancelled.
        """

        if not chunks:
            return []

        total = len(chunks)
        results: list[str | None] = [None] * total
        workers = min(self._concurrency, total)
        try:
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="chunk") as executor:
                future_map: dict[Future[str], int] = {
                    executor.submit(self._translate_one, chunk, total, pacing_key): slot
                    for slot, chunk in enumerate(chunks)
                }
                try:
                    for future in as_completed(future_map):
                        results[future_map[future]] = future.result()
                except ServiceError:
                    for pending in future_map:
                        pending.cancel()
                    raise
        finally:
            if self._pacer is not None:
                self._pacer.forget(pacing_key)

        return [text for text in results if text is not None]

    def _translate_one(self, chunk: Chunk, total: int, pacing_key: str) -> str:
        """Translate one chunk, passing blank chunks through unchanged."""

        if not chunk.text.strip():
            return chunk.text
        if self._pacer is not None:
            self._pacer.acquire(pacing_key)
        if self._run_logger is not None:
            self._run_logger.log_debug(
                "translate",
                "dispatch_chunk",
                key=pacing_key,
                part=f"{chunk.index + 1}/{total}",
            )
        return self._client.transform(
            chunk.text,
            TransformHint(sequence_position=chunk.index + 1, sequence_total=total),
        )
