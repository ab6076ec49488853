"""Stage telemetry for a translation run.

Responsibilities:
- Report stage position to the progress callback as each stage starts.
- Log stage completion with timing and a per-stage summary of what it produced.
- Log stage failures by exception type only, never by message.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Callable
import time
from typing import TypeVar

from ..models.datatypes import DocumentDescriptor, TranslationOutcome, TranslationResult

_StageResult = TypeVar("_StageResult")


def summarize_descriptors(descriptors: list[DocumentDescriptor]) -> dict[str, object]:
    """Return `manifest` completion context: how many documents will be translated."""

    return {"documents": len(descriptors)}


def summarize_results(results: list[TranslationResult]) -> dict[str, object]:
    """Return `translate` completion context: the document count per outcome."""

    counts = Counter(result.outcome for result in results)
    return {outcome.value: counts.get(outcome, 0) for outcome in TranslationOutcome}


class PipelineTelemetryMixin:
    """Wrap pipeline stages with progress and structured log events."""

    _PHASE_SEQUENCE = ("config", "manifest", "translate", "report")

    def _stage_position(self, stage_name: str) -> tuple[int, int] | None:
        if stage_name not in self._PHASE_SEQUENCE:
            return None
        return self._PHASE_SEQUENCE.index(stage_name) + 1, len(self._PHASE_SEQUENCE)

    def _run_stage(
        self,
        stage_name: str,
        action: Callable[[], _StageResult],
        summarize: Callable[[_StageResult], dict[str, object]] | None = None,
    ) -> _StageResult:
        """Run one named stage between start and complete/failure events.

        Args:
            stage_name: Stage label used in progress and log lines.
            action: Zero-argument callable doing the stage work.
            summarize: Optional mapper from the stage result to extra
                key/value context on the `complete` event.
        """

        position = self._stage_position(stage_name)
        if position is not None and self._stage_progress_callback is not None:
            self._stage_progress_callback(stage_name, *position)
        if self._run_logger is not None:
            self._run_logger.log_stage_start(stage_name)

        started_at = time.monotonic()
        try:
            result = action()
        except Exception as exc:
            if self._run_logger is not None:
                self._run_logger.log_stage_failure(stage_name, type(exc).__name__)
            raise

        if self._run_logger is not None:
            context = summarize(result) if summarize is not None else {}
            context["elapsed_ms"] = int((time.monotonic() - started_at) * 1000)
            self._run_logger.log_stage_complete(stage_name, **context)
        return result
