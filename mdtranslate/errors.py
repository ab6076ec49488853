"""Domain exceptions for the translation pipeline and CLI diagnostics."""

from __future__ import annotations

from pathlib import Path


class PipelineStageError(RuntimeError):
    """Raised when a specific pipeline stage fails."""

    def __init__(
        self,
        *,
        stage: str,
        detail: str,
        hint: str | None = None,
    ) -> None:
        """Initialize a stage-scoped pipeline error."""

        super().__init__(detail)
        self.stage = stage
        self.detail = detail
        self.hint = hint


class ServiceError(RuntimeError):
    """Raised when one transform-service call fails or returns unusable output."""

    def __init__(
        self,
        message: str,
        *,
        failure_kind: str = "unknown",
        provider: str | None = None,
        status_code: int | None = None,
        provider_code: str | None = None,
    ) -> None:
        """Initialize provider error metadata for document-level diagnostics."""

        super().__init__(message)
        self.failure_kind = failure_kind
        self.provider = provider
        self.status_code = status_code
        self.provider_code = provider_code


class CacheCorruption(RuntimeError):
    """Raised internally when a stored cache record cannot be trusted."""

    def __init__(self, path: Path, detail: str) -> None:
        super().__init__(f"Corrupt cache record `{path}`: {detail}")
        self.path = path
        self.detail = detail


class SourceReadError(RuntimeError):
    """Raised when a source document is missing, unreadable, or not UTF-8."""

    def __init__(self, path: Path, detail: str) -> None:
        super().__init__(f"Cannot read source document `{path}`: {detail}")
        self.path = path
        self.detail = detail


class ManifestError(ValueError):
    """Raised when the table-of-contents manifest is missing or malformed."""
