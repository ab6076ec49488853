"""Shared typed data models for mdtranslate.

This package contains dataclasses used across pipeline modules to avoid
cross-module coupling and circular imports.
"""

from .datatypes import (
    CacheEntry,
    Chunk,
    DocumentDescriptor,
    Fingerprint,
    RawDocument,
    RunSummary,
    TransformHint,
    TranslationOutcome,
    TranslationResult,
)

__all__ = [
    "CacheEntry",
    "Chunk",
    "DocumentDescriptor",
    "Fingerprint",
    "RawDocument",
    "RunSummary",
    "TransformHint",
    "TranslationOutcome",
    "TranslationResult",
]
