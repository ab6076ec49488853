"""mdtranslate pipeline package.

This package contains the run orchestrator, bounded document and chunk
dispatch, per-document translation, and run report helpers.
"""

from .chunk_translator import ChunkTranslator
from .document_translator import DocumentTranslator
from .orchestrator import TranslationPipeline
from .scheduler import PipelineScheduler

__all__ = [
    "ChunkTranslator",
    "DocumentTranslator",
    "PipelineScheduler",
    "TranslationPipeline",
]
