"""Per-document translation with cache reuse and fallback.

Responsibilities:
- Reuse cached translations keyed by the fingerprint of the raw source bytes.
- Translate the body in chunks and the `MetaDescription` front-matter field.
- Downgrade service and source-read failures to per-document outcomes.

Document states: pending -> cache hit, or pending -> translating ->
reassembling -> cache writing -> success, with translating -> fallback on any
`ServiceError` from the body.
"""

from __future__ import annotations

from pathlib import Path

from ..errors import ServiceError, SourceReadError
from ..io.cache_store import CacheStore
from ..llm.transform import TransformClient
from ..models.datatypes import (
    DocumentDescriptor,
    RawDocument,
    TransformHint,
    TranslationOutcome,
    TranslationResult,
)
from ..telemetry.logger import RunLogger
from ..text.chunking import Chunker
from ..text.front_matter import (
    find_meta_description,
    join_front_matter,
    replace_meta_description,
    split_front_matter,
)
from ..text.hashing import hash_content
from .chunk_translator import ChunkTranslator

_STANDALONE_HINT = TransformHint(sequence_position=0, sequence_total=0)


class DocumentTranslator:
    """Translate one document end to end."""

    def __init__(
        self,
        *,
        transform_client: TransformClient,
        cache_store: CacheStore,
        chunk_translator: ChunkTranslator,
        max_chunk_chars: int = 3000,
        chunker: Chunker | None = None,
        run_logger: RunLogger | None = None,
    ) -> None:
        """Initialize collaborators shared by every document of a run."""

        self._client = transform_client
        self._cache = cache_store
        self._chunk_translator = chunk_translator
        self._max_chunk_chars = max_chunk_chars
        self._chunker = chunker if chunker is not None else Chunker()
        self._run_logger = run_logger

    def translate_document(self, document: DocumentDescriptor) -> TranslationResult:
        """Translate one document and return its terminal result."""

        try:
            raw_bytes = self._read_source(document.source_path)
            raw_text = self._decode_source(document.source_path, raw_bytes)
        except SourceReadError as exc:
            return TranslationResult(
                document=document,
                content="",
                outcome=TranslationOutcome.FAILED,
                error=str(exc),
            )

        fingerprint = hash_content(raw_bytes)
        cached = self._cache.get(fingerprint)
        if cached is not None:
            return TranslationResult(
                document=document,
                content=cached.translated_content,
                outcome=TranslationOutcome.CACHE_HIT,
            )

        raw_document = split_front_matter(raw_text)
        chunks = self._chunker.split(raw_document.body, self._max_chunk_chars)
        try:
            translated_texts = self._chunk_translator.translate_chunks(
                chunks,
                pacing_key=f"chunks:{document.source_path}",
            )
        except ServiceError as exc:
            return TranslationResult(
                document=document,
                content=raw_text,
                outcome=TranslationOutcome.FALLBACK,
                chunk_count=len(chunks),
                error=str(exc),
            )

        translated_body = self._chunker.join(translated_texts)
        metadata_block = self._translate_metadata(document, raw_document.metadata_block)
        final_content = join_front_matter(
            RawDocument(metadata_block=metadata_block, body=translated_body)
        )
        self._write_cache(document, fingerprint, final_content)
        return TranslationResult(
            document=document,
            content=final_content,
            outcome=TranslationOutcome.SUCCESS,
            chunk_count=len(chunks),
        )

    def _translate_metadata(
        self,
        document: DocumentDescriptor,
        metadata_block: str | None,
    ) -> str | None:
        """Translate the `MetaDescription` value, keeping the original on failure."""

        if metadata_block is None:
            return None
        description = find_meta_description(metadata_block)
        if description is None or not description.strip():
            return metadata_block
        try:
            translated = self._client.transform(description, _STANDALONE_HINT)
        except ServiceError as exc:
            if self._run_logger is not None:
                self._run_logger.log_warning(
                    "translate",
                    "meta_description_kept",
                    document=document.relative_path or document.source_path,
                    failure_kind=exc.failure_kind,
                )
            return metadata_block
        return replace_meta_description(metadata_block, " ".join(translated.split()))

    def _write_cache(
        self,
        document: DocumentDescriptor,
        fingerprint: str,
        content: str,
    ) -> None:
        """Persist a translation; a failed write only costs a future re-translation."""

        try:
            self._cache.put(fingerprint, content)
        except OSError as exc:
            if self._run_logger is not None:
                self._run_logger.log_warning(
                    "cache",
                    "write_failed",
                    document=document.relative_path or document.source_path,
                    error_type=type(exc).__name__,
                )

    @staticmethod
    def _read_source(path: Path) -> bytes:
        """Read raw source bytes."""

        try:
            return path.read_bytes()
        except OSError as exc:
            raise SourceReadError(path, exc.strerror or type(exc).__name__) from exc

    @staticmethod
    def _decode_source(path: Path, raw_bytes: bytes) -> str:
        """Decode source bytes as UTF-8."""

        try:
            return raw_bytes.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise SourceReadError(path, "content is not valid UTF-8") from exc
