"""Unit tests for per-document translation, cache reuse, and fallback."""

from __future__ import annotations

import io
from pathlib import Path

from mdtranslate.io.cache_store import FileCacheStore
from mdtranslate.models.datatypes import CacheEntry, DocumentDescriptor, TranslationOutcome
from mdtranslate.pipeline.chunk_translator import ChunkTranslator
from mdtranslate.pipeline.document_translator import DocumentTranslator
from mdtranslate.telemetry.logger import RunLogger
from mdtranslate.text.hashing import hash_content

_INTRO_SOURCE = "---\nTitle: Intro\nMetaDescription: Intro\n---\n\n# Welcome\n\nHello world."


def _descriptor(tmp_path: Path, name: str = "intro") -> DocumentDescriptor:
    return DocumentDescriptor(
        title=name.title(),
        source_path=tmp_path / "docs" / f"{name}.md",
        output_path=tmp_path / "out" / f"{name}.md",
        section="Getting Started",
        relative_path=name,
    )


def _write_source(descriptor: DocumentDescriptor, content: str | bytes) -> None:
    descriptor.source_path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, bytes):
        descriptor.source_path.write_bytes(content)
    else:
        descriptor.source_path.write_text(content, encoding="utf-8")


def _translator(client, cache_root: Path, **kwargs) -> DocumentTranslator:  # type: ignore[no-untyped-def]
    return DocumentTranslator(
        transform_client=client,
        cache_store=FileCacheStore(cache_root),
        chunk_translator=ChunkTranslator(client, concurrency=2),
        **kwargs,
    )


def test_translate_document_translates_body_and_meta_description(
    tmp_path: Path, transform_client
) -> None:  # type: ignore[no-untyped-def]
    """Only the `MetaDescription` value is translated inside front matter."""

    descriptor = _descriptor(tmp_path)
    _write_source(descriptor, _INTRO_SOURCE)

    result = _translator(transform_client, tmp_path / "cache").translate_document(descriptor)

    assert result.outcome is TranslationOutcome.SUCCESS
    assert result.content == (
        "---\nTitle: Intro\nMetaDescription: [zh] Intro\n---\n\n[zh] # Welcome\n\nHello world."
    )
    assert result.chunk_count == 1
    assert result.error is None


def test_translate_document_is_idempotent_through_cache(
    tmp_path: Path, transform_client
) -> None:  # type: ignore[no-untyped-def]
    descriptor = _descriptor(tmp_path)
    _write_source(descriptor, _INTRO_SOURCE)
    translator = _translator(transform_client, tmp_path / "cache")

    first = translator.translate_document(descriptor)
    calls_after_first = len(transform_client.calls)
    second = translator.translate_document(descriptor)

    assert second.outcome is TranslationOutcome.CACHE_HIT
    assert second.content == first.content
    assert len(transform_client.calls) == calls_after_first


def test_translate_document_cache_survives_new_translator(
    tmp_path: Path, make_transform_client
) -> None:  # type: ignore[no-untyped-def]
    descriptor = _descriptor(tmp_path)
    _write_source(descriptor, _INTRO_SOURCE)
    _translator(make_transform_client(), tmp_path / "cache").translate_document(descriptor)

    fresh_client = make_transform_client(prefix="[new] ")
    result = _translator(fresh_client, tmp_path / "cache").translate_document(descriptor)

    assert result.outcome is TranslationOutcome.CACHE_HIT
    assert "[zh] # Welcome" in result.content
    assert fresh_client.calls == []


def test_translate_document_changed_source_invalidates_cache(
    tmp_path: Path, transform_client
) -> None:  # type: ignore[no-untyped-def]
    descriptor = _descriptor(tmp_path)
    _write_source(descriptor, _INTRO_SOURCE)
    translator = _translator(transform_client, tmp_path / "cache")
    translator.translate_document(descriptor)

    _write_source(descriptor, _INTRO_SOURCE + "\n\nNew paragraph.")
    result = translator.translate_document(descriptor)

    assert result.outcome is TranslationOutcome.SUCCESS
    assert result.content.endswith("New paragraph.")


def test_translate_document_falls_back_to_original_without_caching(
    tmp_path: Path, make_transform_client
) -> None:  # type: ignore[no-untyped-def]
    descriptor = _descriptor(tmp_path)
    _write_source(descriptor, _INTRO_SOURCE)
    cache_root = tmp_path / "cache"

    result = _translator(make_transform_client(fail_on="Hello"), cache_root).translate_document(
        descriptor
    )

    assert result.outcome is TranslationOutcome.FALLBACK
    assert result.content == _INTRO_SOURCE
    assert result.chunk_count == 1
    assert result.error == "scripted provider failure"
    assert FileCacheStore(cache_root).get(hash_content(_INTRO_SOURCE.encode("utf-8"))) is None


def test_translate_document_keeps_meta_description_when_its_call_fails(
    tmp_path: Path, make_transform_client
) -> None:  # type: ignore[no-untyped-def]
    descriptor = _descriptor(tmp_path)
    _write_source(descriptor, _INTRO_SOURCE)
    sink = io.StringIO()

    result = _translator(
        make_transform_client(fail_on="Intro"),
        tmp_path / "cache",
        run_logger=RunLogger(sink=sink),
    ).translate_document(descriptor)

    assert result.outcome is TranslationOutcome.SUCCESS
    assert result.content == (
        "---\nTitle: Intro\nMetaDescription: Intro\n---\n\n[zh] # Welcome\n\nHello world."
    )
    assert "event=meta_description_kept" in sink.getvalue()


def test_translate_document_collapses_whitespace_in_meta_description(
    tmp_path: Path, make_transform_client
) -> None:  # type: ignore[no-untyped-def]
    descriptor = _descriptor(tmp_path)
    _write_source(descriptor, "---\nMetaDescription: Intro\n---\n\nBody")

    result = _translator(
        make_transform_client(prefix="  Multi\nline  "),
        tmp_path / "cache",
    ).translate_document(descriptor)

    assert result.content.startswith("---\nMetaDescription: Multi line Intro\n---\n\n")


def test_translate_document_without_front_matter(tmp_path: Path, transform_client) -> None:  # type: ignore[no-untyped-def]
    descriptor = _descriptor(tmp_path, "plain")
    _write_source(descriptor, "# Plain\n\nNo metadata.")

    result = _translator(transform_client, tmp_path / "cache").translate_document(descriptor)

    assert result.outcome is TranslationOutcome.SUCCESS
    assert result.content == "[zh] # Plain\n\nNo metadata."
    assert len(transform_client.calls) == 1


def test_translate_document_splits_long_bodies_into_chunks(
    tmp_path: Path, transform_client
) -> None:  # type: ignore[no-untyped-def]
    descriptor = _descriptor(tmp_path, "long")
    _write_source(descriptor, "First section text.\n# Second\nMore text here.")

    result = _translator(
        transform_client,
        tmp_path / "cache",
        max_chunk_chars=20,
    ).translate_document(descriptor)

    assert result.chunk_count == 2
    assert result.content == "[zh] First section text.\n[zh] # Second\nMore text here."


def test_translate_document_with_front_matter_and_two_sections_over_the_cap(
    tmp_path: Path, transform_client
) -> None:  # type: ignore[no-untyped-def]
    """Front matter survives around a chunked body translated in section order."""

    descriptor = _descriptor(tmp_path, "overview")
    _write_source(
        descriptor,
        '---\nTitle: Overview\nMetaDescription: "Intro"\n---\n\n'
        "# Overview\nFirst section body text.\n# Details\nSecond section body text.",
    )

    result = _translator(
        transform_client,
        tmp_path / "cache",
        max_chunk_chars=30,
    ).translate_document(descriptor)

    assert result.outcome is TranslationOutcome.SUCCESS
    assert result.chunk_count == 2
    assert result.content == (
        '---\nTitle: Overview\nMetaDescription: [zh] "Intro"\n---\n\n'
        "[zh] # Overview\nFirst section body text.\n"
        "[zh] # Details\nSecond section body text."
    )
    hints = sorted(
        (hint for _, hint in transform_client.calls),
        key=lambda hint: (hint.sequence_total, hint.sequence_position),
    )
    assert [(hint.sequence_position, hint.sequence_total) for hint in hints] == [
        (0, 0),
        (1, 2),
        (2, 2),
    ]


def test_translate_document_missing_source_is_failed(tmp_path: Path, transform_client) -> None:  # type: ignore[no-untyped-def]
    descriptor = _descriptor(tmp_path, "missing")

    result = _translator(transform_client, tmp_path / "cache").translate_document(descriptor)

    assert result.outcome is TranslationOutcome.FAILED
    assert result.content == ""
    assert "Cannot read source document" in (result.error or "")
    assert transform_client.calls == []


def test_translate_document_non_utf8_source_is_failed(tmp_path: Path, transform_client) -> None:  # type: ignore[no-untyped-def]
    descriptor = _descriptor(tmp_path, "binary")
    _write_source(descriptor, b"\xff\xfe\x00broken")

    result = _translator(transform_client, tmp_path / "cache").translate_document(descriptor)

    assert result.outcome is TranslationOutcome.FAILED
    assert "not valid UTF-8" in (result.error or "")


def test_translate_document_survives_cache_write_failure(
    tmp_path: Path, transform_client
) -> None:  # type: ignore[no-untyped-def]
    class _ReadOnlyCache:
        def get(self, fingerprint: str) -> CacheEntry | None:
            return None

        def put(self, fingerprint: str, content: str) -> CacheEntry:
            raise PermissionError("read-only cache")

    descriptor = _descriptor(tmp_path)
    _write_source(descriptor, "Body")
    sink = io.StringIO()
    translator = DocumentTranslator(
        transform_client=transform_client,
        cache_store=_ReadOnlyCache(),
        chunk_translator=ChunkTranslator(transform_client),
        run_logger=RunLogger(sink=sink),
    )

    result = translator.translate_document(descriptor)

    assert result.outcome is TranslationOutcome.SUCCESS
    assert "stage=cache event=write_failed" in sink.getvalue()
