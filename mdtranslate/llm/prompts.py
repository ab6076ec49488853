"""Prompt template library for translation calls.

Responsibilities:
- Centralize prompt construction for Markdown document translation.
- Keep prompts deterministic for a given text, language, and position.
"""

from __future__ import annotations

from ..models.datatypes import TransformHint


class PromptLibrary:
    """Build prompt strings for Markdown translation."""

    def translation_system_prompt(self) -> str:
        """Return deterministic system prompt for format-preserving translation."""

        return (
            "You are a professional Markdown documentation translator. "
            "Preserve formatting and code exactly and return only the translated text."
        )

    def translate_prompt(
        self,
        source_text: str,
        target_language: str,
        hint: TransformHint,
    ) -> str:
        """Return translation prompt text for provider calls."""

        part_note = ""
        if hint.is_partial:
            part_note = (
                f"This is part {hint.sequence_position} of {hint.sequence_total} "
                "of a longer document.\n\n"
            )
        return (
            f"Translate the following Markdown document content into {target_language}.\n"
            "Requirements:\n"
            "- Keep Markdown structure unchanged (headings, code blocks, links, tables).\n"
            "- Keep code inside code blocks unchanged; translate only comments.\n"
            "- Keep image links and their formatting unchanged.\n"
            "- Keep technical terms accurate.\n"
            "- Write natural, fluent text in the target language.\n"
            "Output only the translated text.\n\n"
            f"{part_note}"
            f"Source:\n{source_text}"
        )
