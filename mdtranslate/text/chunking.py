"""Document-body chunking for bounded provider calls.

Responsibilities:
- Split Markdown bodies into bounded chunks, preferring heading boundaries.
- Preserve enough structure to rebuild the body exactly after translation.
"""

from __future__ import annotations

from ..models.datatypes import Chunk

LINE_SEPARATOR = "\n"


class Chunker:
    """Split Markdown bodies line by line into heading-aware bounded chunks."""

    _HEADING_MARKER = "#"
    _SOFT_BOUNDARY_RATIO = 0.7

    def split(self, body: str, max_chunk_size: int) -> list[Chunk]:
        """Split a body into ordered chunks.

        A body no longer than `max_chunk_size` is a single chunk. Longer bodies
        close a chunk before a heading line once it already exceeds 70% of
        `max_chunk_size`, and unconditionally once it exceeds `max_chunk_size`.
        Line separators are not counted toward the size.

        Args:
            body: Markdown body text.
            max_chunk_size: Maximum accumulated line length per chunk. Values
                `<= 0` disable splitting.

        Returns:
            Non-empty chunk list whose texts joined by `\\n` equal `body`.
        """

        if max_chunk_size <= 0 or len(body) <= max_chunk_size:
            return [Chunk(index=0, text=body)]

        soft_limit = max_chunk_size * self._SOFT_BOUNDARY_RATIO
        texts: list[str] = []
        current_lines: list[str] = []
        current_size = 0

        for line in body.split(LINE_SEPARATOR):
            if (
                line.startswith(self._HEADING_MARKER)
                and current_size > soft_limit
                and current_lines
            ):
                texts.append(LINE_SEPARATOR.join(current_lines))
                current_lines = []
                current_size = 0

            current_lines.append(line)
            current_size += len(line)

            if current_size > max_chunk_size:
                texts.append(LINE_SEPARATOR.join(current_lines))
                current_lines = []
                current_size = 0

        if current_lines:
            texts.append(LINE_SEPARATOR.join(current_lines))

        return [Chunk(index=index, text=text) for index, text in enumerate(texts)]

    @staticmethod
    def join(texts: list[str]) -> str:
        """Reassemble chunk texts with the original line separator."""

        return LINE_SEPARATOR.join(texts)
