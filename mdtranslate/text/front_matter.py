"""Front-matter separation and reassembly for Markdown documents.

Responsibilities:
- Split `---` delimited front matter from the Markdown body.
- Rejoin front matter and body byte-for-byte in the original layout.
- Locate and replace the translatable `MetaDescription` field.
"""

from __future__ import annotations

import re

from ..models.datatypes import RawDocument

_FRONT_MATTER_PATTERN = re.compile(r"\A---\n(.*?)\n---\n\n(.*)\Z", re.DOTALL)
_META_DESCRIPTION_PATTERN = re.compile(r"MetaDescription:\s*(.+)")


def split_front_matter(text: str) -> RawDocument:
    """Split document text into optional front matter and body."""

    match = _FRONT_MATTER_PATTERN.match(text)
    if match is None:
        return RawDocument(metadata_block=None, body=text)
    return RawDocument(metadata_block=match.group(1), body=match.group(2))


def join_front_matter(document: RawDocument) -> str:
    """Rebuild document text from front matter and body."""

    if document.metadata_block is None:
        return document.body
    return f"---\n{document.metadata_block}\n---\n\n{document.body}"


def find_meta_description(metadata_block: str) -> str | None:
    """Return the `MetaDescription` value from front matter, if present."""

    match = _META_DESCRIPTION_PATTERN.search(metadata_block)
    if match is None:
        return None
    return match.group(1)


def replace_meta_description(metadata_block: str, value: str) -> str:
    """Replace the first `MetaDescription` value in front matter."""

    return _META_DESCRIPTION_PATTERN.sub(
        lambda _match: f"MetaDescription: {value}",
        metadata_block,
        count=1,
    )
