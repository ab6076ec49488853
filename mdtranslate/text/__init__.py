"""Text processing utilities for fingerprinting, front matter, and chunking."""

from .chunking import Chunker
from .front_matter import (
    find_meta_description,
    join_front_matter,
    replace_meta_description,
    split_front_matter,
)
from .hashing import hash_content

__all__ = [
    "Chunker",
    "find_meta_description",
    "hash_content",
    "join_front_matter",
    "replace_meta_description",
    "split_front_matter",
]
