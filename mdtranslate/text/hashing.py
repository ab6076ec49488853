"""Content fingerprinting for cache addressing."""

from __future__ import annotations

from hashlib import sha256

from ..models.datatypes import Fingerprint


def hash_content(raw_bytes: bytes) -> Fingerprint:
    """Return the SHA-256 hex digest of raw document bytes."""

    return sha256(raw_bytes).hexdigest()
