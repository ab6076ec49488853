"""Filesystem I/O: manifest traversal, translation cache, and output storage."""

from .cache_store import CacheStore, FileCacheStore
from .manifest import load_manifest, read_manifest
from .storage import ArtifactStore

__all__ = [
    "ArtifactStore",
    "CacheStore",
    "FileCacheStore",
    "load_manifest",
    "read_manifest",
]
