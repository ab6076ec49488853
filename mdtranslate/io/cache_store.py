"""Content-addressed translation cache persisted as one JSON record per fingerprint.

Responsibilities:
- Look up previously produced translations by source-content fingerprint.
- Persist new translations atomically so concurrent writers never block each other.
- Treat unreadable or partially written records as cache misses.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
import tempfile
import threading
from typing import Protocol

from ..errors import CacheCorruption
from ..models.datatypes import CacheEntry, Fingerprint
from ..telemetry.logger import RunLogger


class CacheStore(Protocol):
    """Protocol for fingerprint-keyed translation caches."""

    def get(self, fingerprint: Fingerprint) -> CacheEntry | None:
        """Return the stored entry for a fingerprint, or `None` on miss."""

    def put(self, fingerprint: Fingerprint, content: str) -> CacheEntry:
        """Store translated content under a fingerprint."""


class FileCacheStore:
    """Filesystem cache storing each entry as `<root>/<fingerprint>.json`."""

    _RECORD_SUFFIX = ".json"

    def __init__(self, root: Path, run_logger: RunLogger | None = None) -> None:
        """Initialize the store under a root directory, created lazily on write."""

        self.root = Path(root).expanduser()
        self._run_logger = run_logger
        self.hits = 0
        self.misses = 0
        self._counter_lock = threading.Lock()

    def get(self, fingerprint: Fingerprint) -> CacheEntry | None:
        """Return the cached entry, treating corrupt records as misses."""

        path = self._entry_path(fingerprint)
        if not path.is_file():
            self._count(hit=False)
            return None
        try:
            entry = self._read_entry(path, fingerprint)
        except CacheCorruption as exc:
            if self._run_logger is not None:
                self._run_logger.log_warning(
                    "cache",
                    "corrupt_entry",
                    fingerprint=fingerprint,
                    detail=exc.detail,
                )
            self._count(hit=False)
            return None
        self._count(hit=True)
        return entry

    def put(self, fingerprint: Fingerprint, content: str) -> CacheEntry:
        """Atomically write a cache record, replacing any existing one."""

        entry = CacheEntry(fingerprint=fingerprint, translated_content=content)
        path = self._entry_path(fingerprint)
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(
            {
                "fingerprint": entry.fingerprint,
                "translated_content": entry.translated_content,
            },
            ensure_ascii=False,
            indent=2,
        )
        descriptor, temp_name = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{fingerprint}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(descriptor, "w", encoding="utf-8") as handle:
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(temp_name, path)
        except BaseException:
            Path(temp_name).unlink(missing_ok=True)
            raise
        return entry

    def hit_rate(self) -> float:
        """Return cache hit rate for the current store lifecycle."""

        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return self.hits / float(total)

    def _count(self, *, hit: bool) -> None:
        with self._counter_lock:
            if hit:
                self.hits += 1
            else:
                self.misses += 1

    def _entry_path(self, fingerprint: Fingerprint) -> Path:
        """Return file path for a fingerprint key."""

        if not fingerprint or any(separator in fingerprint for separator in ("/", "\\", "..")):
            raise ValueError(f"Invalid cache fingerprint `{fingerprint}`.")
        return self.root / f"{fingerprint}{self._RECORD_SUFFIX}"

    @staticmethod
    def _read_entry(path: Path, fingerprint: Fingerprint) -> CacheEntry:
        """Read and validate one cache record."""

        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise CacheCorruption(path, f"unreadable record ({type(exc).__name__})") from exc

        if not isinstance(payload, dict):
            raise CacheCorruption(path, "record is not a JSON object")
        stored_fingerprint = payload.get("fingerprint")
        translated = payload.get("translated_content")
        if stored_fingerprint != fingerprint:
            raise CacheCorruption(path, "fingerprint does not match record key")
        if not isinstance(translated, str):
            raise CacheCorruption(path, "missing translated content")
        return CacheEntry(fingerprint=fingerprint, translated_content=translated)
