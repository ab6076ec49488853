"""Dispatch pacing for provider calls.

Responsibilities:
- Space successive dispatches sharing a key by a minimum interval.
- Stay safe when many worker threads acquire concurrently.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import threading
from time import monotonic, sleep
from typing import Callable


@dataclass(slots=True)
class RateLimiter:
    """Per-key minimum-interval limiter used before each dispatch."""

    min_interval_seconds: float = 0.05
    clock: Callable[[], float] = monotonic
    sleeper: Callable[[float], None] = sleep
    _next_allowed_at: dict[str, float] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def acquire(self, key: str) -> None:
        """Block until this caller's reserved slot for `key` is reached.

        Slots are reserved under the lock and waited for outside it, so
        concurrent callers are released one interval apart.
        """

        if self.min_interval_seconds <= 0.0:
            return
        with self._lock:
            now = self.clock()
            start_at = max(now, self._next_allowed_at.get(key, 0.0))
            self._next_allowed_at[key] = start_at + self.min_interval_seconds
        wait_seconds = start_at - now
        if wait_seconds > 0.0:
            self.sleeper(wait_seconds)

    def forget(self, key: str) -> None:
        """Drop pacing state for a key that will not be used again."""

        with self._lock:
            self._next_allowed_at.pop(key, None)
