"""Bounded in-process TTL cache."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from typing import Any


class TTLCache:
    """Thread-safe key/value cache where every entry carries its own expiry.

    When the cache is full the oldest inserted key is evicted first.
    """

    def __init__(
        self,
        max_entries: int = 1024,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_entries = max(1, max_entries)
        self._clock = clock
        self._entries: dict[Any, tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: Any) -> Any | None:
        """Return a cache value when present and not expired."""
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if not entry:
                return None
            expires_at, value = entry
            if expires_at <= now:
                self._entries.pop(key, None)
                return None
            return value

    def set(self, key: Any, value: Any, ttl_seconds: float) -> None:
        """Store a bounded cache value with TTL."""
        if ttl_seconds <= 0:
            return

        with self._lock:
            self._entries.pop(key, None)
            if len(self._entries) >= self.max_entries:
                oldest_key = next(iter(self._entries))
                self._entries.pop(oldest_key, None)
            self._entries[key] = (self._clock() + ttl_seconds, value)

    def invalidate(self, key: Any) -> None:
        """Drop one key if present."""
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        """Drop every entry."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
