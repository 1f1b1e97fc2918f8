"""In-memory name cache with positive and negative entries.

Shared by every resolution in the process. All operations take a single
lock acquisition, so the cache is safe to use from several tasks or threads.
Expired entries are dropped lazily on read and in bulk by ``sweep()``.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable

import structlog

from datdns.events import CacheFlushedEvent, EventEmitter
from datdns.models.cache import CacheEntry, MissMarker

log = structlog.get_logger()


class MemoryCache:
    """Name → key (or MISS) map with per-entry expiry."""

    def __init__(
        self,
        events: EventEmitter | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._events = events or EventEmitter()
        self._clock = clock

    def get(self, name: str) -> str | MissMarker | None:
        """Return the cached key, ``MISS``, or ``None`` when unknown or expired."""
        with self._lock:
            entry = self._entries.get(name)
            if entry is None:
                return None
            if entry.expired(self._clock()):
                del self._entries[name]
                return None
            return entry.value

    def set(self, name: str, value: str | MissMarker, ttl: int) -> None:
        """Store ``value`` for ``ttl`` seconds. A zero TTL stores nothing."""
        if ttl == 0:
            return
        with self._lock:
            self._entries[name] = CacheEntry(value=value, expires_at=self._clock() + ttl)

    def list(self) -> dict[str, str | MissMarker]:
        with self._lock:
            now = self._clock()
            return {
                name: entry.value
                for name, entry in self._entries.items()
                if not entry.expired(now)
            }

    def flush(self) -> None:
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        log.info("memory_cache_flushed", entries=count)
        self._events.emit(CacheFlushedEvent())

    def sweep(self) -> int:
        """Remove expired entries. Returns how many were dropped."""
        with self._lock:
            now = self._clock()
            expired = [name for name, entry in self._entries.items() if entry.expired(now)]
            for name in expired:
                del self._entries[name]
        if expired:
            log.debug("memory_cache_swept", removed=len(expired))
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
