"""Background maintenance coroutines for long-lived resolvers."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from datdns.memory_cache import MemoryCache
    from datdns.persistent import SqlitePersistentCache

log = structlog.get_logger()


async def run_memory_cache_sweeper(cache: MemoryCache, interval_seconds: float) -> None:
    """Drop expired memory cache entries every ``interval_seconds`` until cancelled."""
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            cache.sweep()
        except Exception:
            log.warning("memory_cache_sweep_error", exc_info=True)


async def run_persistent_cache_cleanup(
    cache: SqlitePersistentCache, retention_days: int
) -> None:
    """One-shot startup cleanup of long-expired persistent entries."""
    await cache.cleanup_expired(retention_days)
