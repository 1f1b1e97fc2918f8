"""Name resolution algorithm.

Sequences the normalizer, the memory cache and the two probes, and owns the
caching and fallback policy:

  1. Raw keys short-circuit (no cache, no network, no events)
  2. Memory cache: positive hit returns, negative hit fails
  3. DNS-over-HTTPS probe; any failure falls through
  4. Well-known probe, only when step 3 produced nothing
  5. Success is cached in memory and written to the persistent cache
  6. Failure is handed to the persistent cache, if there is one
"""

from __future__ import annotations

import asyncio
import random
from contextlib import asynccontextmanager, suppress
from pathlib import Path
from typing import TYPE_CHECKING

import aiosqlite
import structlog

from datdns.doh import DnsOverHttpsProbe
from datdns.errors import DatDnsError, RecordNotFoundFailure
from datdns.events import EventEmitter
from datdns.memory_cache import MemoryCache
from datdns.models.cache import MISS, MissMarker
from datdns.models.resolution import ProbeResult, ResolutionOptions
from datdns.normalizer import normalize_name
from datdns.parser import RecordPatterns
from datdns.persistent import SqlitePersistentCache
from datdns.schedulers import run_memory_cache_sweeper, run_persistent_cache_cleanup
from datdns.transport import HttpxTransport, build_http_client
from datdns.wellknown import WellKnownProbe

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Callable

    from datdns.config import Settings
    from datdns.models.resolution import DohProvider
    from datdns.protocols import PersistentCacheProtocol, TransportProtocol

log = structlog.get_logger()


def choose_provider(settings: Settings, rng: random.Random | None = None) -> DohProvider:
    """Pick the DNS-over-HTTPS provider for one resolver instance.

    A pinned ``doh.provider`` wins; otherwise one of ``doh.providers`` is
    drawn from ``rng``.
    """
    if settings.doh.provider is not None:
        return settings.doh.provider
    if not settings.doh.providers:
        raise ValueError("No DNS-over-HTTPS providers configured")
    return (rng or random.Random()).choice(settings.doh.providers)


class NameResolver:
    """Resolves names to keys of the configured shape."""

    def __init__(
        self,
        settings: Settings,
        transport: TransportProtocol,
        *,
        persistent_cache: PersistentCacheProtocol | None = None,
        events: EventEmitter | None = None,
        provider: DohProvider | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self.settings = settings
        self.events = events or EventEmitter()
        self.persistent_cache = persistent_cache
        self.patterns = RecordPatterns.from_settings(settings.records)

        if clock is None:
            self.memory_cache = MemoryCache(self.events)
        else:
            self.memory_cache = MemoryCache(self.events, clock=clock)

        timeout = settings.transport.timeout_seconds
        self.doh = DnsOverHttpsProbe(
            transport,
            provider or choose_provider(settings, rng),
            self.patterns,
            events=self.events,
            timeout=timeout,
        )
        self.well_known = WellKnownProbe(
            transport,
            self.patterns,
            path=settings.records.well_known_path,
            events=self.events,
            timeout=timeout,
        )
        self._pending_writes: set[asyncio.Task] = set()

    async def resolve_name(self, name: object, options: ResolutionOptions | None = None) -> str:
        """Resolve ``name`` to a key.

        Raises a DatDnsError when the name cannot be resolved and no
        persistent cache supplies a fallback. ``InvalidNameError`` is raised
        before any lookup and never reaches the persistent cache.
        """
        opts = options or ResolutionOptions()
        normalized = normalize_name(name, self.patterns.hash_re)
        if normalized.is_key:
            return normalized.value

        lookup = normalized.value
        try:
            return await self._resolve(lookup, opts)
        except DatDnsError as exc:
            if self.persistent_cache is None:
                raise
            log.info("persistent_cache_fallback", name=lookup, error=exc.message)
            return await self.persistent_cache.read(lookup, exc)

    async def _resolve(self, name: str, opts: ResolutionOptions) -> str:
        if not opts.ignore_cache:
            cached = self.memory_cache.get(name)
            if isinstance(cached, str):
                log.debug("memory_cache_hit", name=name, key=cached)
                return cached
            if cached is MISS and not opts.ignore_cached_miss:
                log.debug("memory_cache_hit", name=name, miss=True)
                raise RecordNotFoundFailure(f"DNS record not found: {name} (cached miss)")

        result: ProbeResult | None = None
        doh_error: DatDnsError | None = None

        if not opts.skip_dns_over_https:
            try:
                result = await self.doh.probe(name)
            except DatDnsError as exc:
                # Fall through to the well-known probe
                doh_error = exc

        if result is None and not opts.skip_well_known:
            try:
                result = await self.well_known.probe(name)
            except DatDnsError as exc:
                if exc.is_not_found:
                    self._remember_miss(name)
                raise

        if result is None:
            raise RecordNotFoundFailure(f"DNS record not found: {name}") from doh_error

        self._store(name, result)
        return result.key

    def _remember_miss(self, name: str) -> None:
        self.memory_cache.set(name, MISS, self.settings.cache.negative_ttl_seconds)

    def _store(self, name: str, result: ProbeResult) -> None:
        self.memory_cache.set(name, result.key, result.ttl)
        if self.persistent_cache is not None:
            task = asyncio.ensure_future(
                self.persistent_cache.write(name, result.key, result.ttl)
            )
            self._pending_writes.add(task)
            task.add_done_callback(self._on_write_done)

    def _on_write_done(self, task: asyncio.Task) -> None:
        self._pending_writes.discard(task)
        if not task.cancelled() and task.exception() is not None:
            log.warning("persistent_cache_write_failed", exc_info=task.exception())

    async def drain(self) -> None:
        """Wait for outstanding persistent cache writes to finish."""
        if self._pending_writes:
            await asyncio.gather(*self._pending_writes, return_exceptions=True)

    def list_cache(self) -> dict[str, str | MissMarker]:
        return self.memory_cache.list()

    def flush_cache(self) -> None:
        self.memory_cache.flush()


@asynccontextmanager
async def open_resolver(
    settings: Settings,
    *,
    events: EventEmitter | None = None,
    rng: random.Random | None = None,
) -> AsyncGenerator[NameResolver, None]:
    """Create and tear down a resolver with its HTTP client and optional SQLite store."""
    http_client = build_http_client(settings.transport)
    db: aiosqlite.Connection | None = None
    persistent_cache: SqlitePersistentCache | None = None

    if settings.cache.persistent:
        db_path = Path(settings.cache.db_path).expanduser()
        db_path.parent.mkdir(parents=True, exist_ok=True)
        db = await aiosqlite.connect(str(db_path))
        persistent_cache = SqlitePersistentCache(db)
        await persistent_cache.init_db()
        await run_persistent_cache_cleanup(
            persistent_cache, settings.cache.persistent_retention_days
        )

    resolver = NameResolver(
        settings,
        HttpxTransport(http_client),
        persistent_cache=persistent_cache,
        events=events,
        rng=rng,
    )
    sweeper_task = asyncio.create_task(
        run_memory_cache_sweeper(resolver.memory_cache, settings.cache.sweep_interval_seconds)
    )
    log.debug(
        "resolver_opened",
        provider=str(resolver.doh.provider),
        persistent=persistent_cache is not None,
    )

    try:
        yield resolver
    finally:
        sweeper_task.cancel()
        with suppress(asyncio.CancelledError):
            await sweeper_task
        await resolver.drain()
        await http_client.aclose()
        if db is not None:
            await db.close()
