"""Unit tests for datdns.memory_cache."""

from __future__ import annotations

from typing import TYPE_CHECKING

from datdns.events import CacheFlushedEvent, EventEmitter
from datdns.memory_cache import MemoryCache
from datdns.models.cache import MISS
from tests.helpers import KEY_A, KEY_B, FakeClock

if TYPE_CHECKING:
    from datdns.events import Event


class TestGetSet:
    def test_unknown_returns_none(self, clock: FakeClock) -> None:
        cache = MemoryCache(clock=clock)
        assert cache.get("example.com") is None

    def test_positive_entry(self, clock: FakeClock) -> None:
        cache = MemoryCache(clock=clock)
        cache.set("example.com", KEY_A, 60)
        assert cache.get("example.com") == KEY_A

    def test_negative_entry_distinct_from_unknown(self, clock: FakeClock) -> None:
        cache = MemoryCache(clock=clock)
        cache.set("example.com", MISS, 60)
        assert cache.get("example.com") is MISS
        assert cache.get("other.com") is None

    def test_overwrite(self, clock: FakeClock) -> None:
        cache = MemoryCache(clock=clock)
        cache.set("example.com", MISS, 60)
        cache.set("example.com", KEY_B, 60)
        assert cache.get("example.com") == KEY_B

    def test_zero_ttl_is_noop(self, clock: FakeClock) -> None:
        cache = MemoryCache(clock=clock)
        cache.set("example.com", KEY_A, 0)
        assert cache.get("example.com") is None

    def test_zero_ttl_leaves_existing_entry(self, clock: FakeClock) -> None:
        cache = MemoryCache(clock=clock)
        cache.set("example.com", KEY_A, 60)
        cache.set("example.com", KEY_B, 0)
        assert cache.get("example.com") == KEY_A


class TestExpiry:
    def test_live_before_expiry(self, clock: FakeClock) -> None:
        cache = MemoryCache(clock=clock)
        cache.set("example.com", KEY_A, 60)
        clock.advance(59.9)
        assert cache.get("example.com") == KEY_A

    def test_expired_entry_is_unknown(self, clock: FakeClock) -> None:
        cache = MemoryCache(clock=clock)
        cache.set("example.com", KEY_A, 60)
        clock.advance(60)
        assert cache.get("example.com") is None
        assert len(cache) == 0

    def test_expired_miss_is_unknown(self, clock: FakeClock) -> None:
        cache = MemoryCache(clock=clock)
        cache.set("example.com", MISS, 60)
        clock.advance(61)
        assert cache.get("example.com") is None

    def test_sweep_removes_only_expired(self, clock: FakeClock) -> None:
        cache = MemoryCache(clock=clock)
        cache.set("short.com", KEY_A, 10)
        cache.set("long.com", KEY_B, 100)
        clock.advance(50)
        assert cache.sweep() == 1
        assert len(cache) == 1
        assert cache.get("long.com") == KEY_B


class TestListAndFlush:
    def test_list_returns_live_entries(self, clock: FakeClock) -> None:
        cache = MemoryCache(clock=clock)
        cache.set("a.com", KEY_A, 10)
        cache.set("b.com", MISS, 100)
        clock.advance(20)
        assert cache.list() == {"b.com": MISS}

    def test_flush_clears_everything(self, clock: FakeClock) -> None:
        cache = MemoryCache(clock=clock)
        cache.set("a.com", KEY_A, 10)
        cache.set("b.com", MISS, 10)
        cache.flush()
        assert cache.list() == {}
        assert cache.get("a.com") is None

    def test_flush_emits_event(
        self, clock: FakeClock, events: EventEmitter, recorded_events: list[Event]
    ) -> None:
        cache = MemoryCache(events, clock=clock)
        cache.flush()
        assert recorded_events == [CacheFlushedEvent()]
