"""Shared test fixtures for the datdns test suite."""

from __future__ import annotations

import pytest

from datdns.config import Settings
from datdns.events import Event, EventEmitter
from datdns.parser import RecordPatterns
from tests.helpers import DOH_PROVIDER, FakeClock, FakeTransport


@pytest.fixture()
def settings() -> Settings:
    """Settings pinned to a single fake DNS-over-HTTPS provider."""
    return Settings(doh={"provider": DOH_PROVIDER.model_dump()})


@pytest.fixture()
def patterns(settings: Settings) -> RecordPatterns:
    return RecordPatterns.from_settings(settings.records)


@pytest.fixture()
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def recorded_events() -> list[Event]:
    return []


@pytest.fixture()
def events(recorded_events: list[Event]) -> EventEmitter:
    return EventEmitter([recorded_events.append])
