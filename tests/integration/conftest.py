"""Integration test fixtures.

Wires the real HttpxTransport and SQLite persistent cache through
``open_resolver``; HTTP is intercepted with respx.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest
import structlog

from datdns.config import Settings
from tests.helpers import DOH_PROVIDER

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture()
def persistent_settings(tmp_path: Path) -> Settings:
    """Settings with a pinned provider and a SQLite store under tmp_path."""
    return Settings(
        doh={"provider": DOH_PROVIDER.model_dump()},
        cache={"persistent": True, "db_path": str(tmp_path / "state" / "names.db")},
    )


@pytest.fixture()
def cli_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the CLI at the fake provider and an isolated database path.

    The CLI's logging setup is replaced with a quiet, uncached configuration:
    structlog would otherwise print to the stdout the tests parse, and cached
    loggers must not outlive this test's captured streams.
    """

    def _quiet_logging(settings: Settings) -> None:
        structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(logging.CRITICAL))

    db_path = tmp_path / "cli.db"
    monkeypatch.setenv("DATDNS__DOH__PROVIDER", DOH_PROVIDER.model_dump_json())
    monkeypatch.setenv("DATDNS__CACHE__DB_PATH", str(db_path))
    monkeypatch.setattr("datdns.cli.setup_logging", _quiet_logging)
    yield db_path
    structlog.reset_defaults()
