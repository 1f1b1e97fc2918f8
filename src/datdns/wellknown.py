"""Well-known path probe.

Fetches ``https://<name>/.well-known/<record>`` and reads a two-line
plaintext record: the protocol URI and an optional ``TTL=`` line.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from datdns.errors import (
    DatDnsError,
    HttpStatusFailure,
    RecordNotFoundFailure,
    TransportFailure,
)
from datdns.events import EventEmitter, FailedEvent, ResolvedEvent
from datdns.models.resolution import ProbeResult
from datdns.parser import RecordPatterns, parse_well_known_record

if TYPE_CHECKING:
    from datdns.protocols import TransportProtocol

log = structlog.get_logger()


class WellKnownProbe:
    """Plaintext record lookup at a fixed path on the target host."""

    def __init__(
        self,
        transport: TransportProtocol,
        patterns: RecordPatterns,
        path: str = "/.well-known/dat",
        events: EventEmitter | None = None,
        timeout: float | None = None,
        port: int = 443,
    ) -> None:
        self._transport = transport
        self._patterns = patterns
        self.path = path
        self._events = events or EventEmitter()
        self._timeout = timeout
        self._port = port

    async def probe(self, name: str) -> ProbeResult:
        """Resolve ``name`` via its well-known record.

        Transport errors and 404s raise failures whose ``is_not_found`` is
        set; the resolver negative-caches those.
        """
        try:
            result = await self._probe(name)
        except DatDnsError as exc:
            log.debug(
                "well_known_failed",
                name=name,
                status_code=exc.status_code,
                error=exc.message,
            )
            self._events.emit(FailedEvent(method="well-known", name=name, error=exc))
            raise

        log.debug("well_known_resolved", name=name, key=result.key, ttl=result.ttl)
        self._events.emit(ResolvedEvent(method="well-known", name=name, key=result.key))
        return result

    async def _probe(self, name: str) -> ProbeResult:
        log.debug("well_known_lookup", name=name, path=self.path)
        response = await self._transport.get(name, self._port, self.path, timeout=self._timeout)

        if response.status_code == 0:
            raise TransportFailure(f"DNS record not found: no response from {name}")
        if response.status_code == 404:
            raise RecordNotFoundFailure(
                f"DNS record not found: {name}{self.path} returned 404",
                status_code=404,
            )
        if response.status_code != 200:
            raise HttpStatusFailure(
                f"DNS record not found: {name}{self.path} returned HTTP {response.status_code}",
                recoverable=True,
                status_code=response.status_code,
            )

        key, ttl = parse_well_known_record(name, response.body, self._patterns)
        return ProbeResult(key=key, ttl=ttl, method="well-known")
