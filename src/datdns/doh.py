"""DNS-over-HTTPS TXT probe.

Looks up ``<name>.`` TXT through a JSON DNS-over-HTTPS provider and extracts
the ``<label>=<key>`` record. One request per probe, no retries.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import urlencode

import structlog

from datdns.errors import (
    DatDnsError,
    HttpStatusFailure,
    NotFqdnError,
    TransportFailure,
)
from datdns.events import EventEmitter, FailedEvent, ResolvedEvent
from datdns.models.resolution import ProbeResult
from datdns.parser import RecordPatterns, parse_doh_response

if TYPE_CHECKING:
    from datdns.models.resolution import DohProvider
    from datdns.protocols import TransportProtocol

log = structlog.get_logger()

DOH_HEADERS = {"Accept": "application/dns-json"}


def to_fqdn(name: str) -> str:
    """Append the root label: ``'example.com'`` → ``'example.com.'``."""
    return name if name.endswith(".") else f"{name}."


class DnsOverHttpsProbe:
    """TXT record lookup against one DNS-over-HTTPS provider."""

    def __init__(
        self,
        transport: TransportProtocol,
        provider: DohProvider,
        patterns: RecordPatterns,
        events: EventEmitter | None = None,
        timeout: float | None = None,
    ) -> None:
        self._transport = transport
        self.provider = provider
        self._patterns = patterns
        self._events = events or EventEmitter()
        self._timeout = timeout

    async def probe(self, name: str) -> ProbeResult:
        """Resolve ``name`` via a TXT lookup. Raises a DatDnsError on any failure."""
        try:
            result = await self._probe(name)
        except DatDnsError as exc:
            log.debug("doh_failed", name=name, provider=str(self.provider), error=exc.message)
            self._events.emit(FailedEvent(method="dns-over-https", name=name, error=exc))
            raise

        log.debug("doh_resolved", name=name, key=result.key, ttl=result.ttl)
        self._events.emit(ResolvedEvent(method="dns-over-https", name=name, key=result.key))
        return result

    async def _probe(self, name: str) -> ProbeResult:
        if "." not in name:
            raise NotFqdnError(f"Name is not fully qualified: {name}")

        query = urlencode({"name": to_fqdn(name), "type": "TXT"})
        log.debug("doh_lookup", name=name, provider=str(self.provider))
        response = await self._transport.get(
            self.provider.host,
            self.provider.port,
            f"{self.provider.path}?{query}",
            headers=DOH_HEADERS,
            timeout=self._timeout,
        )

        if response.status_code == 0:
            raise TransportFailure(
                f"Network error querying {self.provider.host} for {name}: {response.error}"
            )
        if response.status_code != 200:
            raise HttpStatusFailure(
                f"HTTP {response.status_code} from {self.provider.host} for {name}",
                recoverable=True,
                status_code=response.status_code,
            )

        key, ttl = parse_doh_response(name, response.body, self._patterns)
        return ProbeResult(key=key, ttl=ttl, method="dns-over-https")
