"""Protocol interfaces for the resolver's collaborators.

The resolver and probes reference these protocols, not the concrete
implementations, so tests can substitute in-memory fakes and embedders can
bring their own HTTP stack or durable store.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Mapping

    from datdns.transport import TransportResponse


class TransportProtocol(Protocol):
    """Issues a single HTTPS GET.

    Implementations never raise for network problems: they report them as a
    response with ``status_code == 0``.
    """

    async def get(
        self,
        host: str,
        port: int,
        path: str,
        headers: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> TransportResponse: ...


class PersistentCacheProtocol(Protocol):
    """Durable fallback store consulted only after every live probe failed."""

    async def read(self, name: str, error: Exception) -> str:
        """Return a stored key for ``name`` or raise (usually ``error`` itself)."""
        ...

    async def write(self, name: str, key: str, ttl: int) -> None: ...
