"""HTTPS transport backed by a shared httpx client.

All network I/O goes through a single HttpxTransport instance shared across
resolutions. The transport receives an httpx.AsyncClient via constructor
injection: whoever builds the resolver owns the client lifecycle.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import httpx
import structlog

if TYPE_CHECKING:
    from collections.abc import Mapping

    from datdns.config import TransportSettings

log = structlog.get_logger()


@dataclass
class TransportResponse:
    """Status and decoded body of one GET. ``status_code == 0`` means no response."""

    status_code: int
    body: str = ""
    error: Exception | None = None


def build_http_client(settings: TransportSettings | None = None) -> httpx.AsyncClient:
    """Create the shared httpx client. Called once per resolver."""
    timeout = settings.timeout_seconds if settings is not None else 2.0
    user_agent = settings.user_agent if settings is not None else "datdns/1.0"
    return httpx.AsyncClient(
        follow_redirects=False,
        timeout=httpx.Timeout(timeout),
        headers={"User-Agent": user_agent},
        limits=httpx.Limits(
            max_connections=10,
            max_keepalive_connections=5,
        ),
    )


def build_url(host: str, port: int, path: str) -> str:
    """``('example.com', 443, '/x')`` → ``'https://example.com/x'``."""
    netloc = host if port == 443 else f"{host}:{port}"
    return f"https://{netloc}{path}"


class HttpxTransport:
    """TransportProtocol implementation over ``httpx.AsyncClient``."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def get(
        self,
        host: str,
        port: int,
        path: str,
        headers: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> TransportResponse:
        """GET ``https://host:port/path``. Network errors become status 0."""
        url = build_url(host, port, path)
        kwargs: dict = {"headers": dict(headers or {})}
        if timeout is not None:
            kwargs["timeout"] = httpx.Timeout(timeout)

        try:
            response = await self._client.get(url, **kwargs)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            log.debug("transport_error", url=url, error=str(exc))
            return TransportResponse(status_code=0, error=exc)

        log.debug("transport_response", url=url, status_code=response.status_code)
        return TransportResponse(status_code=response.status_code, body=response.text)
