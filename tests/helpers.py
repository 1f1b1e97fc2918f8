"""Test doubles and sample data shared across the suite."""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field

from datdns.models.resolution import DohProvider
from datdns.transport import TransportResponse

KEY_A = "a" * 64
KEY_B = "b" * 64
KEY_C = "c" * 64
KEY_MIXED = "0123456789abcdef" * 4

# A sibling protocol with 52-character base32 keys
BASE32_RECORDS = {
    "hash_pattern": r"^[a-z2-7]{52}$",
    "protocol_scheme": "hyper",
    "txt_label": "hyperkey",
}
KEY_BASE32 = ("abcdefghijklmnopqrstuvwxyz234567" * 2)[:52]

DOH_PROVIDER = DohProvider(host="doh.test", port=443, path="/dns-query")
DOH_URL = "https://doh.test/dns-query"


def doh_body(*answers: dict, status: int = 0) -> str:
    """JSON DNS-over-HTTPS response body carrying ``answers``."""
    return json.dumps({"Status": status, "Answer": list(answers)})


def txt_answer(key: str, ttl: object = 300, label: str = "datkey", quoted: bool = True) -> dict:
    data = f"{label}={key}"
    if quoted:
        data = f'"{data}"'
    return {"name": "example.com.", "type": 16, "TTL": ttl, "data": data}


@dataclass
class Call:
    host: str
    port: int
    path: str
    headers: dict[str, str]
    timeout: float | None


@dataclass
class FakeTransport:
    """In-memory TransportProtocol. Unrouted requests behave like a network error."""

    routes: dict[tuple[str, str], TransportResponse] = field(default_factory=dict)
    calls: list[Call] = field(default_factory=list)

    def route(self, host: str, path: str, status_code: int = 200, body: str = "") -> None:
        self.routes[(host, path)] = TransportResponse(status_code=status_code, body=body)

    async def get(self, host, port, path, headers=None, timeout=None) -> TransportResponse:
        self.calls.append(Call(host, port, path, dict(headers or {}), timeout))
        await asyncio.sleep(0)  # suspend like a real network call
        response = self.routes.get((host, path.split("?", 1)[0]))
        if response is None:
            return TransportResponse(status_code=0, error=ConnectionError(f"no route to {host}"))
        return response

    def calls_to(self, host: str) -> list[Call]:
        return [c for c in self.calls if c.host == host]


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds
