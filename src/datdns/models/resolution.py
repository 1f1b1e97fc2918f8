from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_TTL = 3600  # 1 hour
MAX_TTL = 3600 * 24 * 7  # 1 week
NEGATIVE_TTL = 60  # well-known misses are remembered for a minute

ProbeMethod = Literal["dns-over-https", "well-known"]


class ResolutionOptions(BaseModel):
    """Per-call flags for ``NameResolver.resolve_name``. Never persisted."""

    model_config = ConfigDict(frozen=True)

    ignore_cache: bool = False
    ignore_cached_miss: bool = False
    skip_dns_over_https: bool = False
    skip_well_known: bool = False


class ProbeResult(BaseModel):
    """Successful outcome of a single probe."""

    key: str = Field(min_length=1)
    ttl: int = Field(ge=0, le=MAX_TTL)
    method: ProbeMethod


class NormalizedName(BaseModel):
    """Output of the name normalizer.

    ``is_key`` is set when the input was already a raw key, in which case
    ``value`` is the lowercased key and no lookup is needed.
    """

    model_config = ConfigDict(frozen=True)

    value: str
    is_key: bool = False


class DohProvider(BaseModel):
    """DNS-over-HTTPS endpoint speaking the JSON API (``application/dns-json``)."""

    model_config = ConfigDict(frozen=True)

    host: str
    port: int = 443
    path: str = "/dns-query"

    def __str__(self) -> str:
        return f"{self.host}:{self.port}{self.path}"
