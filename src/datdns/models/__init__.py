from __future__ import annotations

from datdns.models.cache import MISS, CacheEntry, MissMarker
from datdns.models.resolution import (
    DEFAULT_TTL,
    MAX_TTL,
    NEGATIVE_TTL,
    DohProvider,
    NormalizedName,
    ProbeMethod,
    ProbeResult,
    ResolutionOptions,
)

__all__ = [
    # cache
    "MISS",
    "CacheEntry",
    "MissMarker",
    # resolution
    "DEFAULT_TTL",
    "MAX_TTL",
    "NEGATIVE_TTL",
    "DohProvider",
    "NormalizedName",
    "ProbeMethod",
    "ProbeResult",
    "ResolutionOptions",
]
