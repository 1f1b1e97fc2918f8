from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class MissMarker(Enum):
    """Records that a name previously failed to resolve."""

    MISS = "miss"

    def __repr__(self) -> str:
        return "MISS"


MISS = MissMarker.MISS


@dataclass
class CacheEntry:
    """Single in-memory cache slot.

    ``expires_at`` is measured on the owning cache's monotonic clock, not
    wall time.
    """

    value: str | MissMarker
    expires_at: float

    def expired(self, now: float) -> bool:
        return now >= self.expires_at
