"""Cache entry domain entity and validity rule."""

import time
from dataclasses import dataclass

# Largest TTL offset honoured by the validity check (2**31 - 1 ms, about 24.8 days).
# Longer TTLs are silently capped here; intake validation rejects absurd custom TTLs.
MAX_TTL_MS = 2_147_483_647


def current_time_ms() -> int:
    """Return the current wall-clock time in epoch milliseconds."""
    return time.time_ns() // 1_000_000


@dataclass(frozen=True)
class CacheEntry:
    """Domain entity for one memoized HTTP response.

    Entries are never mutated; storing a new value for the same key
    replaces every field.

    Attributes:
        key: Derived cache identifier (primary key in every backend)
        request_url: The original URL, for diagnostics only
        response: The serialized JSON payload
        cached_at: Epoch milliseconds at write time
        ttl: Seconds the entry stays valid after ``cached_at``
    """

    key: str
    request_url: str
    response: str
    cached_at: int
    ttl: int

    @property
    def expires_at(self) -> int:
        """Epoch milliseconds at which the entry stops being valid."""
        return self.cached_at + min(self.ttl * 1000, MAX_TTL_MS)

    def is_valid(self, now_ms: int) -> bool:
        return is_valid(self, now_ms)


def is_valid(entry: CacheEntry, now_ms: int) -> bool:
    """Check whether a cache entry can still be served.

    Args:
        entry: The cached entry
        now_ms: Current time in epoch milliseconds

    Returns:
        True if ``now_ms`` is strictly before the (capped) expiry instant
    """
    return now_ms < entry.expires_at
