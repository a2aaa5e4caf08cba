"""Domain entities for internal representation.

These are pure dataclasses (frozen) used internally by services
and repositories. They are NOT used for API contracts - use DTOs
from the dto package for that.

Entities should have:
- No JSON serialization logic
- No Pydantic validation
- No external dependencies
- Pure domain logic only
"""

from .cache_entry import MAX_TTL_MS, CacheEntry, current_time_ms, is_valid
from .credentials import HttpAuth, PostgresCredentials
from .fetch_item import FetchItem, FetchResult

__all__ = [
    "MAX_TTL_MS",
    "CacheEntry",
    "current_time_ms",
    "is_valid",
    "HttpAuth",
    "PostgresCredentials",
    "FetchItem",
    "FetchResult",
]
