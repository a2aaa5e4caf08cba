"""Service layer for business logic.

This layer contains the core business logic and orchestration.
Services depend on protocols (interfaces), not concrete implementations,
making them testable and flexible.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Data Access)

Usage:
    ```python
    from smart_fetch.services import BatchOptions, run_batch

    results = await run_batch(
        BatchOptions(cache_storage="memory", cache_duration=300),
        items=[FetchItem(url="https://api.example.com/data")],
        fetcher=HttpFetcher.create(),
    )
    ```
"""

from .fetch_service import (
    MEMORY_STORAGE,
    POSTGRES_STORAGE,
    BatchOptions,
    FetchService,
    LookupOutcome,
    build_adapter,
    run_batch,
)
from .validation import MAX_CUSTOM_TTL, TTL_PRESETS, resolve_ttl, validate_table_name

__all__ = [
    "MEMORY_STORAGE",
    "POSTGRES_STORAGE",
    "BatchOptions",
    "FetchService",
    "LookupOutcome",
    "build_adapter",
    "run_batch",
    "MAX_CUSTOM_TTL",
    "TTL_PRESETS",
    "resolve_ttl",
    "validate_table_name",
]
