"""Fetch service for core business logic.

This service orchestrates cached fetches by coordinating the storage
adapter (data access) and the fetcher (HTTP collaborator).
"""

import enum
import json
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from smart_fetch.entities import (
    CacheEntry,
    FetchItem,
    FetchResult,
    HttpAuth,
    PostgresCredentials,
    current_time_ms,
    is_valid,
)
from smart_fetch.errors import CacheConfigurationError
from smart_fetch.keys import credential_fingerprint, derive_key
from smart_fetch.log_config import get_logger
from smart_fetch.protocols import Fetcher, StorageAdapter
from smart_fetch.repositories import (
    BoundedMemoryAdapter,
    MemoryStore,
    PostgresCacheAdapter,
)

from .validation import resolve_ttl, validate_table_name

logger = get_logger(__name__)

MEMORY_STORAGE = "memory"
POSTGRES_STORAGE = "postgres"


class LookupOutcome(enum.Enum):
    HIT = "hit"
    MISS = "miss"
    CORRUPT = "corrupt"


def serialize_payload(payload: Any) -> str:
    """Serialize a fetched payload for storage."""
    return json.dumps(payload, separators=(",", ":"))


class FetchService:
    """Core cached-fetch orchestration service.

    This service depends on PROTOCOLS, not concrete implementations:
    - StorageAdapter: can be memory, PostgreSQL, etc.
    - Fetcher: can be httpx or any fake

    Items are processed one at a time. A failed fetch becomes an error
    result for that item and never aborts the rest of the batch.

    Example:
        ```python
        service = FetchService(
            adapter=BoundedMemoryAdapter(),
            fetcher=HttpFetcher.create(),
            ttl=300,
        )
        result = await service.process_item("https://api.example.com/data")
        ```
    """

    def __init__(
        self,
        adapter: StorageAdapter,
        fetcher: Fetcher,
        ttl: int,
        clock: Callable[[], int] = current_time_ms,
    ) -> None:
        """Initialize the fetch service.

        Args:
            adapter: Cache storage backend (required).
            fetcher: HTTP collaborator used on cache misses (required).
            ttl: Time-to-live in seconds for newly stored entries.
            clock: Source of the current time in epoch milliseconds.
        """
        self._adapter = adapter
        self._fetcher = fetcher
        self._ttl = ttl
        self._clock = clock

    async def process_item(
        self,
        url: str,
        auth: HttpAuth | None = None,
        index: int = 0,
    ) -> FetchResult:
        """Resolve one URL from the cache or the network.

        Business logic:
        1. Derive the credential-scoped cache key
        2. Serve a valid, decodable cached entry
        3. Delete a corrupt entry and treat it as a miss
        4. Fetch on miss, store the result and return it
        5. Record fetch failures as an error result

        Args:
            url: The URL to fetch
            auth: Optional authentication for the request and key scoping
            index: Position of the item in its batch

        Returns:
            FetchResult with the payload, or an error payload
        """
        key = derive_key(url, credential_fingerprint(auth))
        entry = await self._adapter.get(key)
        outcome, payload = self._inspect(entry)

        if outcome is LookupOutcome.HIT:
            logger.debug("cache_hit", key=key, index=index)
            return FetchResult(index=index, data=payload, cached=True)

        if outcome is LookupOutcome.CORRUPT:
            logger.warning("cache_entry_corrupt", key=key, index=index)
            await self._discard(key)
        else:
            logger.debug("cache_miss", key=key, index=index)

        try:
            payload = await self._fetcher.fetch(url, auth)
        except Exception as e:
            logger.warning("fetch_failed", url=url, index=index, error=str(e))
            return FetchResult.failure(index=index, message=str(e))

        await self._adapter.set(
            CacheEntry(
                key=key,
                request_url=url,
                response=serialize_payload(payload),
                cached_at=self._clock(),
                ttl=self._ttl,
            )
        )
        return FetchResult(index=index, data=payload)

    async def process_batch(self, items: Sequence[FetchItem]) -> list[FetchResult]:
        """Process items sequentially, one result per item in order.

        Args:
            items: The batch items

        Returns:
            List of FetchResult, index-aligned with ``items``
        """
        results = []
        for index, item in enumerate(items):
            results.append(await self.process_item(item.url, item.auth, index=index))
        return results

    def _inspect(self, entry: CacheEntry | None) -> tuple[LookupOutcome, Any]:
        if entry is None or not is_valid(entry, self._clock()):
            return LookupOutcome.MISS, None

        try:
            return LookupOutcome.HIT, json.loads(entry.response)
        except (TypeError, ValueError):
            return LookupOutcome.CORRUPT, None

    async def _discard(self, key: str) -> None:
        try:
            await self._adapter.delete(key)
        except Exception:
            logger.warning("cache_delete_failed", key=key, exc_info=True)

    async def close(self) -> None:
        """Close the adapter, logging and swallowing any failure."""
        try:
            await self._adapter.close()
        except Exception:
            logger.warning("cache_close_failed", exc_info=True)


@dataclass(frozen=True)
class BatchOptions:
    """Cache configuration shared by every item of a batch.

    Attributes:
        cache_storage: "memory" or "postgres"
        cache_duration: A preset TTL in seconds, or "custom"
        custom_ttl: TTL in seconds when ``cache_duration`` is "custom"
        table_name: PostgreSQL table (postgres storage only)
        postgres: PostgreSQL connection settings (postgres storage only)
    """

    cache_storage: str = MEMORY_STORAGE
    cache_duration: int | str = 3600
    custom_ttl: int | None = None
    table_name: str | None = None
    postgres: PostgresCredentials | None = None


def build_adapter(
    options: BatchOptions,
    memory_store: MemoryStore | None = None,
    clock: Callable[[], int] = current_time_ms,
) -> StorageAdapter:
    """Validate the storage part of a batch configuration and build its adapter.

    Raises:
        CacheConfigurationError: For an unknown storage, an unsafe table
            name or missing PostgreSQL credentials
    """
    if options.cache_storage == MEMORY_STORAGE:
        return BoundedMemoryAdapter(store=memory_store, clock=clock)

    if options.cache_storage == POSTGRES_STORAGE:
        if options.table_name is None:
            raise CacheConfigurationError("A cache table name is required for PostgreSQL storage")
        validate_table_name(options.table_name)
        if options.postgres is None:
            raise CacheConfigurationError("PostgreSQL credentials are required for PostgreSQL storage")
        return PostgresCacheAdapter(options.postgres, options.table_name)

    raise CacheConfigurationError(
        f"Cache storage must be '{MEMORY_STORAGE}' or '{POSTGRES_STORAGE}', got {options.cache_storage!r}"
    )


async def run_batch(
    options: BatchOptions,
    items: Sequence[FetchItem],
    fetcher: Fetcher,
    memory_store: MemoryStore | None = None,
    clock: Callable[[], int] = current_time_ms,
) -> list[FetchResult]:
    """Validate the batch configuration, process every item and tear down.

    Configuration errors abort before any item runs. The adapter is closed
    once all items are done, or when processing aborts; close failures are
    swallowed so they never hide the original error.

    Args:
        options: Batch-wide cache configuration
        items: Items to process
        fetcher: HTTP collaborator
        memory_store: Store for memory storage (process-wide store if None)
        clock: Source of the current time in epoch milliseconds

    Returns:
        One FetchResult per item, in order

    Raises:
        CacheConfigurationError: If the configuration is invalid
    """
    ttl = resolve_ttl(options.cache_duration, options.custom_ttl)
    adapter = build_adapter(options, memory_store, clock)
    service = FetchService(adapter=adapter, fetcher=fetcher, ttl=ttl, clock=clock)

    logger.info(
        "batch_started",
        storage=options.cache_storage,
        ttl=ttl,
        items=len(items),
    )
    try:
        results = await service.process_batch(items)
    finally:
        await service.close()

    logger.info(
        "batch_completed",
        items=len(results),
        cached=sum(1 for result in results if result.cached),
        errors=sum(1 for result in results if result.error),
    )
    return results
