"""Smart Fetch - HTTP GET with built-in response caching.

This package provides a layered architecture for cached fetching:

Layers:
    - protocols: Interface contracts (StorageAdapter, Fetcher)
    - repositories: Data access implementations (memory, PostgreSQL, httpx)
    - services: Business logic (cache orchestration, batch validation)
    - handlers: HTTP endpoint handlers
    - dto: Data transfer objects (API contracts)
    - entities: Domain models (internal)

Usage:
    ```python
    from smart_fetch import BatchOptions, FetchItem, HttpFetcher, run_batch

    results = await run_batch(
        BatchOptions(cache_storage="memory", cache_duration=300),
        items=[FetchItem(url="https://api.example.com/data")],
        fetcher=HttpFetcher.create(),
    )
    ```

For HTTP API:
    ```python
    from smart_fetch.api.app import app
    ```
"""

from smart_fetch.config import get_settings, settings
from smart_fetch.dto import FetchRequest, FetchResponse
from smart_fetch.entities import CacheEntry, FetchItem, FetchResult, HttpAuth, PostgresCredentials, is_valid
from smart_fetch.errors import CacheConfigurationError, FetchError, SmartFetchError
from smart_fetch.handlers import FetchHandler
from smart_fetch.keys import credential_fingerprint, derive_key
from smart_fetch.protocols import Fetcher, StorageAdapter
from smart_fetch.repositories import BoundedMemoryAdapter, HttpFetcher, MemoryStore, PostgresCacheAdapter
from smart_fetch.services import BatchOptions, FetchService, run_batch

__all__ = [
    # Configuration
    "settings",
    "get_settings",
    # Errors
    "SmartFetchError",
    "CacheConfigurationError",
    "FetchError",
    # Protocols (interfaces)
    "StorageAdapter",
    "Fetcher",
    # Services (business logic)
    "FetchService",
    "BatchOptions",
    "run_batch",
    # Handlers (HTTP)
    "FetchHandler",
    # Repositories (data access)
    "BoundedMemoryAdapter",
    "MemoryStore",
    "PostgresCacheAdapter",
    "HttpFetcher",
    # Keys and validity
    "derive_key",
    "credential_fingerprint",
    "is_valid",
    # Entities (domain models)
    "CacheEntry",
    "FetchItem",
    "FetchResult",
    "HttpAuth",
    "PostgresCredentials",
    # DTOs (API contracts)
    "FetchRequest",
    "FetchResponse",
]
