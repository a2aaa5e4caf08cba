"""Repository layer for data access.

This layer abstracts external dependencies (process memory, PostgreSQL,
remote HTTP APIs) behind protocol-based interfaces. This enables:
- Easy swapping of implementations (memory -> PostgreSQL, httpx -> fakes)
- Unit testing with fake implementations
- Clear separation of concerns

The repositories are protocol-based (structural typing), not inheritance-based.
Any class implementing the required methods will satisfy the protocol.
"""

from smart_fetch.protocols import Fetcher, StorageAdapter

from .http_fetcher import HttpFetcher
from .memory_adapter import MAX_ENTRIES, BoundedMemoryAdapter, MemoryStore, get_process_store
from .postgres_adapter import PostgresCacheAdapter, quote_identifier, resolve_ssl

__all__ = [
    "Fetcher",
    "StorageAdapter",
    "HttpFetcher",
    "MAX_ENTRIES",
    "BoundedMemoryAdapter",
    "MemoryStore",
    "get_process_store",
    "PostgresCacheAdapter",
    "quote_identifier",
    "resolve_ssl",
]
