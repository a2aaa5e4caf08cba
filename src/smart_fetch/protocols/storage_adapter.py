"""Storage adapter protocol.

Defines the interface for any backend that can hold cache entries.

Implementations include:
- BoundedMemoryAdapter (process-wide, capacity-limited)
- PostgresCacheAdapter (durable, lazily provisioned table)
"""

from typing import Protocol, runtime_checkable

from smart_fetch.entities import CacheEntry


@runtime_checkable
class StorageAdapter(Protocol):
    """Protocol for cache storage backends.

    Any type that implements these coroutines satisfies the protocol,
    no explicit inheritance needed.

    Example:
        ```python
        adapter: StorageAdapter = BoundedMemoryAdapter()
        await adapter.set(entry)
        cached = await adapter.get(entry.key)
        ```
    """

    async def get(self, key: str) -> CacheEntry | None:
        """Look up an entry by key.

        Args:
            key: The derived cache key

        Returns:
            The stored entry, or None if absent. Absence is not an error.
        """
        ...

    async def set(self, entry: CacheEntry) -> None:
        """Insert or fully replace the entry stored under ``entry.key``.

        Args:
            entry: The entry to store
        """
        ...

    async def delete(self, key: str) -> None:
        """Remove an entry. Deleting a missing key is a no-op.

        Args:
            key: The derived cache key
        """
        ...

    async def close(self) -> None:
        """Release any held resource.

        Must be idempotent and safe on a backend that was never used.
        """
        ...
