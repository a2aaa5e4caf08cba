"""In-process implementation of StorageAdapter.

Entries live in a MemoryStore shared by every adapter that is handed the
same store. The process-wide default store is created once and lives until
the process exits.
"""

from collections.abc import Callable, Iterator
from functools import lru_cache

from smart_fetch.config import settings
from smart_fetch.entities import CacheEntry, current_time_ms, is_valid
from smart_fetch.log_config import get_logger

MAX_ENTRIES = 1000

logger = get_logger(__name__)


class MemoryStore:
    """Insertion-ordered mapping of cache key to entry with a capacity limit.

    Overwriting an existing key keeps its original insertion position, so
    eviction order is strictly FIFO by first insertion.

    Not thread-safe: a multi-threaded host must guard it with its own lock.
    """

    def __init__(self, max_entries: int = MAX_ENTRIES) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._entries: dict[str, CacheEntry] = {}
        self._max_entries = max_entries

    @property
    def max_entries(self) -> int:
        return self._max_entries

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def get(self, key: str) -> CacheEntry | None:
        return self._entries.get(key)

    def put(self, entry: CacheEntry) -> None:
        self._entries[entry.key] = entry

    def remove(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def prune_expired(self, now_ms: int) -> int:
        """Drop every entry that fails the validity check.

        Returns:
            Number of entries removed
        """
        expired = [key for key, entry in self._entries.items() if not is_valid(entry, now_ms)]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def evict_oldest(self) -> str:
        """Remove and return the oldest-inserted key."""
        key = next(iter(self._entries))
        del self._entries[key]
        return key


@lru_cache
def get_process_store() -> MemoryStore:
    """Get the process-wide memory store, creating it on first use."""
    return MemoryStore(max_entries=settings.cache_max_entries)


class BoundedMemoryAdapter:
    """Memory implementation with lazy TTL expiry and FIFO eviction.

    This class satisfies the StorageAdapter protocol through structural
    typing - no explicit inheritance needed.

    Example:
        ```python
        adapter = BoundedMemoryAdapter(store=MemoryStore(max_entries=10))
        await adapter.set(entry)
        await adapter.get(entry.key)
        ```
    """

    def __init__(
        self,
        store: MemoryStore | None = None,
        clock: Callable[[], int] = current_time_ms,
    ) -> None:
        """Initialize the memory adapter.

        Args:
            store: Backing store. If None, uses the process-wide store.
            clock: Source of the current time in epoch milliseconds.
        """
        self._store = store if store is not None else get_process_store()
        self._clock = clock

    async def get(self, key: str) -> CacheEntry | None:
        entry = self._store.get(key)
        if entry is None:
            return None

        if not is_valid(entry, self._clock()):
            self._store.remove(key)
            logger.debug("memory_entry_expired", key=key)
            return None

        return entry

    async def set(self, entry: CacheEntry) -> None:
        self._store.prune_expired(self._clock())

        # A replacement does not grow the store
        if entry.key not in self._store:
            while len(self._store) >= self._store.max_entries:
                evicted = self._store.evict_oldest()
                logger.debug("memory_entry_evicted", key=evicted)

        self._store.put(entry)

    async def delete(self, key: str) -> None:
        self._store.remove(key)

    async def close(self) -> None:
        """No-op: the store outlives the adapter."""

    def get_stats(self) -> dict:
        """Get adapter statistics.

        Returns:
            Dictionary with stats
        """
        return {
            "backend": "memory",
            "total_entries": len(self._store),
            "max_entries": self._store.max_entries,
        }

    @property
    def store(self) -> MemoryStore:
        """Get the backing store (for testing)."""
        return self._store
