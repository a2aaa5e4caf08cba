"""Protocol interfaces for swappable implementations.

This package contains protocol definitions using structural typing.
Protocols enable:
- Easy swapping of implementations (memory -> PostgreSQL -> anything else)
- Unit testing with fake implementations
- Clear separation of concerns

Usage:
    ```python
    from smart_fetch.protocols import Fetcher, StorageAdapter

    adapter: StorageAdapter = BoundedMemoryAdapter()           # works
    adapter: StorageAdapter = PostgresCacheAdapter(creds, "t")  # also works
    ```
"""

from .fetcher import Fetcher
from .storage_adapter import StorageAdapter

__all__ = [
    "Fetcher",
    "StorageAdapter",
]
