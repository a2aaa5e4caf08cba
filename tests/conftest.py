"""
Shared fixtures for the smart fetch tests.
"""

import json
from typing import Any

import pytest

from smart_fetch.entities import CacheEntry, HttpAuth
from smart_fetch.repositories import BoundedMemoryAdapter, MemoryStore

NOW_MS = 1_700_000_000_000


class FakeClock:
    """Controllable millisecond clock."""

    def __init__(self, now_ms: int = NOW_MS) -> None:
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, seconds: float) -> None:
        self.now_ms += int(seconds * 1000)


class FakeFetcher:
    """Fetcher returning canned payloads and recording calls."""

    def __init__(self, payload: Any = None, errors: dict[str, Exception] | None = None) -> None:
        self.payload = {"success": True} if payload is None else payload
        self.errors = errors or {}
        self.calls: list[tuple[str, HttpAuth | None]] = []

    async def fetch(self, url: str, auth: HttpAuth | None = None) -> Any:
        self.calls.append((url, auth))
        if url in self.errors:
            raise self.errors[url]
        return self.payload


@pytest.fixture
def clock():
    """A fake clock frozen at a fixed instant."""
    return FakeClock()


@pytest.fixture
def memory_store():
    """A fresh memory store, isolated from the process-wide one."""
    return MemoryStore()


@pytest.fixture
def memory_adapter(memory_store, clock):
    """A memory adapter bound to the fresh store and fake clock."""
    return BoundedMemoryAdapter(store=memory_store, clock=clock)


@pytest.fixture
def fetcher():
    """A fake fetcher answering every URL with {"success": true}."""
    return FakeFetcher()


@pytest.fixture
def make_entry(clock):
    """Factory for cache entries with sensible defaults."""

    def _make(**overrides: Any) -> CacheEntry:
        values = {
            "key": "test-key",
            "request_url": "https://example.com/api",
            "response": json.dumps({"data": "test"}),
            "cached_at": clock(),
            "ttl": 3600,
        }
        values.update(overrides)
        return CacheEntry(**values)

    return _make


@pytest.fixture
def make_fetcher():
    """Factory for fake fetchers with per-URL failures."""
    return FakeFetcher
