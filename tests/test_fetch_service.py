"""
Tests for the cached fetch orchestration.
"""

from dataclasses import replace
from unittest.mock import MagicMock

import pytest

from smart_fetch.entities import CacheEntry, FetchItem, HttpAuth, PostgresCredentials
from smart_fetch.errors import CacheConfigurationError
from smart_fetch.keys import credential_fingerprint, derive_key
from smart_fetch.repositories import BoundedMemoryAdapter, PostgresCacheAdapter
from smart_fetch.services import BatchOptions, FetchService, build_adapter, run_batch
from smart_fetch.services import fetch_service as fetch_service_module

URL = "https://api.example.com/data"


@pytest.fixture
def service(memory_adapter, fetcher, clock):
    """A fetch service over the isolated memory adapter."""
    return FetchService(adapter=memory_adapter, fetcher=fetcher, ttl=300, clock=clock)


@pytest.fixture
def postgres_options():
    """Batch options selecting PostgreSQL storage."""
    return BatchOptions(
        cache_storage="postgres",
        cache_duration=300,
        table_name="smartfetch_cache",
        postgres=PostgresCredentials(
            host="localhost", port=5432, database="testdb", user="testuser", password="testpass"
        ),
    )


class RecordingAdapter:
    """Adapter double recording calls, with optional failures."""

    def __init__(self, entry: CacheEntry | None = None, close_error: Exception | None = None) -> None:
        self.entry = entry
        self.close_error = close_error
        self.deleted: list[str] = []
        self.stored: list[CacheEntry] = []
        self.closed = 0

    async def get(self, key):
        return self.entry

    async def set(self, entry):
        self.stored.append(entry)

    async def delete(self, key):
        self.deleted.append(key)
        raise RuntimeError("delete failed")

    async def close(self):
        self.closed += 1
        if self.close_error:
            raise self.close_error


@pytest.mark.asyncio
async def test_miss_fetches_and_stores(service, fetcher, memory_adapter, clock):
    """A cache miss calls the fetcher and stores a new entry."""
    result = await service.process_item(URL)

    assert result.data == {"success": True}
    assert result.cached is False
    assert result.error is False
    assert fetcher.calls == [(URL, None)]

    entry = await memory_adapter.get(derive_key(URL))
    assert entry.request_url == URL
    assert entry.response == '{"success":true}'
    assert entry.cached_at == clock()
    assert entry.ttl == 300


@pytest.mark.asyncio
async def test_hit_skips_fetch(service, fetcher):
    """A second request for the same URL is served from the cache."""
    await service.process_item(URL)
    result = await service.process_item(URL)

    assert result.cached is True
    assert result.data == {"success": True}
    assert len(fetcher.calls) == 1


@pytest.mark.asyncio
async def test_expired_entry_is_refetched(service, fetcher, clock):
    """After the TTL elapses the fetcher is called again."""
    await service.process_item(URL)
    clock.advance(301)

    result = await service.process_item(URL)

    assert result.cached is False
    assert len(fetcher.calls) == 2


@pytest.mark.asyncio
async def test_credentials_scope_the_cache(service, fetcher):
    """Different credentials never share a cached response."""
    alice = HttpAuth(method="bearer", credentials={"token": "alice"})
    bob = HttpAuth(method="bearer", credentials={"token": "bob"})

    await service.process_item(URL, alice)
    result = await service.process_item(URL, bob)

    assert result.cached is False
    assert len(fetcher.calls) == 2
    assert (await service.process_item(URL, alice)).cached is True


@pytest.mark.asyncio
async def test_corrupt_entry_is_repaired(service, fetcher, memory_adapter, clock):
    """An unreadable cached payload is deleted and replaced by a fresh fetch."""
    key = derive_key(URL)
    await memory_adapter.set(
        CacheEntry(key=key, request_url=URL, response="not-json", cached_at=clock(), ttl=300)
    )
    fetcher.payload = {"fresh": True}

    result = await service.process_item(URL)

    assert result.data == {"fresh": True}
    assert result.cached is False
    assert len(fetcher.calls) == 1
    assert (await memory_adapter.get(key)).response == '{"fresh":true}'


@pytest.mark.asyncio
async def test_repair_ignores_delete_failure(fetcher, clock):
    """A failing delete during repair does not stop the refetch."""
    corrupt = CacheEntry(key="k", request_url=URL, response="{broken", cached_at=clock(), ttl=300)
    adapter = RecordingAdapter(entry=corrupt)
    service = FetchService(adapter=adapter, fetcher=fetcher, ttl=300, clock=clock)

    result = await service.process_item(URL)

    assert adapter.deleted == [derive_key(URL)]
    assert result.data == {"success": True}
    assert len(adapter.stored) == 1


@pytest.mark.asyncio
async def test_fetch_failure_becomes_error_result(memory_adapter, clock, make_fetcher):
    """A failed fetch is recorded, not raised, and nothing is cached."""
    fetcher = make_fetcher(errors={URL: RuntimeError("Network error")})
    service = FetchService(adapter=memory_adapter, fetcher=fetcher, ttl=300, clock=clock)

    result = await service.process_item(URL, index=3)

    assert result.error is True
    assert result.index == 3
    assert result.data == {"error": True, "message": "Network error"}
    assert await memory_adapter.get(derive_key(URL)) is None


@pytest.mark.asyncio
async def test_batch_isolates_item_errors(memory_adapter, clock, make_fetcher):
    """One failing item does not prevent the others from being processed."""
    bad = "https://api.example.com/bad"
    fetcher = make_fetcher(errors={bad: RuntimeError("boom")})
    service = FetchService(adapter=memory_adapter, fetcher=fetcher, ttl=300, clock=clock)

    results = await service.process_batch([FetchItem(url=URL), FetchItem(url=bad), FetchItem(url=URL)])

    assert [r.index for r in results] == [0, 1, 2]
    assert [r.error for r in results] == [False, True, False]
    assert [r.cached for r in results] == [False, False, True]


@pytest.mark.asyncio
async def test_run_batch_with_memory_storage(memory_store, fetcher, clock):
    """run_batch validates, processes every item and leaves entries in the store."""
    options = BatchOptions(cache_storage="memory", cache_duration="custom", custom_ttl=60)

    results = await run_batch(
        options,
        [FetchItem(url=URL), FetchItem(url=URL)],
        fetcher=fetcher,
        memory_store=memory_store,
        clock=clock,
    )

    assert [r.cached for r in results] == [False, True]
    assert memory_store.get(derive_key(URL)).ttl == 60


@pytest.mark.asyncio
async def test_run_batch_rejects_bad_ttl_before_fetching(memory_store, fetcher):
    """An invalid custom TTL aborts the batch before any item runs."""
    options = BatchOptions(cache_duration="custom", custom_ttl=999_999_999)

    with pytest.raises(CacheConfigurationError, match="Custom TTL must be"):
        await run_batch(options, [FetchItem(url=URL)], fetcher=fetcher, memory_store=memory_store)

    assert fetcher.calls == []


@pytest.mark.asyncio
async def test_run_batch_rejects_bad_table_name(postgres_options, fetcher, monkeypatch):
    """An unsafe table name aborts the batch before any adapter is built."""
    constructed = MagicMock()
    monkeypatch.setattr(fetch_service_module, "PostgresCacheAdapter", constructed)
    options = replace(postgres_options, table_name="invalid-table-name!")

    with pytest.raises(CacheConfigurationError, match="Table name must start with"):
        await run_batch(options, [FetchItem(url=URL)], fetcher=fetcher)

    constructed.assert_not_called()
    assert fetcher.calls == []


@pytest.mark.asyncio
async def test_run_batch_closes_adapter_after_fetch_error(postgres_options, monkeypatch, clock, make_fetcher):
    """The durable adapter is closed even when an item fails."""
    adapter = RecordingAdapter()
    monkeypatch.setattr(fetch_service_module, "PostgresCacheAdapter", lambda creds, table: adapter)
    fetcher = make_fetcher(errors={URL: RuntimeError("Network error")})

    results = await run_batch(postgres_options, [FetchItem(url=URL)], fetcher=fetcher, clock=clock)

    assert results[0].data == {"error": True, "message": "Network error"}
    assert adapter.closed == 1


@pytest.mark.asyncio
async def test_run_batch_close_failure_does_not_mask_error(postgres_options, monkeypatch, fetcher):
    """A storage error propagates even when closing also fails."""

    class BrokenAdapter(RecordingAdapter):
        async def get(self, key):
            raise ConnectionError("database unavailable")

    adapter = BrokenAdapter(close_error=RuntimeError("close failed"))
    monkeypatch.setattr(fetch_service_module, "PostgresCacheAdapter", lambda creds, table: adapter)

    with pytest.raises(ConnectionError, match="database unavailable"):
        await run_batch(postgres_options, [FetchItem(url=URL)], fetcher=fetcher)

    assert adapter.closed == 1


@pytest.mark.asyncio
async def test_run_batch_swallows_close_failure(postgres_options, monkeypatch, fetcher):
    """A failing close after a successful batch still returns the results."""
    adapter = RecordingAdapter(close_error=RuntimeError("close failed"))
    monkeypatch.setattr(fetch_service_module, "PostgresCacheAdapter", lambda creds, table: adapter)

    results = await run_batch(postgres_options, [FetchItem(url=URL)], fetcher=fetcher)

    assert results[0].data == {"success": True}
    assert adapter.closed == 1


def test_build_adapter_selects_backend(postgres_options, memory_store):
    """memory and postgres storage map to their adapters."""
    assert isinstance(build_adapter(BatchOptions(), memory_store), BoundedMemoryAdapter)
    assert isinstance(build_adapter(postgres_options), PostgresCacheAdapter)


def test_build_adapter_rejects_unknown_storage():
    """Unknown storage names are configuration errors."""
    with pytest.raises(CacheConfigurationError, match="Cache storage must be"):
        build_adapter(BatchOptions(cache_storage="redis"))


def test_build_adapter_requires_postgres_credentials(postgres_options):
    """PostgreSQL storage needs connection settings."""
    with pytest.raises(CacheConfigurationError, match="credentials are required"):
        build_adapter(replace(postgres_options, postgres=None))


def test_fingerprint_used_for_key():
    """Keys for authenticated items include the credential fingerprint."""
    auth = HttpAuth(method="basic", credentials={"user": "u", "password": "p"})
    assert derive_key(URL, credential_fingerprint(auth)) != derive_key(URL)
