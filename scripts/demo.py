#!/usr/bin/env python3
"""
Demo script for smart fetch.

This script fetches a few public JSON endpoints twice through the memory
cache and shows which results were served from the cache.
"""

import asyncio
import time

from smart_fetch import BatchOptions, FetchItem, HttpAuth, HttpFetcher, MemoryStore, run_batch
from smart_fetch.log_config import configure_logging

URLS = [
    "https://httpbin.org/get",
    "https://httpbin.org/json",
    "https://httpbin.org/status/503",
]


def print_section(title: str) -> None:
    """Print a section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


async def run_round(label: str, store: MemoryStore, fetcher: HttpFetcher, items: list[FetchItem]) -> None:
    """Run one batch and print a line per item."""
    print_section(label)

    start_time = time.time()
    results = await run_batch(
        BatchOptions(cache_storage="memory", cache_duration=300),
        items,
        fetcher=fetcher,
        memory_store=store,
    )
    elapsed_ms = (time.time() - start_time) * 1000

    for item, result in zip(items, results):
        if result.error:
            status = "ERROR "
        elif result.cached:
            status = "CACHED"
        else:
            status = "FETCH "
        print(f"  [{status}] {item.url}")
        if result.error:
            print(f"           {result.data['message']}")

    print(f"\n  {len(results)} items in {elapsed_ms:.1f} ms, {len(store)} entries cached")


async def main() -> None:
    configure_logging("warning")
    store = MemoryStore(max_entries=100)
    fetcher = HttpFetcher.create(timeout=10.0)

    items = [FetchItem(url=url) for url in URLS]
    items.append(
        FetchItem(
            url="https://httpbin.org/bearer",
            auth=HttpAuth(method="bearer", credentials={"token": "demo-token"}),
        )
    )

    try:
        await run_round("First round (cold cache)", store, fetcher, items)
        await run_round("Second round (warm cache)", store, fetcher, items)
    finally:
        await fetcher.close()


if __name__ == "__main__":
    asyncio.run(main())
