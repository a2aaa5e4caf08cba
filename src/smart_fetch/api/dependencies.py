"""Dependency injection configuration for FastAPI app.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - Fetcher, memory store and handler stored in app.state during lifespan
    - Dependency functions retrieve from request.app.state
    - The memory store is created once and shared by every request
"""

from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Request

from smart_fetch.config import settings
from smart_fetch.handlers import FetchHandler
from smart_fetch.log_config import configure_logging, get_logger
from smart_fetch.repositories import HttpFetcher, get_process_store

logger = get_logger(__name__)


def get_handler(request: Request) -> FetchHandler:
    """Dependency injection for FetchHandler from app.state.

    Args:
        request: FastAPI Request object

    Returns:
        The FetchHandler instance from app.state

    Raises:
        RuntimeError: If handler is not initialized
    """
    handler = getattr(request.app.state, "fetch_handler", None)
    if handler is None:
        raise RuntimeError("FetchHandler not initialized. Check lifespan setup.")
    return handler


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI app.

    Initializes all layers and stores in app.state:
    1. Memory store (process-wide cache) - app.state.memory_store
    2. Fetcher (HTTP collaborator) - app.state.fetcher
    3. Handler (HTTP endpoints) - app.state.fetch_handler

    Args:
        app: The FastAPI application instance

    Yields:
        None

    Cleanup:
        Closes the HTTP client and removes all services from app.state
    """
    configure_logging(settings.log_level, settings.log_json)

    memory_store = get_process_store()
    fetcher = HttpFetcher.create()
    fetch_handler = FetchHandler(fetcher=fetcher, memory_store=memory_store)

    app.state.memory_store = memory_store
    app.state.fetcher = fetcher
    app.state.fetch_handler = fetch_handler

    logger.info(
        "service_started",
        max_entries=memory_store.max_entries,
        default_ttl=settings.cache_ttl,
    )

    yield

    await fetcher.close()
    del app.state.fetch_handler
    del app.state.fetcher
    del app.state.memory_store
    logger.info("service_stopped")


# Type aliases for cleaner dependency injection
HandlerDep = Annotated[FetchHandler, Depends(get_handler)]
