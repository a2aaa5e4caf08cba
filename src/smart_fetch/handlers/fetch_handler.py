"""HTTP handlers for cached fetch operations.

Handlers convert between DTOs (API contracts) and service calls.
They handle HTTP concerns like status codes, validation, and error handling.
"""

import time

from fastapi import HTTPException, status

from smart_fetch.config import settings
from smart_fetch.dto import (
    CacheStatsResponse,
    FetchItemResult,
    FetchRequest,
    FetchResponse,
    HealthCheckResponse,
)
from smart_fetch.entities import FetchItem, HttpAuth, PostgresCredentials
from smart_fetch.errors import CacheConfigurationError
from smart_fetch.log_config import get_logger
from smart_fetch.protocols import Fetcher
from smart_fetch.repositories import MemoryStore
from smart_fetch.services import POSTGRES_STORAGE, BatchOptions, run_batch

logger = get_logger(__name__)


class FetchHandler:
    """HTTP handlers for cached fetch operations.

    This handler delegates business logic to the fetch service
    and handles HTTP-specific concerns like:
    - Converting DTOs to entities and back
    - Setting appropriate status codes
    - Error handling and responses

    Example:
        ```python
        handler = FetchHandler(fetcher=HttpFetcher.create(), memory_store=MemoryStore())

        @app.post("/fetch", response_model=FetchResponse)
        async def fetch(request: FetchRequest):
            return await handler.fetch(request)
        ```
    """

    def __init__(self, fetcher: Fetcher, memory_store: MemoryStore) -> None:
        """Initialize the fetch handler.

        Args:
            fetcher: HTTP collaborator used on cache misses (required).
            memory_store: Process-wide store for memory storage (required).
        """
        self._fetcher = fetcher
        self._memory_store = memory_store

    async def fetch(self, request: FetchRequest) -> FetchResponse:
        """Handle POST /fetch requests.

        Args:
            request: The batch fetch request DTO

        Returns:
            FetchResponse with one result per item

        Raises:
            HTTPException: 400 for an invalid cache configuration, 500 if the
                cache backend fails
        """
        start_time = time.time()
        options = self._to_options(request)
        items = [
            FetchItem(
                url=item.url,
                auth=HttpAuth(method=item.authentication, credentials=item.credentials),
            )
            for item in request.items
        ]

        try:
            results = await run_batch(
                options,
                items,
                fetcher=self._fetcher,
                memory_store=self._memory_store,
            )
        except CacheConfigurationError as e:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=str(e),
            ) from e
        except Exception as e:
            logger.error("batch_failed", storage=options.cache_storage, exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to process batch: {e}",
            ) from e

        lookup_time_ms = (time.time() - start_time) * 1000

        return FetchResponse(
            results=[
                FetchItemResult(
                    item=result.index,
                    data=result.data,
                    cached=result.cached,
                    error=result.error,
                )
                for result in results
            ],
            lookup_time_ms=lookup_time_ms,
        )

    async def get_stats(self) -> CacheStatsResponse:
        """Handle GET /cache/stats requests.

        Returns:
            CacheStatsResponse with memory cache statistics
        """
        return CacheStatsResponse(
            total_entries=len(self._memory_store),
            max_entries=self._memory_store.max_entries,
            default_ttl_seconds=settings.cache_ttl,
        )

    async def health_check(self) -> HealthCheckResponse:
        """Handle GET /health requests.

        Returns:
            HealthCheckResponse with health status
        """
        return HealthCheckResponse(
            status="healthy",
            memory_cache_entries=len(self._memory_store),
        )

    @staticmethod
    def _to_options(request: FetchRequest) -> BatchOptions:
        postgres = None
        if request.cache_storage == POSTGRES_STORAGE:
            if request.postgres is not None:
                postgres = PostgresCredentials(**request.postgres.model_dump())
            else:
                postgres = settings.postgres_credentials()

        return BatchOptions(
            cache_storage=request.cache_storage,
            cache_duration=request.cache_duration,
            custom_ttl=request.custom_ttl,
            table_name=request.cache_table_name if request.cache_storage == POSTGRES_STORAGE else None,
            postgres=postgres,
        )
