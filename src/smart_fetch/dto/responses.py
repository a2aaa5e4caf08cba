"""Response DTOs for API endpoints."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class FetchItemResult(BaseModel):
    """Result for a single item of a batch."""

    model_config = ConfigDict(populate_by_name=True)

    item: int = Field(..., description="Index of the originating request item", ge=0)
    data: Any = Field(
        None,
        alias="json",
        description="The JSON payload, or {error, message} when the fetch failed",
    )
    cached: bool = Field(..., description="Whether the payload was served from the cache")
    error: bool = Field(False, description="Whether the fetch failed for this item")


class FetchResponse(BaseModel):
    """Response DTO for a batch fetch."""

    results: list[FetchItemResult] = Field(
        default_factory=list,
        description="One result per request item, in order",
    )
    lookup_time_ms: float = Field(..., description="Time taken for the whole batch in milliseconds")


class CacheStatsResponse(BaseModel):
    """Response DTO for memory cache statistics."""

    total_entries: int = Field(..., description="Entries currently held in memory", ge=0)
    max_entries: int = Field(..., description="Capacity before FIFO eviction", ge=1)
    default_ttl_seconds: int = Field(..., description="Default cache duration", ge=0)


class HealthCheckResponse(BaseModel):
    """Response DTO for health check."""

    status: str = Field(..., description="Health status: 'healthy' or 'unhealthy'")
    memory_cache_entries: int = Field(..., description="Entries held by the memory cache", ge=0)
