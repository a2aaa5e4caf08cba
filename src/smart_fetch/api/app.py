from typing import Any

from fastapi import FastAPI

from smart_fetch.api.dependencies import HandlerDep, lifespan
from smart_fetch.config import settings
from smart_fetch.dto import CacheStatsResponse, FetchRequest, FetchResponse, HealthCheckResponse

app = FastAPI(
    title="Smart Fetch API",
    description="HTTP GET with built-in response caching (memory or PostgreSQL)",
    version="0.1.0",
    lifespan=lifespan,
)


@app.get("/")
async def root() -> dict[str, Any]:
    """Root endpoint with API information."""
    return {
        "name": "Smart Fetch API",
        "version": "0.1.0",
        "description": "HTTP GET with built-in response caching",
        "endpoints": {
            "fetch": "/fetch",
            "stats": "/cache/stats",
            "health": "/health",
            "docs": "/docs",
        },
    }


@app.get("/health", response_model=HealthCheckResponse)
async def health(handler: HandlerDep) -> HealthCheckResponse:
    """Health check endpoint."""
    return await handler.health_check()


@app.post("/fetch", response_model=FetchResponse)
async def fetch(request: FetchRequest, handler: HandlerDep) -> FetchResponse:
    """
    Fetch a batch of URLs through the cache.

    Args:
        request: Items plus the cache configuration shared by the batch.

    Returns:
        One result per item; failed fetches appear as error results.
    """
    return await handler.fetch(request)


@app.get("/cache/stats", response_model=CacheStatsResponse)
async def get_stats(handler: HandlerDep) -> CacheStatsResponse:
    """Get memory cache statistics."""
    return await handler.get_stats()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "smart_fetch.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
