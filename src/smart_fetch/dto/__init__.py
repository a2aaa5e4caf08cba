"""Data Transfer Objects for API contracts.

These Pydantic models define the external API contract.
They are used for request/response validation and serialization.

Internal domain logic should use entities from the entities package.
"""

from .requests import FetchItemRequest, FetchRequest, PostgresCredentialsRequest
from .responses import CacheStatsResponse, FetchItemResult, FetchResponse, HealthCheckResponse

__all__ = [
    "FetchItemRequest",
    "FetchRequest",
    "PostgresCredentialsRequest",
    "FetchItemResult",
    "FetchResponse",
    "CacheStatsResponse",
    "HealthCheckResponse",
]
