"""Request DTOs for API endpoints."""

from typing import Any, Literal

from pydantic import BaseModel, Field

from smart_fetch.config import settings

AuthenticationMethod = Literal["none", "basic", "bearer", "digest", "header", "query"]


class FetchItemRequest(BaseModel):
    """A single URL to fetch through the cache."""

    url: str = Field(..., description="The URL to fetch", min_length=1)
    authentication: AuthenticationMethod = Field(
        "none",
        description="Authentication strategy for the request",
    )
    credentials: dict[str, Any] = Field(
        default_factory=dict,
        description="Credential fields: user/password, token, or name/value",
    )


class PostgresCredentialsRequest(BaseModel):
    """PostgreSQL connection settings supplied with a request."""

    host: str = Field(..., min_length=1)
    port: int = Field(5432, ge=1, le=65535)
    database: str = Field(..., min_length=1)
    user: str = Field(..., min_length=1)
    password: str = Field("", description="Database password")
    ssl: str | bool | None = Field(
        None,
        description=(
            "disable, allow, require, verify-ca or verify-full. Unset or unknown "
            "values encrypt without verifying the server certificate."
        ),
    )


class FetchRequest(BaseModel):
    """Request DTO for a batch of cached fetches.

    The handler will convert this to a call to the service layer. Cache
    configuration applies to every item of the batch and is validated once
    before any item is processed.
    """

    items: list[FetchItemRequest] = Field(..., min_length=1, description="URLs to fetch")
    cache_storage: Literal["memory", "postgres"] = Field(
        "memory",
        description="Where to store cached responses",
    )
    cache_duration: int | Literal["custom"] = Field(
        settings.cache_ttl,
        description="Preset TTL in seconds (300, 3600, 86400, 604800, 2592000) or 'custom'",
    )
    custom_ttl: int | None = Field(
        None,
        description="TTL in seconds when cache_duration is 'custom' (1 to 31536000)",
    )
    cache_table_name: str = Field(
        settings.cache_table_name,
        description="PostgreSQL table for the cache (created if it does not exist)",
    )
    postgres: PostgresCredentialsRequest | None = Field(
        None,
        description="PostgreSQL connection; defaults to the server configuration",
    )
