"""Credential value objects."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class HttpAuth:
    """Authentication selector and credential fields for one request.

    Attributes:
        method: One of none, basic, bearer, digest, header, query
        credentials: Fields required by the method (user/password, token, name/value)
    """

    method: str = "none"
    credentials: dict[str, Any] = field(default_factory=dict)

    @property
    def is_anonymous(self) -> bool:
        return self.method == "none"


@dataclass(frozen=True)
class PostgresCredentials:
    """Connection settings for the durable cache backend.

    ``ssl`` accepts disable, allow, require, verify-ca, verify-full or a
    boolean. Anything else (including None) means encrypted without
    certificate verification.
    """

    host: str
    port: int
    database: str
    user: str
    password: str
    ssl: str | bool | None = None

    def __repr__(self) -> str:
        return (
            f"PostgresCredentials(host={self.host!r}, port={self.port!r}, "
            f"database={self.database!r}, user={self.user!r}, ssl={self.ssl!r})"
        )
