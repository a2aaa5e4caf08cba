"""PostgreSQL implementation of StorageAdapter.

Each adapter owns a single asyncpg connection that is opened on the first
operation, together with the cache table (``CREATE TABLE IF NOT EXISTS``).
Responses are stored as JSONB and timestamps as TIMESTAMPTZ; the adapter
converts both back so callers always see plain strings and epoch
milliseconds.
"""

import asyncio
import enum
import json
import re
import ssl
from datetime import datetime, timedelta, timezone
from typing import Any

import asyncpg

from smart_fetch.entities import CacheEntry, PostgresCredentials
from smart_fetch.log_config import get_logger

logger = get_logger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_UNSAFE_IDENTIFIER_CHARS = re.compile(r"[^A-Za-z0-9_]")

_NO_TLS_MODES = {"disable"}
_VERIFY_CA_MODES = {"verify-ca"}
_VERIFY_FULL_MODES = {"verify-full"}


def resolve_ssl(mode: str | bool | None) -> ssl.SSLContext | bool:
    """Translate a libpq-style SSL mode into an asyncpg ``ssl`` argument.

    ``disable`` (or False) turns TLS off. ``verify-ca`` and ``verify-full``
    encrypt and verify the server certificate, ``verify-full`` also checks
    the hostname. Every other value, including None, True, ``allow``,
    ``require`` and unknown strings, encrypts WITHOUT verifying the server
    certificate. That default suits cloud-managed and self-signed
    certificates but does not authenticate the server.

    Args:
        mode: SSL mode from the connection credentials

    Returns:
        False, or an SSL context configured for the mode
    """
    if mode is False or (isinstance(mode, str) and mode.lower() in _NO_TLS_MODES):
        return False

    context = ssl.create_default_context()
    normalized = mode.lower() if isinstance(mode, str) else None

    if normalized in _VERIFY_FULL_MODES:
        return context

    context.check_hostname = False
    if normalized in _VERIFY_CA_MODES:
        context.verify_mode = ssl.CERT_REQUIRED
    else:
        context.verify_mode = ssl.CERT_NONE
    return context


def quote_identifier(name: str) -> str:
    """Quote a table name for interpolation into SQL.

    Strips every character outside ``[A-Za-z0-9_]`` and doubles any quote
    left over before wrapping the result in double quotes.
    """
    sanitized = _UNSAFE_IDENTIFIER_CHARS.sub("", name)
    escaped = sanitized.replace('"', '""')
    return f'"{escaped}"'


def to_timestamp(epoch_ms: int) -> datetime:
    """Convert epoch milliseconds to a UTC-aware datetime."""
    return _EPOCH + timedelta(milliseconds=epoch_ms)


def to_epoch_ms(value: datetime) -> int:
    """Convert a datetime back to epoch milliseconds."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return (value - _EPOCH) // timedelta(milliseconds=1)


class InitState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    INITIALIZED = "initialized"


class PostgresCacheAdapter:
    """Durable cache backed by a PostgreSQL table.

    This class satisfies the StorageAdapter protocol through structural
    typing - no explicit inheritance needed.

    The connection and table are created lazily. Concurrent first calls
    share one initialization task, so connect and CREATE TABLE run once;
    if initialization fails the connection is closed and the next call
    retries from scratch.

    Example:
        ```python
        adapter = PostgresCacheAdapter(credentials, "smartfetch_cache")
        try:
            await adapter.set(entry)
            cached = await adapter.get(entry.key)
        finally:
            await adapter.close()
        ```
    """

    def __init__(
        self,
        credentials: PostgresCredentials,
        table_name: str,
        connect_timeout: float = 10.0,
    ) -> None:
        """Initialize the PostgreSQL cache adapter.

        Args:
            credentials: Connection settings, including the SSL mode.
            table_name: Cache table name. Unsafe characters are stripped.
            connect_timeout: Seconds to wait for the connection.
        """
        self._credentials = credentials
        self._table = quote_identifier(table_name)
        self._ssl = resolve_ssl(credentials.ssl)
        self._connect_timeout = connect_timeout
        self._connection: asyncpg.Connection | None = None
        self._state = InitState.UNINITIALIZED
        self._init_task: asyncio.Task | None = None

    @property
    def state(self) -> InitState:
        return self._state

    @property
    def table(self) -> str:
        """The quoted table identifier used in statements."""
        return self._table

    async def _ensure_initialized(self) -> asyncpg.Connection:
        if self._state is InitState.UNINITIALIZED:
            self._state = InitState.INITIALIZING
            self._init_task = asyncio.ensure_future(self._initialize())

        if self._state is InitState.INITIALIZING and self._init_task is not None:
            # A cancelled waiter must not cancel the attempt other callers share
            await asyncio.shield(self._init_task)

        if self._connection is None:
            raise RuntimeError(f"Connection for {self._table} was closed during initialization")
        return self._connection

    async def _initialize(self) -> None:
        connection: asyncpg.Connection | None = None
        try:
            connection = await asyncpg.connect(
                host=self._credentials.host,
                port=self._credentials.port,
                user=self._credentials.user,
                password=self._credentials.password,
                database=self._credentials.database,
                ssl=self._ssl,
                timeout=self._connect_timeout,
            )
            await connection.set_type_codec(
                "jsonb",
                encoder=json.dumps,
                decoder=json.loads,
                schema="pg_catalog",
            )
            await connection.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {self._table} (
                    key VARCHAR(255) PRIMARY KEY,
                    request_url TEXT,
                    response JSONB,
                    cached_at TIMESTAMPTZ,
                    ttl INT
                )
                """
            )
        except BaseException:
            if connection is not None:
                await self._close_quietly(connection)
            self._state = InitState.UNINITIALIZED
            self._init_task = None
            logger.error("postgres_initialization_failed", table=self._table, exc_info=True)
            raise

        self._connection = connection
        self._state = InitState.INITIALIZED
        logger.info("postgres_initialized", table=self._table, host=self._credentials.host)

    async def get(self, key: str) -> CacheEntry | None:
        connection = await self._ensure_initialized()
        row = await connection.fetchrow(
            f"SELECT key, request_url, response, cached_at, ttl FROM {self._table} WHERE key = $1",
            key,
        )
        if row is None:
            return None

        return CacheEntry(
            key=row["key"],
            request_url=row["request_url"],
            response=json.dumps(row["response"], separators=(",", ":")),
            cached_at=to_epoch_ms(row["cached_at"]),
            ttl=row["ttl"],
        )

    async def set(self, entry: CacheEntry) -> None:
        connection = await self._ensure_initialized()
        payload: Any = json.loads(entry.response)
        await connection.execute(
            f"""
            INSERT INTO {self._table} (key, request_url, response, cached_at, ttl)
            VALUES ($1, $2, $3, $4, $5)
            ON CONFLICT (key) DO UPDATE SET
                request_url = EXCLUDED.request_url,
                response = EXCLUDED.response,
                cached_at = EXCLUDED.cached_at,
                ttl = EXCLUDED.ttl
            """,
            entry.key,
            entry.request_url,
            payload,
            to_timestamp(entry.cached_at),
            entry.ttl,
        )

    async def delete(self, key: str) -> None:
        connection = await self._ensure_initialized()
        await connection.execute(f"DELETE FROM {self._table} WHERE key = $1", key)

    async def close(self) -> None:
        """Close the connection. Safe to call repeatedly or before first use."""
        if self._state is InitState.INITIALIZING and self._init_task is not None:
            # Let an in-flight initialization settle so its connection is not leaked
            await asyncio.gather(self._init_task, return_exceptions=True)

        connection = self._connection
        self._connection = None
        self._state = InitState.UNINITIALIZED
        self._init_task = None
        if connection is not None:
            await connection.close()

    @staticmethod
    async def _close_quietly(connection: asyncpg.Connection) -> None:
        try:
            await connection.close()
        except Exception:
            logger.warning("postgres_close_failed", exc_info=True)
