"""httpx-based implementation of the Fetcher protocol.

Performs JSON GET requests and decorates them with one of the supported
authentication strategies:

- none: plain request
- basic: HTTP Basic (user, password)
- bearer: ``Authorization: Bearer <token>`` (token)
- digest: HTTP Digest challenge-response (user, password)
- header: arbitrary header (name, value)
- query: query-string parameter (name, value)
"""

from typing import Any

import httpx

from smart_fetch.config import settings
from smart_fetch.entities import HttpAuth
from smart_fetch.errors import FetchError
from smart_fetch.log_config import get_logger

logger = get_logger(__name__)


class HttpFetcher:
    """httpx implementation of the Fetcher protocol.

    This class satisfies the Fetcher protocol through structural
    typing - no explicit inheritance needed.

    Example:
        ```python
        fetcher = HttpFetcher.create()
        payload = await fetcher.fetch(
            "https://api.example.com/data",
            HttpAuth(method="bearer", credentials={"token": "..."}),
        )
        await fetcher.close()
        ```
    """

    SUPPORTED_METHODS = ("none", "basic", "bearer", "digest", "header", "query")

    def __init__(
        self,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the fetcher.

        Args:
            timeout: Request timeout in seconds. Defaults to settings.http_timeout.
            transport: Optional httpx transport (used by tests).
        """
        self._timeout = timeout or settings.http_timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def create(cls, timeout: float | None = None) -> "HttpFetcher":
        """Factory method to create HttpFetcher with defaults.

        Args:
            timeout: Request timeout. If None, uses settings.

        Returns:
            Configured HttpFetcher
        """
        return cls(timeout=timeout)

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client.

        Returns:
            The httpx.AsyncClient instance
        """
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport,
                follow_redirects=True,
                headers={"Accept": "application/json"},
            )
        return self._client

    async def fetch(self, url: str, auth: HttpAuth | None = None) -> Any:
        """GET a URL and decode its JSON body.

        Args:
            url: The URL to fetch
            auth: Optional authentication strategy and credentials

        Returns:
            The decoded JSON payload

        Raises:
            FetchError: If the auth configuration is unusable, the request
                fails, or the body is not JSON
        """
        auth = auth or HttpAuth()
        target, request_kwargs = self._build_request(url, auth)

        try:
            response = await self.client.get(target, **request_kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise FetchError(
                f"Request to {url} failed with status {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise FetchError(f"Request to {url} failed: {e}") from e

        try:
            return response.json()
        except ValueError as e:
            raise FetchError(f"Response from {url} is not valid JSON") from e

    def _build_request(self, url: str, auth: HttpAuth) -> tuple[str, dict[str, Any]]:
        method = auth.method
        if method not in self.SUPPORTED_METHODS:
            raise FetchError(f"Unsupported authentication method: {method}")

        if method == "none":
            return url, {}
        if method == "basic":
            return url, {"auth": httpx.BasicAuth(*self._require(auth, "user", "password"))}
        if method == "digest":
            # Digest never sends credentials before the server's challenge
            return url, {"auth": httpx.DigestAuth(*self._require(auth, "user", "password"))}
        if method == "bearer":
            (token,) = self._require(auth, "token")
            return url, {"headers": {"Authorization": f"Bearer {token}"}}
        if method == "header":
            name, value = self._require(auth, "name", "value")
            return url, {"headers": {name: value}}

        name, value = self._require(auth, "name", "value")
        # Appended to any query string the URL already carries
        return str(httpx.URL(url).copy_add_param(name, value)), {}

    @staticmethod
    def _require(auth: HttpAuth, *fields: str) -> list[str]:
        missing = [name for name in fields if auth.credentials.get(name) in (None, "")]
        if missing:
            raise FetchError(
                f"Missing credential field(s) for {auth.method} authentication: {', '.join(missing)}"
            )
        return [str(auth.credentials[name]) for name in fields]

    async def close(self) -> None:
        """Close the async HTTP client.

        Should be called when shutting down the application.
        """
        if self._client is not None:
            await self._client.aclose()
            self._client = None
