"""HTTP fetch protocol.

Defines the collaborator that performs the actual GET request when the
cache cannot answer.
"""

from typing import Any, Protocol, runtime_checkable

from smart_fetch.entities import HttpAuth


@runtime_checkable
class Fetcher(Protocol):
    """Protocol for HTTP GET collaborators."""

    async def fetch(self, url: str, auth: HttpAuth | None = None) -> Any:
        """Fetch a URL and decode its JSON body.

        Args:
            url: The URL to GET
            auth: Optional authentication to decorate the request with

        Returns:
            Any JSON-serializable payload

        Raises:
            Exception: Any failure; callers record it per item
        """
        ...
