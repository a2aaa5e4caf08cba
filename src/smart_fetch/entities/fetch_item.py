"""Batch item and result entities."""

from dataclasses import dataclass, field
from typing import Any

from .credentials import HttpAuth


@dataclass(frozen=True)
class FetchItem:
    """A single URL to resolve within a batch."""

    url: str
    auth: HttpAuth = field(default_factory=HttpAuth)


@dataclass(frozen=True)
class FetchResult:
    """Outcome of processing one batch item.

    Attributes:
        index: Position of the originating item in the batch
        data: The JSON payload, or an error object when ``error`` is set
        cached: True if served from the cache without a fetch
        error: True if the fetch failed for this item
    """

    index: int
    data: Any
    cached: bool = False
    error: bool = False

    @classmethod
    def failure(cls, index: int, message: str) -> "FetchResult":
        return cls(index=index, data={"error": True, "message": message}, error=True)
