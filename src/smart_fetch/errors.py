"""Exceptions raised by the smart fetch cache."""


class SmartFetchError(Exception):
    """Base class for all smart fetch errors."""


class CacheConfigurationError(SmartFetchError, ValueError):
    """Batch configuration is invalid (table name, TTL, storage choice).

    Raised before any item is processed; aborts the whole batch.
    """


class FetchError(SmartFetchError):
    """The HTTP collaborator could not produce a payload for a URL."""
