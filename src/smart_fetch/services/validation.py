"""Intake validation for batch configuration.

These checks run once per batch, before any adapter is built. A failure is
a configuration error and aborts the batch.
"""

import re

from smart_fetch.errors import CacheConfigurationError

# PostgreSQL truncates identifiers longer than 63 bytes
MAX_TABLE_NAME_LENGTH = 63
TABLE_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]{0,62}$")

MAX_CUSTOM_TTL = 31_536_000  # 1 year
TTL_PRESETS = {
    300: "5 minutes",
    3600: "1 hour",
    86400: "1 day",
    604800: "1 week",
    2592000: "1 month",
}
CUSTOM_DURATION = "custom"


def validate_table_name(name: str) -> str:
    """Reject table names that are not plain PostgreSQL identifiers.

    Args:
        name: Requested cache table name

    Returns:
        The unchanged name

    Raises:
        CacheConfigurationError: If the name is empty, too long or contains
            anything but letters, digits and underscores
    """
    if not TABLE_NAME_PATTERN.fullmatch(name):
        raise CacheConfigurationError(
            "Table name must start with a letter or underscore and contain only "
            f"letters, numbers, and underscores (max {MAX_TABLE_NAME_LENGTH} characters), "
            f"got {name!r}"
        )
    return name


def resolve_ttl(cache_duration: int | str, custom_ttl: int | None = None) -> int:
    """Turn a duration selection into a TTL in seconds.

    Args:
        cache_duration: One of the preset TTLs, or "custom"
        custom_ttl: Seconds to use when ``cache_duration`` is "custom"

    Returns:
        TTL in seconds

    Raises:
        CacheConfigurationError: For unknown presets or a custom TTL outside
            (0, 31536000]
    """
    if cache_duration == CUSTOM_DURATION:
        if (
            custom_ttl is None
            or isinstance(custom_ttl, bool)
            or not 0 < custom_ttl <= MAX_CUSTOM_TTL
        ):
            raise CacheConfigurationError(
                f"Custom TTL must be between 1 and {MAX_CUSTOM_TTL} seconds, got {custom_ttl}"
            )
        return int(custom_ttl)

    if cache_duration not in TTL_PRESETS:
        allowed = ", ".join(str(ttl) for ttl in TTL_PRESETS)
        raise CacheConfigurationError(
            f"Cache duration must be one of [{allowed}] or '{CUSTOM_DURATION}', got {cache_duration!r}"
        )
    return int(cache_duration)
