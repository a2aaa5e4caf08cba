import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

from smart_fetch.entities import PostgresCredentials

load_dotenv()


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Cache
    cache_ttl: int = int(os.getenv("SMARTFETCH_CACHE_TTL", "3600"))  # 1 hour default
    cache_max_entries: int = int(os.getenv("SMARTFETCH_CACHE_MAX_ENTRIES", "1000"))
    cache_table_name: str = os.getenv("SMARTFETCH_CACHE_TABLE", "smartfetch_cache")

    # HTTP
    http_timeout: float = float(os.getenv("SMARTFETCH_HTTP_TIMEOUT", "30.0"))

    # PostgreSQL
    postgres_host: str = os.getenv("POSTGRES_HOST", "localhost")
    postgres_port: int = int(os.getenv("POSTGRES_PORT", "5432"))
    postgres_db: str = os.getenv("POSTGRES_DB", "postgres")
    postgres_user: str = os.getenv("POSTGRES_USER", "postgres")
    postgres_password: str = os.getenv("POSTGRES_PASSWORD", "")
    # disable | allow | require | verify-ca | verify-full. Unset or unknown values
    # encrypt without verifying the server certificate.
    postgres_ssl: str | None = os.getenv("POSTGRES_SSL")

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "info")
    log_json: bool = os.getenv("LOG_JSON", "false").lower() == "true"

    # API
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    api_reload: bool = os.getenv("API_RELOAD", "true").lower() == "true"

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.cache_max_entries < 1:
            raise ValueError("SMARTFETCH_CACHE_MAX_ENTRIES must be at least 1")

        if self.http_timeout <= 0:
            raise ValueError("SMARTFETCH_HTTP_TIMEOUT must be positive")

        if not 0 < self.postgres_port < 65536:
            raise ValueError(f"POSTGRES_PORT must be a valid TCP port, got {self.postgres_port}")

    def postgres_credentials(self) -> PostgresCredentials:
        """Build PostgreSQL credentials from the configured environment."""
        return PostgresCredentials(
            host=self.postgres_host,
            port=self.postgres_port,
            database=self.postgres_db,
            user=self.postgres_user,
            password=self.postgres_password,
            ssl=self.postgres_ssl,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
