"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Cache TTLs and the invalidation-sensitive key prefix
are validated at load time.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from entitycache.core.constants import (
    CACHE_KEY_SEP,
    DEFAULT_CACHE_KEY_PREFIX,
    DEFAULT_LOCAL_MEMORY_MAX_SIZE,
    DEFAULT_LOCAL_MEMORY_TTL_SECONDS,
    DEFAULT_TTL_SECONDS_NEGATIVE,
    DEFAULT_TTL_SECONDS_POSITIVE,
)


class Settings(BaseSettings):
    """Settings loaded from environment and .env.

    Everything has a default; validate_cache_settings rejects TTLs and key
    prefixes that would break cache semantics.
    """

    # App
    app_name: str = "entitycache"
    app_version: str = "1.0.0"
    debug: bool = False

    # System of record (SQLAlchemy async URL, e.g. postgresql+asyncpg://...)
    database_url: str = ""
    database_echo: bool = False
    db_pool_size: int | None = None
    db_max_overflow: int | None = None
    db_command_timeout: int | None = None

    # Redis cache
    redis_enabled: bool = True
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: SecretStr | None = None
    redis_max_connections: int = 10
    redis_socket_timeout: float = 5.0

    # Entity cache keys and expiry
    cache_key_prefix: str = DEFAULT_CACHE_KEY_PREFIX
    cache_ttl_positive: int = DEFAULT_TTL_SECONDS_POSITIVE
    cache_ttl_negative: int = DEFAULT_TTL_SECONDS_NEGATIVE

    # In-process cache
    local_memory_cache_max_size: int = DEFAULT_LOCAL_MEMORY_MAX_SIZE
    local_memory_cache_ttl: int = DEFAULT_LOCAL_MEMORY_TTL_SECONDS

    # OpenTelemetry
    telemetry_enabled: bool = False
    telemetry_exporter: str = "console"
    telemetry_otlp_endpoint: str | None = None
    telemetry_sample_rate: float = 1.0
    telemetry_environment: str = "development"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_cache_settings(self) -> "Settings":
        """Validate TTLs, local memory size and key prefix.

        - TTLs must be positive (Redis rejects EX 0).
        - The local memory cache must hold at least one entry.
        - The key prefix must not contain the key separator.
        """
        if self.cache_ttl_positive <= 0 or self.cache_ttl_negative <= 0:
            raise ValueError(
                "CACHE_TTL_POSITIVE and CACHE_TTL_NEGATIVE must be positive integers."
            )
        if self.local_memory_cache_ttl <= 0:
            raise ValueError("LOCAL_MEMORY_CACHE_TTL must be a positive integer.")
        if self.local_memory_cache_max_size <= 0:
            raise ValueError("LOCAL_MEMORY_CACHE_MAX_SIZE must be a positive integer.")
        if CACHE_KEY_SEP in self.cache_key_prefix:
            raise ValueError(
                f"CACHE_KEY_PREFIX must not contain separator {CACHE_KEY_SEP!r}"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance (one per process)."""
    return Settings()
