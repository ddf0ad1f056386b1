"""Domain exceptions for the entity cache.

Defines the typed error taxonomy that native cache and database failures
are translated into. Callers decide from ``state`` whether to propagate
an error or degrade (e.g. treat a cache failure as a miss).
"""

from typing import Any, ClassVar

from entitycache.domain.enums import ErrorState


class EntityError(Exception):
    """Base exception for all entity cache errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, key).
        state: Whether the failure is transient, permanent or unknown.
    """

    state: ClassVar[ErrorState] = ErrorState.UNKNOWN
    default_error_code: ClassVar[str | None] = None

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to the class
                default_error_code, then to the class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.default_error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    @property
    def is_transient(self) -> bool:
        """True when the failure is safe to retry or to treat as absence."""
        return self.state is ErrorState.TRANSIENT


class EntityCacheAdapterError(EntityError):
    """Base for failures raised by a cache backend."""


class CacheAdapterTransientError(EntityCacheAdapterError):
    """Raised for any cache backend failure (timeout, connection loss, protocol error).

    Always safe to handle as "nothing cached"; a cache outage must never fail a read.
    """

    state = ErrorState.TRANSIENT
    default_error_code = "ERR_ENTITY_CACHE_ADAPTER_TRANSIENT"


class UnmappedCacheKeyError(EntityCacheAdapterError):
    """Raised when a cacher returns a key that was not requested.

    Indicates a broken cacher implementation, not a runtime condition.
    """

    state = ErrorState.PERMANENT
    default_error_code = "ERR_ENTITY_CACHE_UNMAPPED_KEY"

    def __init__(self, cache_key: str) -> None:
        """Initialize with the unexpected key.

        Args:
            cache_key: Key returned by the cacher that maps to no requested field value.
        """
        super().__init__(
            f"Unspecified cache key {cache_key} returned from generic cacher",
            details={"cache_key": cache_key},
        )


class EntityDatabaseAdapterError(EntityError):
    """Base for failures raised by the system of record."""


class DatabaseAdapterTransientError(EntityDatabaseAdapterError):
    """Raised for connection and timeout failures; eligible for retry upstream."""

    state = ErrorState.TRANSIENT
    default_error_code = "ERR_ENTITY_DATABASE_ADAPTER_TRANSIENT"


class DatabaseAdapterUnknownError(EntityDatabaseAdapterError):
    """Raised for unrecognized database failures; never retried."""

    state = ErrorState.UNKNOWN
    default_error_code = "ERR_ENTITY_DATABASE_ADAPTER_UNKNOWN"


class DatabaseAdapterNotNullConstraintError(EntityDatabaseAdapterError):
    """Raised when a write violates a NOT NULL constraint."""

    state = ErrorState.PERMANENT
    default_error_code = "ERR_ENTITY_DATABASE_ADAPTER_NOT_NULL_CONSTRAINT"


class DatabaseAdapterForeignKeyConstraintError(EntityDatabaseAdapterError):
    """Raised when a write violates a foreign key constraint."""

    state = ErrorState.PERMANENT
    default_error_code = "ERR_ENTITY_DATABASE_ADAPTER_FOREIGN_KEY_CONSTRAINT"


class DatabaseAdapterUniqueConstraintError(EntityDatabaseAdapterError):
    """Raised when a write violates a unique constraint."""

    state = ErrorState.PERMANENT
    default_error_code = "ERR_ENTITY_DATABASE_ADAPTER_UNIQUE_CONSTRAINT"


class DatabaseAdapterCheckConstraintError(EntityDatabaseAdapterError):
    """Raised when a write violates a CHECK constraint."""

    state = ErrorState.PERMANENT
    default_error_code = "ERR_ENTITY_DATABASE_ADAPTER_CHECK_CONSTRAINT"


class DatabaseAdapterExclusionConstraintError(EntityDatabaseAdapterError):
    """Raised when a write violates an exclusion constraint."""

    state = ErrorState.PERMANENT
    default_error_code = "ERR_ENTITY_DATABASE_ADAPTER_EXCLUSION_CONSTRAINT"


class SqlNotConfiguredError(EntityError):
    """Raised when a database session is requested but DATABASE_URL is not set."""

    state = ErrorState.PERMANENT
    default_error_code = "SERVICE_UNAVAILABLE"

    def __init__(self) -> None:
        super().__init__("This operation requires a SQL database that is not configured.")
