"""Domain enumerations for the entity cache.

Enums represent fixed sets of values (cache status, error state, field type).
"""

from enum import Enum


class CacheStatus(str, Enum):
    """Outcome of a cache lookup for a single key.

    HIT carries the cached record. NEGATIVE means the system of record
    confirmed absence on a prior load. MISS means nothing is cached.
    """

    HIT = "hit"
    MISS = "miss"
    NEGATIVE = "negative"


class ErrorState(str, Enum):
    """Classification of a backend failure.

    Only TRANSIENT failures are safe to retry or to treat as a cache miss.
    UNKNOWN is the state for unrecognized native errors and is never retried.
    """

    UNKNOWN = "unknown"
    TRANSIENT = "transient"
    PERMANENT = "permanent"


class FieldType(str, Enum):
    """Serialization type of an entity field for JSON cache backends."""

    JSON = "json"
    DATETIME = "datetime"
    BYTES = "bytes"
    UUID = "uuid"
    DECIMAL = "decimal"

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid field type values as strings."""
        return [field_type.value for field_type in cls]
