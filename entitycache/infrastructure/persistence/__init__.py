"""Persistence: async SQLAlchemy engine, system-of-record loader, and error translation."""

from entitycache.infrastructure.persistence.database_adapter import (
    EntityDatabaseLoader,
    PostgresEntityDatabaseAdapter,
)
from entitycache.infrastructure.persistence.errors import (
    translate_database_error,
    wrap_native_postgres_call,
)

__all__ = [
    "EntityDatabaseLoader",
    "PostgresEntityDatabaseAdapter",
    "translate_database_error",
    "wrap_native_postgres_call",
]
