"""Tests for the entity error taxonomy (state, error_code, message, details)."""

import pytest

from entitycache.domain.enums import ErrorState
from entitycache.domain.exceptions import (
    CacheAdapterTransientError,
    DatabaseAdapterCheckConstraintError,
    DatabaseAdapterExclusionConstraintError,
    DatabaseAdapterForeignKeyConstraintError,
    DatabaseAdapterNotNullConstraintError,
    DatabaseAdapterTransientError,
    DatabaseAdapterUniqueConstraintError,
    DatabaseAdapterUnknownError,
    EntityCacheAdapterError,
    EntityDatabaseAdapterError,
    EntityError,
    SqlNotConfiguredError,
    UnmappedCacheKeyError,
)


def test_entity_error_default_error_code() -> None:
    """Base EntityError uses class name as error_code when not provided."""
    exc = EntityError("Something failed")
    assert exc.message == "Something failed"
    assert exc.error_code == "EntityError"
    assert exc.details == {}
    assert exc.state is ErrorState.UNKNOWN
    assert not exc.is_transient


def test_entity_error_custom_error_code_and_details() -> None:
    exc = EntityError("Oops", error_code="CUSTOM", details={"key": "value"})
    assert exc.error_code == "CUSTOM"
    assert exc.details == {"key": "value"}
    assert str(exc) == "Oops"


def test_cache_adapter_transient_error() -> None:
    """Cache failures are transient and carry the cache error code."""
    exc = CacheAdapterTransientError("timeout")
    assert isinstance(exc, EntityCacheAdapterError)
    assert exc.state is ErrorState.TRANSIENT
    assert exc.is_transient
    assert exc.error_code == "ERR_ENTITY_CACHE_ADAPTER_TRANSIENT"


def test_unmapped_cache_key_error() -> None:
    exc = UnmappedCacheKeyError("ent-:users:v2.0:id:9")
    assert isinstance(exc, EntityCacheAdapterError)
    assert exc.state is ErrorState.PERMANENT
    assert exc.details == {"cache_key": "ent-:users:v2.0:id:9"}
    assert "ent-:users:v2.0:id:9" in exc.message


def test_database_transient_error() -> None:
    exc = DatabaseAdapterTransientError("connection reset")
    assert isinstance(exc, EntityDatabaseAdapterError)
    assert exc.is_transient
    assert exc.error_code == "ERR_ENTITY_DATABASE_ADAPTER_TRANSIENT"


def test_database_unknown_error_not_retry_eligible() -> None:
    exc = DatabaseAdapterUnknownError("syntax error")
    assert exc.state is ErrorState.UNKNOWN
    assert not exc.is_transient
    assert exc.error_code == "ERR_ENTITY_DATABASE_ADAPTER_UNKNOWN"


@pytest.mark.parametrize(
    ("error_class", "error_code"),
    [
        (DatabaseAdapterNotNullConstraintError, "ERR_ENTITY_DATABASE_ADAPTER_NOT_NULL_CONSTRAINT"),
        (DatabaseAdapterForeignKeyConstraintError, "ERR_ENTITY_DATABASE_ADAPTER_FOREIGN_KEY_CONSTRAINT"),
        (DatabaseAdapterUniqueConstraintError, "ERR_ENTITY_DATABASE_ADAPTER_UNIQUE_CONSTRAINT"),
        (DatabaseAdapterCheckConstraintError, "ERR_ENTITY_DATABASE_ADAPTER_CHECK_CONSTRAINT"),
        (DatabaseAdapterExclusionConstraintError, "ERR_ENTITY_DATABASE_ADAPTER_EXCLUSION_CONSTRAINT"),
    ],
)
def test_constraint_errors_are_permanent(error_class, error_code) -> None:
    exc = error_class("violation")
    assert isinstance(exc, EntityDatabaseAdapterError)
    assert exc.state is ErrorState.PERMANENT
    assert not exc.is_transient
    assert exc.error_code == error_code


def test_sql_not_configured_error() -> None:
    exc = SqlNotConfiguredError()
    assert exc.error_code == "SERVICE_UNAVAILABLE"
    assert "not configured" in exc.message
