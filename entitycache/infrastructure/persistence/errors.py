"""Translation of native database failures into the entity error taxonomy.

Constraint violations are classified by Postgres SQLSTATE; connection and
timeout failures are transient; everything else is unknown. The SQLSTATE
is looked up on the SQLAlchemy error, its DBAPI error (orig) and the
driver error chained beneath it, so asyncpg, psycopg and psycopg2 all
classify the same way.
"""

import logging
from collections.abc import Awaitable, Callable

from sqlalchemy.exc import DBAPIError, DisconnectionError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from entitycache.domain.exceptions import (
    DatabaseAdapterCheckConstraintError,
    DatabaseAdapterExclusionConstraintError,
    DatabaseAdapterForeignKeyConstraintError,
    DatabaseAdapterNotNullConstraintError,
    DatabaseAdapterTransientError,
    DatabaseAdapterUniqueConstraintError,
    DatabaseAdapterUnknownError,
    EntityDatabaseAdapterError,
)

logger = logging.getLogger(__name__)

# Postgres SQLSTATE codes (class 23: integrity constraint violation)
NOT_NULL_VIOLATION = "23502"
FOREIGN_KEY_VIOLATION = "23503"
UNIQUE_VIOLATION = "23505"
CHECK_VIOLATION = "23514"
EXCLUSION_VIOLATION = "23P01"

# Class 08 is connection exception; 57014 is query_canceled (statement_timeout)
CONNECTION_EXCEPTION_CLASS = "08"
QUERY_CANCELED = "57014"

_CONSTRAINT_ERRORS: dict[str, type[EntityDatabaseAdapterError]] = {
    NOT_NULL_VIOLATION: DatabaseAdapterNotNullConstraintError,
    FOREIGN_KEY_VIOLATION: DatabaseAdapterForeignKeyConstraintError,
    UNIQUE_VIOLATION: DatabaseAdapterUniqueConstraintError,
    CHECK_VIOLATION: DatabaseAdapterCheckConstraintError,
    EXCLUSION_VIOLATION: DatabaseAdapterExclusionConstraintError,
}

NATIVE_DATABASE_ERRORS: tuple[type[BaseException], ...] = (SQLAlchemyError, OSError)


def get_sqlstate(error: BaseException) -> str | None:
    """Return the SQLSTATE carried by error or the driver errors it wraps."""
    candidates = [error, getattr(error, "orig", None), error.__cause__]
    orig = getattr(error, "orig", None)
    if orig is not None:
        candidates.append(orig.__cause__)
    for candidate in candidates:
        if candidate is None:
            continue
        for attr in ("sqlstate", "pgcode"):
            code = getattr(candidate, attr, None)
            if isinstance(code, str) and code:
                return code
    return None


def _is_transient(error: BaseException, sqlstate: str | None) -> bool:
    if isinstance(error, (TimeoutError, PoolTimeoutError, DisconnectionError)):
        return True
    if isinstance(error, DBAPIError) and error.connection_invalidated:
        return True
    if isinstance(error, ConnectionError):
        return True
    if sqlstate is None:
        return False
    return sqlstate.startswith(CONNECTION_EXCEPTION_CLASS) or sqlstate == QUERY_CANCELED


def translate_database_error(error: BaseException) -> EntityDatabaseAdapterError:
    """Classify a native database failure.

    Args:
        error: Exception raised by SQLAlchemy or the driver.

    Returns:
        Typed error carrying the native message and SQLSTATE (if any) in details.
    """
    sqlstate = get_sqlstate(error)
    message = str(error) or error.__class__.__name__
    details = {"native_error": error.__class__.__name__, "sqlstate": sqlstate}
    if _is_transient(error, sqlstate):
        return DatabaseAdapterTransientError(message, details=details)
    error_class = _CONSTRAINT_ERRORS.get(sqlstate or "", DatabaseAdapterUnknownError)
    return error_class(message, details=details)


async def wrap_native_postgres_call[T](fn: Callable[[], Awaitable[T]]) -> T:
    """Await fn() and translate database failures.

    Args:
        fn: Zero-argument callable returning the native awaitable.

    Returns:
        Result of the native call.

    Raises:
        EntityDatabaseAdapterError: Subclass chosen by translate_database_error,
            chained to the native error.
    """
    try:
        return await fn()
    except NATIVE_DATABASE_ERRORS as e:
        translated = translate_database_error(e)
        logger.debug(
            "Database call failed (%s, sqlstate=%s): %s",
            translated.error_code,
            translated.details.get("sqlstate"),
            e,
        )
        raise translated from e
