"""PostgresEntityDatabaseAdapter tests with a mocked AsyncSession."""

import uuid
from functools import partial
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from entitycache.application.services.read_through_cache import ReadThroughEntityCache
from entitycache.domain.entities import EntityConfiguration
from entitycache.domain.enums import CacheStatus, FieldType
from entitycache.domain.exceptions import (
    DatabaseAdapterTransientError,
    DatabaseAdapterUniqueConstraintError,
    SqlNotConfiguredError,
)
from entitycache.infrastructure.cache.providers import LocalMemoryCacheAdapterProvider
from entitycache.infrastructure.persistence import database
from entitycache.infrastructure.persistence.database_adapter import (
    PostgresEntityDatabaseAdapter,
)


class UniqueViolation(Exception):
    sqlstate = "23505"


def _session(rows: list[dict]) -> AsyncMock:
    result = MagicMock()
    result.mappings.return_value.all.return_value = rows
    session = AsyncMock()
    session.execute = AsyncMock(return_value=result)
    return session


async def test_groups_rows_by_field_value(entity_configuration) -> None:
    """Columns are translated back to field names and rows grouped per value."""
    session = _session(
        [
            {"id": 1, "email_address": "a@x", "name": "Ada", "created_at": None},
            {"id": 2, "email_address": "b@x", "name": "Bob", "created_at": None},
            {"id": 3, "email_address": "b@x", "name": "Bea", "created_at": None},
        ]
    )
    adapter = PostgresEntityDatabaseAdapter(session, entity_configuration)

    results = await adapter.fetch_many_where("email", ["a@x", "b@x", "c@x"])

    assert results["a@x"] == [{"id": 1, "email": "a@x", "name": "Ada", "created_at": None}]
    assert [row["id"] for row in results["b@x"]] == [2, 3]
    assert "c@x" not in results


async def test_builds_in_query_on_mapped_column(entity_configuration) -> None:
    session = _session([])
    adapter = PostgresEntityDatabaseAdapter(session, entity_configuration)

    await adapter.fetch_many_where("email", ["a@x", "a@x"])

    stmt = session.execute.await_args.args[0]
    sql = str(stmt)
    assert "FROM users" in sql
    assert "users.email_address IN" in sql


async def test_empty_values_skip_query(entity_configuration) -> None:
    session = _session([])
    adapter = PostgresEntityDatabaseAdapter(session, entity_configuration)

    assert await adapter.fetch_many_where("id", []) == {}
    session.execute.assert_not_awaited()


async def test_unmapped_field_rejected(entity_configuration) -> None:
    adapter = PostgresEntityDatabaseAdapter(_session([]), entity_configuration)
    with pytest.raises(ValueError, match="database field mapping missing"):
        await adapter.fetch_many_where("nickname", ["x"])


@pytest.mark.parametrize(
    ("native", "expected"),
    [
        (
            OperationalError("SELECT", {}, Exception("closed"), connection_invalidated=True),
            DatabaseAdapterTransientError,
        ),
        (IntegrityError("SELECT", {}, UniqueViolation()), DatabaseAdapterUniqueConstraintError),
    ],
)
async def test_native_errors_translated(entity_configuration, native, expected) -> None:
    session = AsyncMock()
    session.execute = AsyncMock(side_effect=native)
    adapter = PostgresEntityDatabaseAdapter(session, entity_configuration)

    with pytest.raises(expected) as exc_info:
        await adapter.fetch_many_where("id", [1])
    assert exc_info.value.__cause__ is native


async def test_get_db_without_database_url(monkeypatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "")
    monkeypatch.setattr(database, "AsyncSessionLocal", None)
    monkeypatch.setattr(database, "engine", None)

    with pytest.raises(SqlNotConfiguredError):
        await anext(database.get_db())


async def test_dispose_engine_resets_state(monkeypatch) -> None:
    engine = AsyncMock()
    monkeypatch.setattr(database, "engine", engine)
    monkeypatch.setattr(database, "AsyncSessionLocal", MagicMock())

    await database.dispose_engine()

    engine.dispose.assert_awaited_once()
    assert database.engine is None
    assert database.AsyncSessionLocal is None


DOCUMENTS = EntityConfiguration(
    table_name="documents",
    id_field="id",
    entity_to_db_fields={"id": "id", "title": "title"},
    cacheable_fields=frozenset({"id"}),
    field_types={"id": FieldType.UUID},
)
DOCUMENT_ID = uuid.UUID("3f2b1c9e-8d4a-4e6f-9a1b-2c3d4e5f6a7b")


async def test_rows_grouped_under_requested_value() -> None:
    """A str lookup on a uuid column is keyed by the str the caller passed."""
    session = _session([{"id": DOCUMENT_ID, "title": "Spec"}])
    adapter = PostgresEntityDatabaseAdapter(session, DOCUMENTS)

    results = await adapter.fetch_many_where("id", [str(DOCUMENT_ID)])

    assert results == {str(DOCUMENT_ID): [{"id": DOCUMENT_ID, "title": "Spec"}]}


async def test_read_through_str_uuid_is_not_negatively_cached() -> None:
    session = _session([{"id": DOCUMENT_ID, "title": "Spec"}])
    loader = PostgresEntityDatabaseAdapter(session, DOCUMENTS)
    cache_adapter = LocalMemoryCacheAdapterProvider().get_cache_adapter(DOCUMENTS)
    read_through = ReadThroughEntityCache(DOCUMENTS, cache_adapter)

    results = await read_through.read_many_through(
        "id", [str(DOCUMENT_ID)], partial(loader.fetch_many_where, "id")
    )

    assert results == {str(DOCUMENT_ID): [{"id": DOCUMENT_ID, "title": "Spec"}]}
    cached = await cache_adapter.load_many("id", [str(DOCUMENT_ID)])
    assert cached[str(DOCUMENT_ID)].status is CacheStatus.HIT
