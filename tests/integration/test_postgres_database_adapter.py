"""PostgresEntityDatabaseAdapter and read-through integration tests. Require Postgres."""

from functools import partial

import pytest
from sqlalchemy import text

from entitycache.application.services.read_through_cache import ReadThroughEntityCache
from entitycache.domain.entities import EntityConfiguration
from entitycache.domain.exceptions import DatabaseAdapterUnknownError
from entitycache.infrastructure.cache.providers import LocalMemoryCacheAdapterProvider
from entitycache.infrastructure.persistence.database_adapter import (
    PostgresEntityDatabaseAdapter,
)

ACCOUNTS = EntityConfiguration(
    table_name="entitycache_test_accounts",
    id_field="id",
    entity_to_db_fields={"id": "id", "handle": "handle_name"},
    cacheable_fields=frozenset({"id", "handle"}),
)


@pytest.fixture
async def accounts_table(db_session):
    """Temporary table, dropped with the session's rollback."""
    await db_session.execute(
        text(
            "CREATE TEMP TABLE entitycache_test_accounts "
            "(id integer PRIMARY KEY, handle_name text NOT NULL)"
        )
    )
    await db_session.execute(
        text(
            "INSERT INTO entitycache_test_accounts (id, handle_name) "
            "VALUES (1, 'ada'), (2, 'bob'), (3, 'bob')"
        )
    )
    return db_session


@pytest.mark.requires_db
async def test_fetch_many_where(accounts_table) -> None:
    adapter = PostgresEntityDatabaseAdapter(accounts_table, ACCOUNTS)

    results = await adapter.fetch_many_where("handle", ["ada", "bob", "cy"])

    assert results["ada"] == [{"id": 1, "handle": "ada"}]
    assert sorted(row["id"] for row in results["bob"]) == [2, 3]
    assert "cy" not in results


@pytest.mark.requires_db
async def test_read_through_against_postgres(accounts_table) -> None:
    loader = PostgresEntityDatabaseAdapter(accounts_table, ACCOUNTS)
    cache = ReadThroughEntityCache(
        ACCOUNTS, LocalMemoryCacheAdapterProvider().get_cache_adapter(ACCOUNTS)
    )

    results = await cache.read_many_through(
        "handle", ["ada", "bob", "cy"], partial(loader.fetch_many_where, "handle")
    )

    assert results == {"ada": [{"id": 1, "handle": "ada"}]}


@pytest.mark.requires_db
async def test_missing_table_is_unknown_error(db_session) -> None:
    missing = EntityConfiguration(
        table_name="entitycache_no_such_table",
        id_field="id",
        entity_to_db_fields={"id": "id"},
    )
    adapter = PostgresEntityDatabaseAdapter(db_session, missing)

    with pytest.raises(DatabaseAdapterUnknownError):
        await adapter.fetch_many_where("id", [1])
