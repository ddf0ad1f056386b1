"""Pytest configuration and fixtures for entitycache.

Redis-backed tests run against FakeRedis, an in-memory stand-in for the
subset of redis.asyncio the cachers use. DB-dependent fixtures use
entitycache.infrastructure.persistence.database and skip without Postgres.
"""

from typing import Any

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from sqlalchemy.ext.asyncio import AsyncSession

from entitycache.core.config import get_settings
from entitycache.domain.entities import EntityConfiguration
from entitycache.domain.enums import FieldType
from entitycache.infrastructure.persistence import database


class FakePipeline:
    """Buffers SETs until execute(), like a non-transactional redis pipeline."""

    def __init__(self, redis_client: "FakeRedis") -> None:
        self.redis_client = redis_client
        self.commands: list[tuple[str, str, int | None]] = []

    async def __aenter__(self) -> "FakePipeline":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.commands = []

    def set(self, key: str, value: str, ex: int | None = None) -> "FakePipeline":
        self.commands.append((key, value, ex))
        return self

    async def execute(self) -> list[bool]:
        self.redis_client.check_failure()
        for key, value, ex in self.commands:
            self.redis_client.store[key] = value
            self.redis_client.expiries[key] = ex
        self.redis_client.calls.append(("pipeline", len(self.commands)))
        return [True] * len(self.commands)


class FakeRedis:
    """In-memory redis.asyncio client (decode_responses=True) for MGET/SET/DEL.

    Set fail_with to an exception to make every command raise it.
    """

    def __init__(self) -> None:
        self.store: dict[str, str] = {}
        self.expiries: dict[str, int | None] = {}
        self.calls: list[tuple[str, Any]] = []
        self.fail_with: BaseException | None = None

    def check_failure(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    async def mget(self, keys: list[str]) -> list[str | None]:
        self.check_failure()
        self.calls.append(("mget", list(keys)))
        return [self.store.get(key) for key in keys]

    def pipeline(self, transaction: bool = True) -> FakePipeline:
        assert transaction is False
        return FakePipeline(self)

    async def delete(self, *keys: str) -> int:
        self.check_failure()
        self.calls.append(("delete", list(keys)))
        deleted = 0
        for key in keys:
            if self.store.pop(key, None) is not None:
                deleted += 1
            self.expiries.pop(key, None)
        return deleted


@pytest.fixture
def fake_redis() -> FakeRedis:
    """Empty FakeRedis client."""
    return FakeRedis()


@pytest.fixture
def make_fake_redis() -> type[FakeRedis]:
    """FakeRedis class, for tests that need several clients (e.g. one per shard)."""
    return FakeRedis


@pytest.fixture
def failing_redis() -> FakeRedis:
    """FakeRedis whose every command raises a redis ConnectionError."""
    client = FakeRedis()
    client.fail_with = RedisConnectionError("Connection refused")
    return client


@pytest.fixture
def entity_configuration() -> EntityConfiguration:
    """Users entity with cacheable id/email and a datetime field."""
    return EntityConfiguration(
        table_name="users",
        id_field="id",
        entity_to_db_fields={
            "id": "id",
            "email": "email_address",
            "name": "name",
            "created_at": "created_at",
        },
        cacheable_fields=frozenset({"id", "email"}),
        cache_key_version=1,
        field_types={"created_at": FieldType.DATETIME},
    )


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    """Settings are lru_cached; tests that patch env must not leak into each other."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
async def db_session() -> AsyncSession:
    """Database session for integration tests. Rolls back after test.

    Requires DATABASE_URL (postgresql+asyncpg://...). Skips (pytest.skip)
    when Postgres is not configured. Use @pytest.mark.requires_db to mark
    tests that need this fixture; run without DB via: pytest -m 'not requires_db'.
    """
    database._ensure_engine()
    if database.AsyncSessionLocal is None:
        pytest.skip("Postgres not configured: set DATABASE_URL")
    async with database.AsyncSessionLocal() as session:
        yield session
        await session.rollback()
