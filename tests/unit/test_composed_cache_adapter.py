"""ComposedEntityCacheAdapter and cache adapter provider tests."""

from unittest.mock import AsyncMock, MagicMock

from entitycache.core.config import Settings
from entitycache.domain.enums import CacheStatus
from entitycache.domain.value_objects import CacheLoadResult
from entitycache.infrastructure.cache.cache_adapter import GenericEntityCacheAdapter
from entitycache.infrastructure.cache.composed_cache_adapter import (
    ComposedEntityCacheAdapter,
)
from entitycache.infrastructure.cache.local_memory_cacher import (
    GenericLocalMemoryCacher,
    NoOpCacher,
)
from entitycache.infrastructure.cache.providers import (
    ComposedCacheAdapterProvider,
    LocalMemoryCacheAdapterProvider,
    RedisCacheAdapterProvider,
    create_cache_adapter_provider,
)
from entitycache.infrastructure.cache.redis_cacher import (
    GenericRedisCacher,
    RedisCacheContext,
)


def _adapter(results: dict | None = None) -> MagicMock:
    adapter = MagicMock()
    adapter.load_many = AsyncMock(return_value=results or {})
    adapter.cache_many = AsyncMock()
    adapter.cache_db_misses = AsyncMock()
    adapter.invalidate_many = AsyncMock()
    return adapter


class TestComposedEntityCacheAdapter:
    async def test_load_passes_only_misses_down(self) -> None:
        upper = _adapter({1: CacheLoadResult.hit({"id": 1}), 2: CacheLoadResult.miss()})
        lower = _adapter({2: CacheLoadResult.negative()})
        composed = ComposedEntityCacheAdapter([upper, lower])

        results = await composed.load_many("id", [1, 2])

        lower.load_many.assert_awaited_once_with("id", [2])
        assert results[1].item == {"id": 1}
        assert results[2].status is CacheStatus.NEGATIVE

    async def test_unresolved_values_are_misses(self) -> None:
        composed = ComposedEntityCacheAdapter([_adapter(), _adapter()])

        results = await composed.load_many("id", [7])

        assert results[7].status is CacheStatus.MISS

    async def test_stops_when_everything_resolved(self) -> None:
        upper = _adapter({1: CacheLoadResult.hit({"id": 1})})
        lower = _adapter()
        composed = ComposedEntityCacheAdapter([upper, lower])

        await composed.load_many("id", [1])

        lower.load_many.assert_not_awaited()

    async def test_writes_go_to_lowest_layer_first(self) -> None:
        order: list[str] = []
        upper, lower = _adapter(), _adapter()
        for name, adapter in (("upper", upper), ("lower", lower)):
            for method in ("cache_many", "cache_db_misses", "invalidate_many"):
                getattr(adapter, method).side_effect = (
                    lambda *args, _name=name, _method=method: order.append(f"{_method}:{_name}")
                )
        composed = ComposedEntityCacheAdapter([upper, lower])

        await composed.cache_many("id", {1: {"id": 1}})
        await composed.cache_db_misses("id", [2])
        await composed.invalidate_many("id", [1])

        assert order == [
            "cache_many:lower",
            "cache_many:upper",
            "cache_db_misses:lower",
            "cache_db_misses:upper",
            "invalidate_many:lower",
            "invalidate_many:upper",
        ]

    async def test_local_memory_over_redis(self, entity_configuration, fake_redis) -> None:
        """Redis hits are served; the local layer is filled only by explicit writes."""
        provider = ComposedCacheAdapterProvider(
            [
                LocalMemoryCacheAdapterProvider(),
                RedisCacheAdapterProvider(RedisCacheContext(redis_client=fake_redis)),
            ]
        )
        composed = provider.get_cache_adapter(entity_configuration)

        await composed.cache_many("id", {1: {"id": 1}})
        await composed.invalidate_many("id", [1])

        assert fake_redis.store == {}
        assert (await composed.load_many("id", [1]))[1].status is CacheStatus.MISS


class TestProviders:
    def test_local_memory_shares_cache_per_table(self, entity_configuration) -> None:
        provider = LocalMemoryCacheAdapterProvider()

        first = provider.get_cache_adapter(entity_configuration)
        second = provider.get_cache_adapter(entity_configuration)

        assert isinstance(first, GenericEntityCacheAdapter)
        assert isinstance(first.generic_cacher, GenericLocalMemoryCacher)
        assert first.generic_cacher.local_memory_cache is second.generic_cacher.local_memory_cache

    def test_no_op_provider(self, entity_configuration) -> None:
        adapter = LocalMemoryCacheAdapterProvider.no_op().get_cache_adapter(entity_configuration)
        assert isinstance(adapter.generic_cacher, NoOpCacher)

    def test_local_memory_from_settings(self, entity_configuration) -> None:
        settings = Settings(local_memory_cache_max_size=5, local_memory_cache_ttl=3)
        adapter = LocalMemoryCacheAdapterProvider.from_settings(settings).get_cache_adapter(
            entity_configuration
        )
        cache = adapter.generic_cacher.local_memory_cache
        assert cache.maxsize == 5
        assert cache.ttl == 3

    def test_create_without_redis_is_local_only(self) -> None:
        provider = create_cache_adapter_provider(Settings(), None)
        assert isinstance(provider, LocalMemoryCacheAdapterProvider)

    def test_create_with_redis_composes(self, entity_configuration, fake_redis) -> None:
        settings = Settings(cache_key_prefix="app-", cache_ttl_positive=60)
        provider = create_cache_adapter_provider(settings, fake_redis)

        adapter = provider.get_cache_adapter(entity_configuration)

        assert isinstance(adapter, ComposedEntityCacheAdapter)
        local, remote = adapter.cache_adapters
        assert isinstance(local.generic_cacher, GenericLocalMemoryCacher)
        assert isinstance(remote.generic_cacher, GenericRedisCacher)
        assert remote.generic_cacher.context.cache_key_prefix == "app-"
        assert remote.generic_cacher.context.ttl_seconds_positive == 60
