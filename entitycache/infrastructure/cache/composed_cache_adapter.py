"""Cache adapter composing other cache adapters (e.g. local memory over Redis)."""

from collections.abc import Hashable, Mapping, Sequence
from typing import Any

from entitycache.domain.enums import CacheStatus
from entitycache.domain.value_objects import CacheLoadResult
from entitycache.infrastructure.cache.cache_protocol import EntityCacheAdapter


class ComposedEntityCacheAdapter[TFields: Mapping[str, Any]]:
    """EntityCacheAdapter that layers adapters in order of precedence.

    Earlier adapters are read first and written (including invalidations)
    last. Order adapters closest to the application first, closest to the
    system of record last, so an upper layer is never repopulated from a
    lower layer that still holds the old value.
    """

    def __init__(self, cache_adapters: Sequence[EntityCacheAdapter[TFields]]) -> None:
        self.cache_adapters = list(cache_adapters)

    async def load_many(
        self, field_name: str, field_values: Sequence[Hashable]
    ) -> dict[Hashable, CacheLoadResult[TFields]]:
        results: dict[Hashable, CacheLoadResult[TFields]] = {}
        unfulfilled = list(field_values)
        for cache_adapter in self.cache_adapters:
            if not unfulfilled:
                break
            adapter_results = await cache_adapter.load_many(field_name, unfulfilled)
            still_missing = []
            for field_value in unfulfilled:
                cache_result = adapter_results.get(field_value)
                if cache_result is None or cache_result.status is CacheStatus.MISS:
                    still_missing.append(field_value)
                else:
                    results[field_value] = cache_result
            unfulfilled = still_missing

        for field_value in unfulfilled:
            results[field_value] = CacheLoadResult.miss()
        return results

    async def cache_many(
        self, field_name: str, object_map: Mapping[Hashable, TFields]
    ) -> None:
        # write to lower layers first
        for cache_adapter in reversed(self.cache_adapters):
            await cache_adapter.cache_many(field_name, object_map)

    async def cache_db_misses(
        self, field_name: str, field_values: Sequence[Hashable]
    ) -> None:
        for cache_adapter in reversed(self.cache_adapters):
            await cache_adapter.cache_db_misses(field_name, field_values)

    async def invalidate_many(
        self, field_name: str, field_values: Sequence[Hashable]
    ) -> None:
        # delete from lower layers first
        for cache_adapter in reversed(self.cache_adapters):
            await cache_adapter.invalidate_many(field_name, field_values)
