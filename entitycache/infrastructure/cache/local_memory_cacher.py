"""In-process generic cacher on a cachetools TTL cache, plus a no-op variant.

The cache object is created by the caller (see create_lru_cache) and may be
shared by the cachers of several entity types; keys are namespaced by table.
"""

from collections.abc import Hashable, Mapping, Sequence
from typing import Any, Final

from cachetools import TTLCache

from entitycache.core.constants import (
    DEFAULT_LOCAL_MEMORY_MAX_SIZE,
    DEFAULT_LOCAL_MEMORY_TTL_SECONDS,
)
from entitycache.domain.entities import EntityConfiguration
from entitycache.domain.value_objects import CacheLoadResult
from entitycache.infrastructure.cache.keys import (
    get_cache_key_versions_to_invalidate,
    make_key,
)


class _DoesNotExist:
    """Marker type for a negatively cached database miss."""

    def __repr__(self) -> str:
        return "DOES_NOT_EXIST_LOCAL_MEMORY_CACHE"


# Sentinel stored to negatively cache a database miss; identity-compared.
DOES_NOT_EXIST_LOCAL_MEMORY_CACHE: Final = _DoesNotExist()

type LocalMemoryCache = TTLCache[str, Mapping[str, Any] | _DoesNotExist]


def create_lru_cache(
    max_size: int = DEFAULT_LOCAL_MEMORY_MAX_SIZE,
    ttl_seconds: float = DEFAULT_LOCAL_MEMORY_TTL_SECONDS,
) -> LocalMemoryCache:
    """Create the bounded, expiring cache backing GenericLocalMemoryCacher.

    Args:
        max_size: Maximum number of entries (least recently used evicted first).
        ttl_seconds: Entry lifetime; applies to records and negative markers alike.

    Returns:
        Empty TTLCache.
    """
    return TTLCache(maxsize=max_size, ttl=ttl_seconds)


class GenericLocalMemoryCacher:
    """Generic cacher for one entity type in process memory.

    Key layout: <table>:<cache_key_version>:<column>:<value>. Entries are not
    shared across processes, so staleness is bounded by the cache TTL.
    """

    def __init__(
        self,
        entity_configuration: EntityConfiguration,
        local_memory_cache: LocalMemoryCache,
    ) -> None:
        self.entity_configuration = entity_configuration
        self.local_memory_cache = local_memory_cache

    async def load_many(self, keys: Sequence[str]) -> dict[str, CacheLoadResult[Mapping[str, Any]]]:
        results: dict[str, CacheLoadResult[Mapping[str, Any]]] = {}
        for key in keys:
            cached = self.local_memory_cache.get(key)
            if cached is DOES_NOT_EXIST_LOCAL_MEMORY_CACHE:
                results[key] = CacheLoadResult.negative()
            elif cached is not None:
                # Callers own what they get back; the stored dict stays private.
                results[key] = CacheLoadResult.hit(dict(cached))
            else:
                results[key] = CacheLoadResult.miss()
        return results

    async def cache_many(self, object_map: Mapping[str, Mapping[str, Any]]) -> None:
        for key, item in object_map.items():
            self.local_memory_cache[key] = dict(item)

    async def cache_db_misses(self, keys: Sequence[str]) -> None:
        for key in keys:
            self.local_memory_cache[key] = DOES_NOT_EXIST_LOCAL_MEMORY_CACHE

    async def invalidate_many(self, keys: Sequence[str]) -> None:
        for key in keys:
            self.local_memory_cache.pop(key, None)

    def make_cache_key(self, field_name: str, field_value: Hashable) -> str:
        return self._make_cache_key_for_version(
            field_name, field_value, self.entity_configuration.cache_key_version
        )

    def make_cache_keys_for_invalidation(
        self, field_name: str, field_value: Hashable
    ) -> list[str]:
        return [
            self._make_cache_key_for_version(field_name, field_value, version)
            for version in get_cache_key_versions_to_invalidate(
                self.entity_configuration.cache_key_version
            )
        ]

    def _make_cache_key_for_version(
        self, field_name: str, field_value: Hashable, cache_key_version: int
    ) -> str:
        return make_key(
            self.entity_configuration.table_name,
            str(cache_key_version),
            self.entity_configuration.column_for(field_name),
            str(field_value),
        )


class NoOpCacher(GenericLocalMemoryCacher):
    """Cacher that stores nothing: every load is a miss, writes are dropped."""

    def __init__(self, entity_configuration: EntityConfiguration) -> None:
        super().__init__(entity_configuration, create_lru_cache(max_size=1))

    async def load_many(self, keys: Sequence[str]) -> dict[str, CacheLoadResult[Mapping[str, Any]]]:
        return {key: CacheLoadResult.miss() for key in keys}

    async def cache_many(self, object_map: Mapping[str, Mapping[str, Any]]) -> None:
        return None

    async def cache_db_misses(self, keys: Sequence[str]) -> None:
        return None

    async def invalidate_many(self, keys: Sequence[str]) -> None:
        return None
