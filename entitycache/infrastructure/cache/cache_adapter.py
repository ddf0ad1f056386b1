"""Generic entity cache adapter: field values in, cache keys out.

Translates field-value level requests into one batched cacher call per
operation and maps cacher results back to field values. Backend agnostic;
all backend behaviour lives in the injected GenericCacher.
"""

from collections.abc import Hashable, Mapping, Sequence
from typing import Any

from entitycache.domain.exceptions import UnmappedCacheKeyError
from entitycache.domain.value_objects import CacheLoadResult
from entitycache.infrastructure.cache.cache_protocol import GenericCacher


class GenericEntityCacheAdapter[TFields: Mapping[str, Any]]:
    """Standard EntityCacheAdapter coordinating caching through a GenericCacher.

    The key <-> field value mapping is rebuilt on every call; the adapter
    holds no state besides the cacher.
    """

    def __init__(self, generic_cacher: GenericCacher[TFields]) -> None:
        self.generic_cacher = generic_cacher

    def _cache_key_to_field_value(
        self, field_name: str, field_values: Sequence[Hashable]
    ) -> dict[str, Hashable]:
        mapping: dict[str, Hashable] = {}
        for field_value in field_values:
            cache_key = self.generic_cacher.make_cache_key(field_name, field_value)
            existing = mapping.setdefault(cache_key, field_value)
            if existing != field_value:
                raise ValueError(
                    f"Field values {existing!r} and {field_value!r} of {field_name} "
                    f"map to the same cache key {cache_key}"
                )
        return mapping

    async def load_many(
        self, field_name: str, field_values: Sequence[Hashable]
    ) -> dict[Hashable, CacheLoadResult[TFields]]:
        """Load cached results for field values.

        Args:
            field_name: Field being queried.
            field_values: Distinct values of field_name.

        Returns:
            Field value -> CacheLoadResult, one entry per requested value.

        Raises:
            UnmappedCacheKeyError: If the cacher returns a key that was not requested.
            CacheAdapterTransientError: On cache backend failure.
        """
        key_to_field_value = self._cache_key_to_field_value(field_name, field_values)
        cache_results = await self.generic_cacher.load_many(list(key_to_field_value))

        results: dict[Hashable, CacheLoadResult[TFields]] = {}
        for cache_key, cache_result in cache_results.items():
            if cache_key not in key_to_field_value:
                raise UnmappedCacheKeyError(cache_key)
            results[key_to_field_value[cache_key]] = cache_result
        return results

    async def cache_many(
        self, field_name: str, object_map: Mapping[Hashable, TFields]
    ) -> None:
        """Cache records keyed by their field_name value."""
        await self.generic_cacher.cache_many(
            {
                self.generic_cacher.make_cache_key(field_name, field_value): obj
                for field_value, obj in object_map.items()
            }
        )

    async def cache_db_misses(
        self, field_name: str, field_values: Sequence[Hashable]
    ) -> None:
        """Negatively cache field values the system of record has no row for."""
        await self.generic_cacher.cache_db_misses(
            [
                self.generic_cacher.make_cache_key(field_name, field_value)
                for field_value in field_values
            ]
        )

    async def invalidate_many(
        self, field_name: str, field_values: Sequence[Hashable]
    ) -> None:
        """Invalidate field values under every key version of the invalidation window."""
        await self.generic_cacher.invalidate_many(
            [
                cache_key
                for field_value in field_values
                for cache_key in self.generic_cacher.make_cache_keys_for_invalidation(
                    field_name, field_value
                )
            ]
        )
