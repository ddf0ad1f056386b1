"""Cache protocols: backend cachers, field-value adapters, and adapter providers."""

from collections.abc import Hashable, Mapping, Sequence
from typing import Any, Protocol

from entitycache.domain.entities import EntityConfiguration
from entitycache.domain.value_objects import CacheLoadResult


class GenericCacher[TFields: Mapping[str, Any]](Protocol):
    """Protocol for cache backends (Redis, local memory, no-op).

    Implementations do no retries; every native call raises
    CacheAdapterTransientError on backend failure.
    """

    def make_cache_key(self, field_name: str, field_value: Hashable) -> str:
        """Return the key a (field, value) is stored under at the current version."""
        ...

    def make_cache_keys_for_invalidation(
        self, field_name: str, field_value: Hashable
    ) -> list[str]:
        """Return the keys for every version in the invalidation window."""
        ...

    async def load_many(self, keys: Sequence[str]) -> dict[str, CacheLoadResult[TFields]]:
        """Return exactly one result (possibly MISS) per key."""
        ...

    async def cache_many(self, object_map: Mapping[str, TFields]) -> None:
        """Store records positively."""
        ...

    async def cache_db_misses(self, keys: Sequence[str]) -> None:
        """Store negative markers for keys the system of record has no row for."""
        ...

    async def invalidate_many(self, keys: Sequence[str]) -> None:
        """Delete keys; deleting an absent key is not an error."""
        ...


class EntityCacheAdapter[TFields: Mapping[str, Any]](Protocol):
    """Protocol for field-value level cache adapters (generic or composed)."""

    async def load_many(
        self, field_name: str, field_values: Sequence[Hashable]
    ) -> dict[Hashable, CacheLoadResult[TFields]]:
        ...

    async def cache_many(
        self, field_name: str, object_map: Mapping[Hashable, TFields]
    ) -> None:
        ...

    async def cache_db_misses(
        self, field_name: str, field_values: Sequence[Hashable]
    ) -> None:
        ...

    async def invalidate_many(
        self, field_name: str, field_values: Sequence[Hashable]
    ) -> None:
        ...


class CacheAdapterProvider(Protocol):
    """Builds the cache adapter for an entity type."""

    def get_cache_adapter(
        self, entity_configuration: EntityConfiguration
    ) -> EntityCacheAdapter[Any]:
        ...
