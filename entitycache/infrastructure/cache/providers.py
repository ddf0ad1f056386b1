"""Cache adapter providers: build the cache adapter for an entity configuration."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import redis.asyncio as redis

from entitycache.core.config import Settings
from entitycache.domain.entities import EntityConfiguration
from entitycache.infrastructure.cache.cache_adapter import GenericEntityCacheAdapter
from entitycache.infrastructure.cache.cache_protocol import (
    CacheAdapterProvider,
    EntityCacheAdapter,
)
from entitycache.infrastructure.cache.composed_cache_adapter import (
    ComposedEntityCacheAdapter,
)
from entitycache.infrastructure.cache.local_memory_cacher import (
    GenericLocalMemoryCacher,
    LocalMemoryCache,
    NoOpCacher,
    create_lru_cache,
)
from entitycache.infrastructure.cache.redis_cacher import (
    GenericRedisCacher,
    RedisCacheContext,
)
from entitycache.infrastructure.cache.sharded_redis_cacher import (
    ShardedGenericRedisCacher,
    ShardedRedisCacheContext,
)

logger = logging.getLogger(__name__)


class RedisCacheAdapterProvider:
    """Redis-backed adapters sharing one RedisCacheContext."""

    def __init__(self, context: RedisCacheContext) -> None:
        self.context = context

    def get_cache_adapter(
        self, entity_configuration: EntityConfiguration
    ) -> EntityCacheAdapter[Any]:
        return GenericEntityCacheAdapter(
            GenericRedisCacher(self.context, entity_configuration)
        )


class ShardedRedisCacheAdapterProvider:
    """Sharded Redis-backed adapters sharing one ShardedRedisCacheContext."""

    def __init__(self, context: ShardedRedisCacheContext) -> None:
        self.context = context

    def get_cache_adapter(
        self, entity_configuration: EntityConfiguration
    ) -> EntityCacheAdapter[Any]:
        return GenericEntityCacheAdapter(
            ShardedGenericRedisCacher(self.context, entity_configuration)
        )


class LocalMemoryCacheAdapterProvider:
    """In-process adapters; each entity type gets a cache from cache_factory.

    Use no_op() for a provider whose adapters never cache anything
    (e.g. in tests or when caching is disabled).
    """

    def __init__(
        self,
        cache_factory: Callable[[], LocalMemoryCache] | None = None,
        *,
        no_op: bool = False,
    ) -> None:
        self.cache_factory = cache_factory or create_lru_cache
        self._no_op = no_op
        self._caches: dict[str, LocalMemoryCache] = {}

    @classmethod
    def no_op(cls) -> LocalMemoryCacheAdapterProvider:
        return cls(no_op=True)

    @classmethod
    def from_settings(cls, settings: Settings) -> LocalMemoryCacheAdapterProvider:
        return cls(
            lambda: create_lru_cache(
                max_size=settings.local_memory_cache_max_size,
                ttl_seconds=settings.local_memory_cache_ttl,
            )
        )

    def get_cache_adapter(
        self, entity_configuration: EntityConfiguration
    ) -> EntityCacheAdapter[Any]:
        if self._no_op:
            return GenericEntityCacheAdapter(NoOpCacher(entity_configuration))
        cache = self._caches.get(entity_configuration.table_name)
        if cache is None:
            cache = self.cache_factory()
            self._caches[entity_configuration.table_name] = cache
        return GenericEntityCacheAdapter(
            GenericLocalMemoryCacher(entity_configuration, cache)
        )


class ComposedCacheAdapterProvider:
    """Composes the adapters of several providers, closest to the application first."""

    def __init__(self, providers: list[CacheAdapterProvider]) -> None:
        self.providers = providers

    def get_cache_adapter(
        self, entity_configuration: EntityConfiguration
    ) -> EntityCacheAdapter[Any]:
        return ComposedEntityCacheAdapter(
            [provider.get_cache_adapter(entity_configuration) for provider in self.providers]
        )


def create_cache_adapter_provider(
    settings: Settings, redis_client: redis.Redis | None
) -> CacheAdapterProvider:
    """Wire the standard cache stack from settings.

    Local memory over Redis when a Redis client is available, otherwise
    local memory alone.
    """
    local_memory = LocalMemoryCacheAdapterProvider.from_settings(settings)
    if redis_client is None:
        logger.info("Entity cache: local memory only")
        return local_memory
    logger.info("Entity cache: local memory over Redis")
    return ComposedCacheAdapterProvider(
        [
            local_memory,
            RedisCacheAdapterProvider(
                RedisCacheContext.from_settings(redis_client, settings)
            ),
        ]
    )
