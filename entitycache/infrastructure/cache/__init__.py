"""Cache: generic cache adapters, backend cachers, and cache key utilities.

Used by the read-through cache in entitycache.application. Key format and
the invalidation version window live in keys.py.
"""

from entitycache.infrastructure.cache.cache_adapter import GenericEntityCacheAdapter
from entitycache.infrastructure.cache.cache_protocol import (
    CacheAdapterProvider,
    EntityCacheAdapter,
    GenericCacher,
)
from entitycache.infrastructure.cache.composed_cache_adapter import (
    ComposedEntityCacheAdapter,
)
from entitycache.infrastructure.cache.errors import wrap_native_redis_call
from entitycache.infrastructure.cache.keys import (
    get_cache_key_versions_to_invalidate,
    make_key,
)
from entitycache.infrastructure.cache.local_memory_cacher import (
    GenericLocalMemoryCacher,
    NoOpCacher,
    create_lru_cache,
)
from entitycache.infrastructure.cache.providers import (
    ComposedCacheAdapterProvider,
    LocalMemoryCacheAdapterProvider,
    RedisCacheAdapterProvider,
    ShardedRedisCacheAdapterProvider,
    create_cache_adapter_provider,
)
from entitycache.infrastructure.cache.redis_cacher import (
    GenericRedisCacher,
    RedisCacheContext,
)
from entitycache.infrastructure.cache.redis_client import (
    connect_redis,
    create_redis_client,
    disconnect_redis,
)
from entitycache.infrastructure.cache.sharded_redis_cacher import (
    ShardedGenericRedisCacher,
    ShardedRedisCacheContext,
)

__all__ = [
    "CacheAdapterProvider",
    "ComposedCacheAdapterProvider",
    "ComposedEntityCacheAdapter",
    "EntityCacheAdapter",
    "GenericCacher",
    "GenericEntityCacheAdapter",
    "GenericLocalMemoryCacher",
    "GenericRedisCacher",
    "LocalMemoryCacheAdapterProvider",
    "NoOpCacher",
    "RedisCacheAdapterProvider",
    "RedisCacheContext",
    "ShardedGenericRedisCacher",
    "ShardedRedisCacheAdapterProvider",
    "ShardedRedisCacheContext",
    "connect_redis",
    "create_cache_adapter_provider",
    "create_lru_cache",
    "create_redis_client",
    "disconnect_redis",
    "get_cache_key_versions_to_invalidate",
    "make_key",
    "wrap_native_redis_call",
]
