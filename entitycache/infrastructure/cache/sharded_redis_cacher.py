"""Redis-backed generic cacher over a set of sharded Redis instances.

Keys are grouped by shard group and each group is sent to its own client;
per-shard calls run concurrently. Batches spanning shards are not atomic.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Hashable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

import redis.asyncio as redis

from entitycache.core.constants import (
    DEFAULT_CACHE_KEY_PREFIX,
    DEFAULT_TTL_SECONDS_NEGATIVE,
    DEFAULT_TTL_SECONDS_POSITIVE,
    REDIS_KEY_FORMAT_VERSION,
)
from entitycache.domain.entities import EntityConfiguration
from entitycache.domain.value_objects import CacheLoadResult
from entitycache.infrastructure.cache.keys import (
    get_cache_key_versions_to_invalidate,
    make_key,
    validate_key_prefix,
)
from entitycache.infrastructure.cache.redis_cacher import (
    DOES_NOT_EXIST_REDIS,
    delete_many,
    mget,
    results_from_redis_values,
    set_many_with_expiry,
)
from entitycache.infrastructure.cache.serialization import (
    REDIS_TRANSFORMER_MAP,
    FieldTransformerMap,
    serialize_record,
)

logger = logging.getLogger(__name__)

type ShardGroup = int


@dataclass(frozen=True)
class ShardedRedisCacheContext:
    """Sharding scheme plus key/expiry policy for ShardedGenericRedisCacher.

    Attributes:
        get_shard_group_for_keys: Maps every key to its shard group.
        get_redis_client_for_shard_group: Returns the client owning a shard group.
        sharding_scheme_version: Bump when the sharding scheme changes.
        cache_key_prefix: Prefix for every entity key.
        ttl_seconds_positive: Expiry for cached records.
        ttl_seconds_negative: Expiry for negative markers.
        make_key: Joins key parts into a key string.
        transformer_map: Field transformers used for JSON (de)serialization.
    """

    get_shard_group_for_keys: Callable[[Sequence[str]], Mapping[str, ShardGroup]]
    get_redis_client_for_shard_group: Callable[[ShardGroup], redis.Redis]
    sharding_scheme_version: int = 1
    cache_key_prefix: str = DEFAULT_CACHE_KEY_PREFIX
    ttl_seconds_positive: int = DEFAULT_TTL_SECONDS_POSITIVE
    ttl_seconds_negative: int = DEFAULT_TTL_SECONDS_NEGATIVE
    make_key: Callable[..., str] = make_key
    transformer_map: FieldTransformerMap = field(default_factory=lambda: REDIS_TRANSFORMER_MAP)

    def __post_init__(self) -> None:
        validate_key_prefix(self.cache_key_prefix)


@dataclass
class _ShardBatch:
    redis_client: redis.Redis
    keys: list[str] = field(default_factory=list)


class ShardedGenericRedisCacher:
    """Generic cacher for one entity type spread over sharded Redis instances.

    Key layout: <prefix>:v<sharding_scheme_version>:<table>:v2.<version>:<column>:<value>.
    """

    def __init__(
        self,
        context: ShardedRedisCacheContext,
        entity_configuration: EntityConfiguration,
    ) -> None:
        self.context = context
        self.entity_configuration = entity_configuration

    def _group_keys_by_shard(self, keys: Sequence[str]) -> list[_ShardBatch]:
        shard_groups = self.context.get_shard_group_for_keys(keys)
        batches: dict[ShardGroup, _ShardBatch] = {}
        for key in keys:
            shard_group = shard_groups[key]
            batch = batches.get(shard_group)
            if batch is None:
                batch = _ShardBatch(
                    self.context.get_redis_client_for_shard_group(shard_group)
                )
                batches[shard_group] = batch
            batch.keys.append(key)
        return list(batches.values())

    async def load_many(self, keys: Sequence[str]) -> dict[str, CacheLoadResult[dict[str, Any]]]:
        if not keys:
            return {}
        batches = self._group_keys_by_shard(keys)
        shard_values = await asyncio.gather(
            *(mget(batch.redis_client, batch.keys) for batch in batches)
        )
        results: dict[str, CacheLoadResult[dict[str, Any]]] = {}
        for batch, raw_values in zip(batches, shard_values, strict=True):
            results.update(
                results_from_redis_values(
                    self.entity_configuration,
                    self.context.transformer_map,
                    batch.keys,
                    raw_values,
                )
            )
        logger.debug(
            "Sharded Redis load %s: %s keys over %s shards",
            self.entity_configuration.table_name,
            len(keys),
            len(batches),
        )
        return results

    async def cache_many(self, object_map: Mapping[str, Mapping[str, Any]]) -> None:
        if not object_map:
            return
        batches = self._group_keys_by_shard(list(object_map))
        await asyncio.gather(
            *(
                set_many_with_expiry(
                    batch.redis_client,
                    {
                        key: serialize_record(
                            self.entity_configuration,
                            self.context.transformer_map,
                            object_map[key],
                        )
                        for key in batch.keys
                    },
                    self.context.ttl_seconds_positive,
                )
                for batch in batches
            )
        )

    async def cache_db_misses(self, keys: Sequence[str]) -> None:
        if not keys:
            return
        batches = self._group_keys_by_shard(keys)
        await asyncio.gather(
            *(
                set_many_with_expiry(
                    batch.redis_client,
                    dict.fromkeys(batch.keys, DOES_NOT_EXIST_REDIS),
                    self.context.ttl_seconds_negative,
                )
                for batch in batches
            )
        )

    async def invalidate_many(self, keys: Sequence[str]) -> None:
        if not keys:
            return
        batches = self._group_keys_by_shard(keys)
        await asyncio.gather(
            *(delete_many(batch.redis_client, batch.keys) for batch in batches)
        )

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
        return self.context.make_key(
            self.context.cache_key_prefix,
            f"v{self.context.sharding_scheme_version}",
            self.entity_configuration.table_name,
            f"{REDIS_KEY_FORMAT_VERSION}.{cache_key_version}",
            self.entity_configuration.column_for(field_name),
            str(field_value),
        )
