"""Redis-backed generic cacher.

One MGET per load, one non-transactional pipeline of SET ... EX per write,
one DEL per invalidation. Records are stored as JSON objects; a database
miss is stored as the empty string, which no JSON object serializes to.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Hashable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

import redis.asyncio as redis

from entitycache.core.config import Settings
from entitycache.core.constants import (
    DEFAULT_CACHE_KEY_PREFIX,
    DEFAULT_TTL_SECONDS_NEGATIVE,
    DEFAULT_TTL_SECONDS_POSITIVE,
    REDIS_KEY_FORMAT_VERSION,
)
from entitycache.domain.entities import EntityConfiguration
from entitycache.domain.value_objects import CacheLoadResult
from entitycache.infrastructure.cache.errors import wrap_native_redis_call
from entitycache.infrastructure.cache.keys import (
    get_cache_key_versions_to_invalidate,
    make_key,
    validate_key_prefix,
)
from entitycache.infrastructure.cache.serialization import (
    REDIS_TRANSFORMER_MAP,
    FieldTransformerMap,
    deserialize_record,
    serialize_record,
)

logger = logging.getLogger(__name__)

# Sentinel stored in Redis to negatively cache a database miss.
DOES_NOT_EXIST_REDIS = ""


@dataclass(frozen=True)
class RedisCacheContext:
    """Connection and key/expiry policy shared by Redis cachers.

    The client (and its pool) is owned by whoever builds the context.

    Attributes:
        redis_client: redis.asyncio client.
        cache_key_prefix: Prefix for every entity key (e.g. "ent-").
        ttl_seconds_positive: Expiry for cached records.
        ttl_seconds_negative: Expiry for negative markers.
        make_key: Joins key parts into a key string.
        transformer_map: Field transformers used for JSON (de)serialization.
    """

    redis_client: redis.Redis
    cache_key_prefix: str = DEFAULT_CACHE_KEY_PREFIX
    ttl_seconds_positive: int = DEFAULT_TTL_SECONDS_POSITIVE
    ttl_seconds_negative: int = DEFAULT_TTL_SECONDS_NEGATIVE
    make_key: Callable[..., str] = make_key
    transformer_map: FieldTransformerMap = field(default_factory=lambda: REDIS_TRANSFORMER_MAP)

    def __post_init__(self) -> None:
        validate_key_prefix(self.cache_key_prefix)

    @classmethod
    def from_settings(cls, redis_client: redis.Redis, settings: Settings) -> RedisCacheContext:
        """Build a context from application settings."""
        return cls(
            redis_client=redis_client,
            cache_key_prefix=settings.cache_key_prefix,
            ttl_seconds_positive=settings.cache_ttl_positive,
            ttl_seconds_negative=settings.cache_ttl_negative,
        )


def is_negative_marker(raw: str | bytes | None) -> bool:
    """True for the stored database-miss sentinel (str or bytes client)."""
    return raw is not None and len(raw) == 0


def results_from_redis_values(
    entity_configuration: EntityConfiguration,
    transformer_map: FieldTransformerMap,
    keys: Sequence[str],
    raw_values: Sequence[str | bytes | None],
) -> dict[str, CacheLoadResult[dict[str, Any]]]:
    """Map MGET replies (in key order) to one CacheLoadResult per key."""
    results: dict[str, CacheLoadResult[dict[str, Any]]] = {}
    for key, raw in zip(keys, raw_values, strict=True):
        if is_negative_marker(raw):
            results[key] = CacheLoadResult.negative()
        elif raw is not None:
            results[key] = CacheLoadResult.hit(
                deserialize_record(entity_configuration, transformer_map, raw)
            )
        else:
            results[key] = CacheLoadResult.miss()
    return results


async def mget(redis_client: redis.Redis, keys: Sequence[str]) -> list[Any]:
    return await wrap_native_redis_call(lambda: redis_client.mget(list(keys)))


async def set_many_with_expiry(
    redis_client: redis.Redis, values: Mapping[str, str], ttl_seconds: int
) -> None:
    """SET every key with EX in one non-transactional pipeline round trip."""

    async def _execute() -> list[Any]:
        async with redis_client.pipeline(transaction=False) as pipe:
            for key, value in values.items():
                pipe.set(key, value, ex=ttl_seconds)
            return await pipe.execute()

    await wrap_native_redis_call(_execute)


async def delete_many(redis_client: redis.Redis, keys: Sequence[str]) -> None:
    await wrap_native_redis_call(lambda: redis_client.delete(*keys))


class GenericRedisCacher:
    """Generic cacher for one entity type on a single Redis instance.

    Key layout: <prefix>:<table>:v2.<cache_key_version>:<column>:<value>.
    """

    def __init__(
        self,
        context: RedisCacheContext,
        entity_configuration: EntityConfiguration,
    ) -> None:
        self.context = context
        self.entity_configuration = entity_configuration

    async def load_many(self, keys: Sequence[str]) -> dict[str, CacheLoadResult[dict[str, Any]]]:
        if not keys:
            return {}
        raw_values = await mget(self.context.redis_client, keys)
        results = results_from_redis_values(
            self.entity_configuration, self.context.transformer_map, keys, raw_values
        )
        logger.debug(
            "Redis load %s: %s keys (%s hits)",
            self.entity_configuration.table_name,
            len(keys),
            sum(1 for r in results.values() if r.item is not None),
        )
        return results

    async def cache_many(self, object_map: Mapping[str, Mapping[str, Any]]) -> None:
        if not object_map:
            return
        values = {
            key: serialize_record(
                self.entity_configuration, self.context.transformer_map, obj
            )
            for key, obj in object_map.items()
        }
        await set_many_with_expiry(
            self.context.redis_client, values, self.context.ttl_seconds_positive
        )

    async def cache_db_misses(self, keys: Sequence[str]) -> None:
        if not keys:
            return
        await set_many_with_expiry(
            self.context.redis_client,
            dict.fromkeys(keys, DOES_NOT_EXIST_REDIS),
            self.context.ttl_seconds_negative,
        )

    async def invalidate_many(self, keys: Sequence[str]) -> None:
        if not keys:
            return
        await delete_many(self.context.redis_client, keys)

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
            self.entity_configuration.table_name,
            f"{REDIS_KEY_FORMAT_VERSION}.{cache_key_version}",
            self.entity_configuration.column_for(field_name),
            str(field_value),
        )
