"""Read-through orchestration over an entity cache adapter.

Serves lookups by one field from cache where possible, loads the rest from
the system of record, and populates the cache with what was found (and
negatively with what was not). The cache is never authoritative: a cache
outage degrades a read to a full database load, never to a failure.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Hashable, Mapping, Sequence
from typing import Any

from entitycache.application.dtos.metrics import IncrementLoadCountEvent
from entitycache.application.interfaces.metrics import EntityMetricsAdapter
from entitycache.application.services.metrics_service import NoOpEntityMetricsAdapter
from entitycache.domain.entities import EntityConfiguration
from entitycache.domain.enums import CacheStatus
from entitycache.domain.exceptions import CacheAdapterTransientError
from entitycache.domain.value_objects import CacheLoadResult
from entitycache.infrastructure.cache.cache_protocol import EntityCacheAdapter
from entitycache.shared.telemetry.tracing import (
    TracedOperation,
    add_span_attributes,
    add_span_event,
)

logger = logging.getLogger(__name__)

type Fetcher[TFields] = Callable[
    [Sequence[Hashable]], Awaitable[Mapping[Hashable, Sequence[TFields]]]
]


class ReadThroughEntityCache[TFields: Mapping[str, Any]]:
    """Read-through cache for one entity type.

    The fetcher passed to read_many_through is the system-of-record lookup
    for the queried field (e.g. functools.partial(loader.fetch_many_where,
    field_name)). There is no single-flight: concurrent misses for the same
    value each load and populate independently.
    """

    def __init__(
        self,
        entity_configuration: EntityConfiguration,
        cache_adapter: EntityCacheAdapter[TFields],
        metrics_adapter: EntityMetricsAdapter | None = None,
    ) -> None:
        self.entity_configuration = entity_configuration
        self.cache_adapter = cache_adapter
        self.metrics_adapter = metrics_adapter or NoOpEntityMetricsAdapter()

    def _span_attributes(self, field_name: str, count: int) -> dict[str, str | int]:
        return {
            "entity.table": self.entity_configuration.table_name,
            "entity.field": field_name,
            "entity.field_value_count": count,
        }

    async def read_many_through(
        self,
        field_name: str,
        field_values: Sequence[Hashable],
        fetcher: Fetcher[TFields],
    ) -> dict[Hashable, list[TFields]]:
        """Return records for field values, reading through the cache.

        Args:
            field_name: Field being queried.
            field_values: Values to look up; duplicates are collapsed.
            fetcher: System-of-record lookup for field_name.

        Returns:
            Field value -> records. Values known or found to be absent are
            omitted, as are values with more than one row.

        Raises:
            UnmappedCacheKeyError: If a cacher is broken.
            EntityDatabaseAdapterError: If the fetcher fails.
        """
        unique_values = list(dict.fromkeys(field_values))
        if not unique_values:
            return {}
        if not self.entity_configuration.is_field_cacheable(field_name):
            return {
                field_value: list(records)
                for field_value, records in (await fetcher(unique_values)).items()
            }

        async with TracedOperation(
            "entitycache.read_many_through",
            self._span_attributes(field_name, len(unique_values)),
        ):
            cache_results = await self._load_from_cache(field_name, unique_values)

            results: dict[Hashable, list[TFields]] = {}
            misses: list[Hashable] = []
            for field_value in unique_values:
                cache_result = cache_results.get(field_value)
                if cache_result is None or cache_result.status is CacheStatus.MISS:
                    misses.append(field_value)
                elif cache_result.item is not None:
                    results[field_value] = [cache_result.item]

            served = len(unique_values) - len(misses)
            self.metrics_adapter.increment_cache_load_count(
                IncrementLoadCountEvent(self.entity_configuration.table_name, served)
            )
            add_span_attributes(**{"cache.served": served, "cache.misses": len(misses)})
            logger.debug(
                "%s.%s: %d served from cache, %d misses",
                self.entity_configuration.table_name,
                field_name,
                served,
                len(misses),
            )
            if not misses:
                return results

            fetched = await fetcher(misses)
            self.metrics_adapter.increment_database_load_count(
                IncrementLoadCountEvent(self.entity_configuration.table_name, len(misses))
            )

            to_cache: dict[Hashable, TFields] = {}
            absent: list[Hashable] = []
            for field_value in misses:
                records = list(fetched.get(field_value) or ())
                if len(records) > 1:
                    logger.warning(
                        "%s.%s=%r matched %d rows; not returned or cached",
                        self.entity_configuration.table_name,
                        field_name,
                        field_value,
                        len(records),
                    )
                    continue
                if records:
                    to_cache[field_value] = records[0]
                    results[field_value] = records
                else:
                    absent.append(field_value)

            await self._populate(field_name, to_cache, absent)
            return results

    async def _load_from_cache(
        self, field_name: str, field_values: list[Hashable]
    ) -> dict[Hashable, CacheLoadResult[TFields]]:
        try:
            return await self.cache_adapter.load_many(field_name, field_values)
        except CacheAdapterTransientError as e:
            logger.warning(
                "Cache load failed for %s.%s, reading from database: %s",
                self.entity_configuration.table_name,
                field_name,
                e.message,
            )
            add_span_event("cache.load_failed", {"error_code": e.error_code})
            return {}

    async def _populate(
        self,
        field_name: str,
        to_cache: dict[Hashable, TFields],
        absent: list[Hashable],
    ) -> None:
        writes = []
        if to_cache:
            writes.append(self.cache_adapter.cache_many(field_name, to_cache))
        if absent:
            writes.append(self.cache_adapter.cache_db_misses(field_name, absent))
        if not writes:
            return
        outcomes = await asyncio.gather(*writes, return_exceptions=True)
        for outcome in outcomes:
            if isinstance(outcome, CacheAdapterTransientError):
                logger.warning(
                    "Cache population failed for %s.%s: %s",
                    self.entity_configuration.table_name,
                    field_name,
                    outcome.message,
                )
                add_span_event("cache.populate_failed", {"error_code": outcome.error_code})
            elif isinstance(outcome, BaseException):
                raise outcome

    async def invalidate_many(
        self, field_name: str, field_values: Sequence[Hashable]
    ) -> None:
        """Invalidate cached values of field_name (all key versions in the window).

        No-op for fields that are not cacheable.

        Raises:
            CacheAdapterTransientError: If the backend fails; the cache may
                still hold stale entries, so the caller must see this.
        """
        if not self.entity_configuration.is_field_cacheable(field_name):
            return
        unique_values = list(dict.fromkeys(field_values))
        if not unique_values:
            return
        async with TracedOperation(
            "entitycache.invalidate_many",
            self._span_attributes(field_name, len(unique_values)),
        ):
            await self.cache_adapter.invalidate_many(field_name, unique_values)
