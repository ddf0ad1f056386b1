"""Metrics port for the read-through cache."""

from typing import Protocol

from entitycache.application.dtos.metrics import IncrementLoadCountEvent


class EntityMetricsAdapter(Protocol):
    """Protocol for recording how many values were served by cache vs database."""

    def increment_cache_load_count(self, event: IncrementLoadCountEvent) -> None:
        """Record values served from cache (hits and negatives)."""

    def increment_database_load_count(self, event: IncrementLoadCountEvent) -> None:
        """Record values fetched from the system of record."""
