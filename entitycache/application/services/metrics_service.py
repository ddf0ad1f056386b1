"""Default metrics adapter."""

from entitycache.application.dtos.metrics import IncrementLoadCountEvent


class NoOpEntityMetricsAdapter:
    """EntityMetricsAdapter that records nothing."""

    def increment_cache_load_count(self, event: IncrementLoadCountEvent) -> None:
        pass

    def increment_database_load_count(self, event: IncrementLoadCountEvent) -> None:
        pass
