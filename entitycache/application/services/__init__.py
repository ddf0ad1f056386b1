"""Application services: read-through orchestration and default metrics."""

from entitycache.application.services.metrics_service import NoOpEntityMetricsAdapter
from entitycache.application.services.read_through_cache import ReadThroughEntityCache

__all__ = [
    "NoOpEntityMetricsAdapter",
    "ReadThroughEntityCache",
]
