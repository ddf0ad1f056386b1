"""Application ports implemented outside the read-through core."""

from entitycache.application.interfaces.metrics import EntityMetricsAdapter

__all__ = [
    "EntityMetricsAdapter",
]
