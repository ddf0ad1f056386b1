"""Application layer: read-through orchestration and its ports.

Depends on domain types and the cache adapter protocol only; the cache
backends and the system-of-record loader are injected.
"""

from entitycache.application.dtos import IncrementLoadCountEvent
from entitycache.application.interfaces import EntityMetricsAdapter
from entitycache.application.services import (
    NoOpEntityMetricsAdapter,
    ReadThroughEntityCache,
)

__all__ = [
    "EntityMetricsAdapter",
    "IncrementLoadCountEvent",
    "NoOpEntityMetricsAdapter",
    "ReadThroughEntityCache",
]
