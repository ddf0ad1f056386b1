"""Domain value objects and shared value types."""

from entitycache.domain.value_objects.core import CacheLoadResult

__all__ = [
    "CacheLoadResult",
]
