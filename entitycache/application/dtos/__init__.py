"""DTOs passed across application ports."""

from entitycache.application.dtos.metrics import IncrementLoadCountEvent

__all__ = [
    "IncrementLoadCountEvent",
]
