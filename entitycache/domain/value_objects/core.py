"""Domain value objects for the entity cache.

Value objects are immutable types that represent domain concepts with
self-validation. They have no identity, only value.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from entitycache.domain.enums import CacheStatus


@dataclass(frozen=True)
class CacheLoadResult[TFields: Mapping[str, Any]]:
    """Result of loading one cache key.

    Exactly one of three variants: HIT (item is the cached record),
    NEGATIVE (the system of record had no row when last loaded) or MISS
    (nothing cached). Only HIT carries an item.
    """

    status: CacheStatus
    item: TFields | None = None

    def __post_init__(self) -> None:
        if self.status is CacheStatus.HIT and self.item is None:
            raise ValueError("A cache hit must carry an item")
        if self.status is not CacheStatus.HIT and self.item is not None:
            raise ValueError(f"A cache {self.status.value} must not carry an item")

    @classmethod
    def hit(cls, item: TFields) -> "CacheLoadResult[TFields]":
        return cls(CacheStatus.HIT, item)

    @classmethod
    def miss(cls) -> "CacheLoadResult[TFields]":
        return cls(CacheStatus.MISS)

    @classmethod
    def negative(cls) -> "CacheLoadResult[TFields]":
        return cls(CacheStatus.NEGATIVE)
