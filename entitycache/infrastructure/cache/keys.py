"""Cache key builders and cache key version windows. Single place for key format.

Key parts are escaped before joining so a field value containing
CACHE_KEY_SEP cannot produce the same key as a different value.
"""

from entitycache.core.constants import CACHE_KEY_ESCAPE, CACHE_KEY_SEP


def get_cache_key_versions_to_invalidate(cache_key_version: int) -> list[int]:
    """Return every cache key version an invalidation must cover.

    During a rolling deploy, processes on the previous and next code version
    may write the same entity under adjacent versions, so invalidating only
    the local version leaves stale entries reachable. Returns the closed
    interval [v - 1, v + 1] clipped at zero.

    Args:
        cache_key_version: Version known to the invalidating process.

    Returns:
        Ascending list of versions (two for version 0, three otherwise).

    Raises:
        ValueError: If cache_key_version is negative.
    """
    if cache_key_version < 0:
        raise ValueError(
            f"cache_key_version must be non-negative, got {cache_key_version}"
        )
    return [
        *([] if cache_key_version == 0 else [cache_key_version - 1]),
        cache_key_version,
        cache_key_version + 1,
    ]


def escape_key_part(part: str) -> str:
    """Escape the escape character and the separator in one key part."""
    return part.replace(CACHE_KEY_ESCAPE, CACHE_KEY_ESCAPE * 2).replace(
        CACHE_KEY_SEP, f"{CACHE_KEY_ESCAPE}{CACHE_KEY_SEP}"
    )


def make_key(*parts: str) -> str:
    """Join escaped key parts with CACHE_KEY_SEP (default key function for cachers)."""
    return CACHE_KEY_SEP.join(escape_key_part(part) for part in parts)


def validate_key_prefix(prefix: str) -> None:
    """Raise ValueError if prefix contains the cache key separator.

    Args:
        prefix: Cache key prefix shared by every key of a cacher.

    Raises:
        ValueError: If prefix contains CACHE_KEY_SEP.
    """
    if CACHE_KEY_SEP in prefix:
        raise ValueError(
            f"Cache key prefix {prefix!r} must not contain separator {CACHE_KEY_SEP!r}"
        )
