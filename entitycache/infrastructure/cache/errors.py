"""Translation of native Redis failures into CacheAdapterTransientError.

Every cacher call into redis goes through wrap_native_redis_call so that
redis-py exception types never escape the cache layer.
"""

import logging
from collections.abc import Awaitable, Callable

from redis.exceptions import RedisError

from entitycache.domain.exceptions import CacheAdapterTransientError

logger = logging.getLogger(__name__)

# Connection resets and socket timeouts can surface from the transport
# without being wrapped by redis-py (TimeoutError is an OSError).
NATIVE_CACHE_ERRORS: tuple[type[BaseException], ...] = (RedisError, OSError)


async def wrap_native_redis_call[T](fn: Callable[[], Awaitable[T]]) -> T:
    """Await fn() and translate backend failures.

    Args:
        fn: Zero-argument callable returning the native awaitable.

    Returns:
        Result of the native call.

    Raises:
        CacheAdapterTransientError: On any redis or transport failure; the
            native error is chained as __cause__ and its message is kept.
    """
    try:
        return await fn()
    except NATIVE_CACHE_ERRORS as e:
        logger.debug("Cache backend call failed: %s", e)
        raise CacheAdapterTransientError(
            str(e) or e.__class__.__name__,
            details={"native_error": e.__class__.__name__},
        ) from e
