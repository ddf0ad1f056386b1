"""Redis connection lifecycle for the process that owns the cache clients.

The cachers never open or close connections; whoever wires the cache
(application startup, a worker entrypoint) calls connect_redis() once and
disconnect_redis() on shutdown.
"""

import logging

import redis.asyncio as redis

from entitycache.core.config import Settings, get_settings

logger = logging.getLogger(__name__)


def create_redis_client(settings: Settings | None = None) -> redis.Redis:
    """Build a pooled Redis client from settings without connecting.

    Responses are decoded to str; the Redis cacher relies on that.
    """
    settings = settings or get_settings()
    return redis.Redis(
        host=settings.redis_host,
        port=settings.redis_port,
        db=settings.redis_db,
        password=settings.redis_password.get_secret_value() if settings.redis_password else None,
        decode_responses=True,
        max_connections=settings.redis_max_connections,
        socket_connect_timeout=settings.redis_socket_timeout,
        socket_timeout=settings.redis_socket_timeout,
        socket_keepalive=True,
    )


async def connect_redis(settings: Settings | None = None) -> redis.Redis | None:
    """Create a pooled Redis client and verify it with PING.

    Args:
        settings: Settings to read connection options from; defaults to get_settings().

    Returns:
        Connected client, or None when Redis is disabled or unreachable (the
        caller should then run without the Redis layer).
    """
    settings = settings or get_settings()
    if not settings.redis_enabled:
        logger.info("Redis cache disabled by configuration")
        return None
    client = create_redis_client(settings)
    try:
        await client.ping()
    except (redis.ConnectionError, redis.TimeoutError) as e:
        logger.warning("Redis connection failed: %s. Cache disabled.", e)
        await client.aclose()
        return None
    logger.info(
        "Redis cache connected: %s:%s", settings.redis_host, settings.redis_port
    )
    return client


async def disconnect_redis(client: redis.Redis | None) -> None:
    """Close the client and its pool. Safe to call with None."""
    if client is None:
        return
    await client.aclose()
    logger.info("Redis cache disconnected")
