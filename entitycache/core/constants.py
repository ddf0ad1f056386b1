"""Core constants: cache key structure and default TTLs.

Single source of truth for cache key structure. Used by the cachers in
entitycache.infrastructure.cache.
"""

# Delimiter for composite keys
CACHE_KEY_SEP = ":"

# Escape character for key parts that contain CACHE_KEY_SEP
CACHE_KEY_ESCAPE = "\\"

# Prefix prepended to every Redis entity key (e.g. ent-:users:v2.0:id:42)
DEFAULT_CACHE_KEY_PREFIX = "ent-"

# Key-format generation embedded before the entity cache key version
REDIS_KEY_FORMAT_VERSION = "v2"

# Redis TTLs in seconds: positive entries live longer than negative markers
DEFAULT_TTL_SECONDS_POSITIVE = 86400
DEFAULT_TTL_SECONDS_NEGATIVE = 600

# In-process LRU cache defaults
DEFAULT_LOCAL_MEMORY_MAX_SIZE = 10_000
DEFAULT_LOCAL_MEMORY_TTL_SECONDS = 10
