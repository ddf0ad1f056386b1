"""Domain entities.

Pure descriptions of entity types; no cache or persistence concerns.
"""

from entitycache.domain.entities.entity_configuration import EntityConfiguration

__all__ = [
    "EntityConfiguration",
]
