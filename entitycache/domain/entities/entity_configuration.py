"""Entity configuration domain entity.

Describes one entity type to the cache layer: its table, field-to-column
mapping, which fields are cacheable, and the cache key version.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field

from entitycache.domain.enums import FieldType


@dataclass(frozen=True)
class EntityConfiguration:
    """Cache-relevant description of an entity type.

    Bump cache_key_version whenever the serialized shape of a cached record
    changes incompatibly; records written under other versions then become
    unreachable instead of being read back with the wrong shape.

    Attributes:
        table_name: System-of-record table (also part of every cache key).
        id_field: Field holding the entity primary key.
        entity_to_db_fields: Field name -> column name.
        cacheable_fields: Fields whose lookups are served through the cache.
        cache_key_version: Non-negative version embedded in cache keys.
        field_types: Field name -> serialization type; unlisted fields are plain JSON.
    """

    table_name: str
    id_field: str
    entity_to_db_fields: Mapping[str, str]
    cacheable_fields: frozenset[str] = frozenset()
    cache_key_version: int = 0
    field_types: Mapping[str, FieldType] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Validate the configuration. Raises ValueError if invalid."""
        if not self.table_name:
            raise ValueError("table_name must be a non-empty string")
        if self.cache_key_version < 0:
            raise ValueError(
                f"cache_key_version must be non-negative, got {self.cache_key_version}"
            )
        if self.id_field not in self.entity_to_db_fields:
            raise ValueError(f"database field mapping missing for {self.id_field}")
        unmapped = sorted(set(self.cacheable_fields) - set(self.entity_to_db_fields))
        if unmapped:
            raise ValueError(
                f"cacheable fields without database field mapping: {', '.join(unmapped)}"
            )

    @property
    def db_to_entity_fields(self) -> dict[str, str]:
        """Column name -> field name."""
        return {column: name for name, column in self.entity_to_db_fields.items()}

    def column_for(self, field_name: str) -> str:
        """Return the column for field_name.

        Raises:
            ValueError: If the field has no database mapping.
        """
        column = self.entity_to_db_fields.get(field_name)
        if column is None:
            raise ValueError(f"database field mapping missing for {field_name}")
        return column

    def is_field_cacheable(self, field_name: str) -> bool:
        return field_name in self.cacheable_fields

    def field_type_for(self, field_name: str) -> FieldType:
        return self.field_types.get(field_name, FieldType.JSON)
