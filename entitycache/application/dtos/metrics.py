"""DTOs for load-count metrics (no dependency on a metrics backend)."""

from dataclasses import dataclass


@dataclass(frozen=True)
class IncrementLoadCountEvent:
    """Number of field values loaded for an entity type in one batch."""

    entity_class_name: str  # table name of the entity configuration
    field_value_count: int
