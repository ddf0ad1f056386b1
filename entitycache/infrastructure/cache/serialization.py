"""Field transformers for JSON cache backends.

Records are written to Redis as JSON objects. Fields that JSON cannot
represent (datetimes, bytes, UUIDs, decimals) are converted on write and
restored on read according to the entity configuration's field_types. None
passes through unchanged in both directions. A record that still cannot be
encoded or decoded raises CacheAdapterTransientError, so callers treat it
like any other cache failure.
"""

from __future__ import annotations

import base64
import json
import uuid
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any

from entitycache.domain.entities import EntityConfiguration
from entitycache.domain.enums import FieldType
from entitycache.domain.exceptions import CacheAdapterTransientError


@dataclass(frozen=True)
class FieldTransformer:
    """Write/read pair applied to one field type."""

    write: Callable[[Any], Any]
    read: Callable[[Any], Any]


FieldTransformerMap = Mapping[FieldType, FieldTransformer]


def _write_datetime(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _read_datetime(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else value


def _write_bytes(value: bytes | None) -> str | None:
    return base64.b64encode(value).decode("ascii") if value is not None else None


def _read_bytes(value: str | None) -> bytes | None:
    return base64.b64decode(value) if value is not None else None


def _write_uuid(value: uuid.UUID | None) -> str | None:
    return str(value) if value is not None else None


def _read_uuid(value: str | None) -> uuid.UUID | None:
    return uuid.UUID(value) if value else value


# Decimals travel as strings; a JSON number would lose precision.
def _write_decimal(value: Decimal | None) -> str | None:
    return str(value) if value is not None else None


def _read_decimal(value: str | None) -> Decimal | None:
    return Decimal(value) if value is not None else None


REDIS_TRANSFORMER_MAP: FieldTransformerMap = {
    FieldType.DATETIME: FieldTransformer(write=_write_datetime, read=_read_datetime),
    FieldType.BYTES: FieldTransformer(write=_write_bytes, read=_read_bytes),
    FieldType.UUID: FieldTransformer(write=_write_uuid, read=_read_uuid),
    FieldType.DECIMAL: FieldTransformer(write=_write_decimal, read=_read_decimal),
}


def transform_fields_to_cache_object(
    entity_configuration: EntityConfiguration,
    transformer_map: FieldTransformerMap,
    fields: Mapping[str, Any],
) -> dict[str, Any]:
    """Apply write transformers to every field that has one."""
    cache_object: dict[str, Any] = {}
    for name, value in fields.items():
        transformer = transformer_map.get(entity_configuration.field_type_for(name))
        cache_object[name] = transformer.write(value) if transformer else value
    return cache_object


def transform_cache_object_to_fields(
    entity_configuration: EntityConfiguration,
    transformer_map: FieldTransformerMap,
    cache_object: Mapping[str, Any],
) -> dict[str, Any]:
    """Apply read transformers to every field that has one."""
    fields: dict[str, Any] = {}
    for name, value in cache_object.items():
        transformer = transformer_map.get(entity_configuration.field_type_for(name))
        fields[name] = transformer.read(value) if transformer else value
    return fields


def serialize_record(
    entity_configuration: EntityConfiguration,
    transformer_map: FieldTransformerMap,
    fields: Mapping[str, Any],
) -> str:
    """Serialize a record to a JSON string (always a non-empty object literal).

    Raises:
        CacheAdapterTransientError: A field value has no JSON form.
    """
    try:
        return json.dumps(
            transform_fields_to_cache_object(entity_configuration, transformer_map, fields)
        )
    except (TypeError, ValueError) as e:
        raise CacheAdapterTransientError(
            f"Record for {entity_configuration.table_name} is not serializable: {e}",
            details={"table": entity_configuration.table_name},
        ) from e


def deserialize_record(
    entity_configuration: EntityConfiguration,
    transformer_map: FieldTransformerMap,
    raw: str | bytes,
) -> dict[str, Any]:
    """Deserialize a JSON string written by serialize_record.

    Raises:
        CacheAdapterTransientError: The stored value is not a readable record.
    """
    try:
        return transform_cache_object_to_fields(
            entity_configuration, transformer_map, json.loads(raw)
        )
    except (TypeError, ValueError, AttributeError) as e:
        raise CacheAdapterTransientError(
            f"Cached record for {entity_configuration.table_name} is unreadable: {e}",
            details={"table": entity_configuration.table_name},
        ) from e
