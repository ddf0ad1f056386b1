"""System-of-record loader: batched lookups by one field, keyed by field value."""

from collections.abc import Mapping, Sequence
from typing import Any, Protocol

from sqlalchemy import column, select, table
from sqlalchemy.ext.asyncio import AsyncSession

from entitycache.domain.entities import EntityConfiguration
from entitycache.infrastructure.persistence.errors import wrap_native_postgres_call


class EntityDatabaseLoader[TFields: Mapping[str, Any]](Protocol):
    """Loads records for many values of one field in a single query."""

    async def fetch_many_where(
        self, field_name: str, field_values: Sequence[Any]
    ) -> dict[Any, list[TFields]]:
        """Return every matching record, grouped by the requested field value.

        Values with no row are omitted (not mapped to an empty list).
        """
        ...


class PostgresEntityDatabaseAdapter:
    """EntityDatabaseLoader over SQLAlchemy Core for one configured table.

    Builds a lightweight table clause from the entity configuration, so no
    ORM model is needed. Records come back keyed by entity field name.
    """

    def __init__(
        self, db: AsyncSession, entity_configuration: EntityConfiguration
    ) -> None:
        self.db = db
        self.entity_configuration = entity_configuration
        self._table = table(
            entity_configuration.table_name,
            *(column(name) for name in entity_configuration.entity_to_db_fields.values()),
        )

    async def fetch_many_where(
        self, field_name: str, field_values: Sequence[Any]
    ) -> dict[Any, list[dict[str, Any]]]:
        """Select rows where field_name IN field_values and group them by that value.

        Raises:
            ValueError: field_name has no column mapping.
            EntityDatabaseAdapterError: Translated database failure.
        """
        column_name = self.entity_configuration.column_for(field_name)
        if not field_values:
            return {}
        unique_values = list(dict.fromkeys(field_values))
        stmt = select(self._table).where(self._table.c[column_name].in_(unique_values))

        async def _execute() -> list[Mapping[str, Any]]:
            result = await self.db.execute(stmt)
            return list(result.mappings().all())

        rows = await wrap_native_postgres_call(_execute)
        db_to_entity = self.entity_configuration.db_to_entity_fields
        # Drivers return the column's native type (e.g. uuid.UUID for a str
        # lookup); group under the requested value it matched, compared as
        # str like cache keys are.
        requested = {str(value): value for value in unique_values}
        grouped: dict[Any, list[dict[str, Any]]] = {}
        for row in rows:
            record = {db_to_entity[key]: value for key, value in row.items() if key in db_to_entity}
            returned = record[field_name]
            grouped.setdefault(requested.get(str(returned), returned), []).append(record)
        return grouped
