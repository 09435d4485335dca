"""SQL entity store.

Builds a SQLAlchemy table from an EntitySchema and stores records through an
async engine:
- object properties: JSON column (JSONB on PostgreSQL)
- date-time strings: ISO-8601 text, which sorts chronologically
- optional primary key parts: stored as "" so the composite key stays non-null
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    Column,
    ColumnElement,
    Float,
    MetaData,
    String,
    Table,
    Text,
    and_,
    delete,
    insert,
    select,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.types import TypeEngine

from blobworks.entity.base import EntityStorageConnector, QueryResult
from blobworks.entity.conditions import (
    ComparisonOperator,
    Condition,
    clamp_page_size,
    decode_cursor,
    encode_cursor,
)
from blobworks.entity.schema import EntityProperty, EntitySchema, PropertyType, SortDirection
from blobworks.errors import ValidationError

logger = logging.getLogger(__name__)


def _column_type(prop: EntityProperty) -> TypeEngine[Any]:
    if prop.type is PropertyType.OBJECT:
        return JSON().with_variant(JSONB(), "postgresql")
    if prop.type is PropertyType.INTEGER:
        return BigInteger()
    if prop.type is PropertyType.NUMBER:
        return Float()
    if prop.type is PropertyType.BOOLEAN:
        return Boolean()
    if prop.is_primary or prop.format == "date-time":
        return String(512)
    return Text()


def build_table(schema: EntitySchema, metadata: MetaData, table_name: str | None = None) -> Table:
    """Build a table definition for an entity schema."""
    columns = [
        Column(
            prop.name,
            _column_type(prop),
            primary_key=prop.is_primary,
            nullable=not prop.is_primary and prop.optional,
            index=prop.sort_direction is not None,
        )
        for prop in schema.properties
    ]
    return Table(table_name or schema.type, metadata, *columns)


class SqlEntityStorageConnector(EntityStorageConnector):
    """Entity store backed by a relational database."""

    def __init__(
        self,
        schema: EntitySchema,
        engine: AsyncEngine,
        table_name: str | None = None,
    ) -> None:
        super().__init__(schema)
        self.engine = engine
        self.metadata = MetaData()
        self.table = build_table(schema, self.metadata, table_name)

    async def bootstrap(self) -> bool:
        """Create the table if it does not exist."""
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(self.metadata.create_all)
        except Exception:
            logger.exception(f"Failed to create table {self.table.name}")
            return False
        logger.info(f"Entity table ready: {self.table.name}")
        return True

    async def close(self) -> None:
        await self.engine.dispose()

    def _to_row(self, entity: dict[str, Any]) -> dict[str, Any]:
        row: dict[str, Any] = {}
        for prop in self.schema.properties:
            value = entity.get(prop.name)
            if prop.is_primary and value is None:
                value = ""
            row[prop.name] = value
        return row

    def _from_row(self, row: Any) -> dict[str, Any]:
        entity: dict[str, Any] = {}
        mapping = row._mapping
        for prop in self.schema.properties:
            value = mapping[prop.name]
            if prop.is_primary and prop.optional and value == "":
                value = None
            entity[prop.name] = value
        return entity

    def _key_clause(self, entity: dict[str, Any]) -> ColumnElement[bool]:
        row = self._to_row(entity)
        return and_(*(self.table.c[name] == row[name] for name in self.schema.primary_keys))

    def _condition_clause(self, condition: Condition) -> ColumnElement[bool]:
        prop = self.schema.get_property(condition.property)
        if prop is None or prop.type is PropertyType.OBJECT:
            raise ValidationError(
                type(self).__name__, "conditionUnsupported", {"property": condition.property}
            )

        column = self.table.c[prop.name]
        value = condition.value
        if prop.is_primary and value is None:
            value = ""
        op = condition.comparison

        if op is ComparisonOperator.EQUALS:
            return column.is_(None) if value is None else column == value
        if op is ComparisonOperator.NOT_EQUALS:
            return column.is_not(None) if value is None else column != value
        if op is ComparisonOperator.GREATER_THAN:
            return column > value
        if op is ComparisonOperator.GREATER_THAN_OR_EQUAL:
            return column >= value
        if op is ComparisonOperator.LESS_THAN:
            return column < value
        if op is ComparisonOperator.LESS_THAN_OR_EQUAL:
            return column <= value
        if op is ComparisonOperator.INCLUDES:
            return column.contains(value, autoescape=True)
        if op is ComparisonOperator.NOT_INCLUDES:
            return ~column.contains(value, autoescape=True)
        return column.in_(list(value or []))

    def _where(self, id: str | None, conditions: list[Condition] | None) -> list[Any]:
        clauses = [self._condition_clause(c) for c in conditions or []]
        if id is not None:
            clauses.insert(0, self.table.c.id == id)
        return clauses

    async def set(self, entity: dict[str, Any]) -> None:
        async with self.engine.begin() as conn:
            await conn.execute(delete(self.table).where(self._key_clause(entity)))
            await conn.execute(insert(self.table).values(**self._to_row(entity)))

    async def get(
        self, id: str, conditions: list[Condition] | None = None
    ) -> dict[str, Any] | None:
        stmt = select(self.table).where(*self._where(id, conditions)).limit(1)
        async with self.engine.connect() as conn:
            result = await conn.execute(stmt)
            row = result.first()
        return self._from_row(row) if row is not None else None

    async def remove(self, id: str, conditions: list[Condition] | None = None) -> bool:
        async with self.engine.begin() as conn:
            result = await conn.execute(delete(self.table).where(*self._where(id, conditions)))
        return bool(result.rowcount)

    async def query(
        self,
        conditions: list[Condition] | None = None,
        sort: list[tuple[str, SortDirection]] | None = None,
        cursor: str | None = None,
        page_size: int | None = None,
    ) -> QueryResult:
        offset = decode_cursor(cursor)
        size = clamp_page_size(page_size)

        order_by = []
        for name, direction in self._resolve_sort(sort):
            column = self.table.c[name]
            ordered = column.desc() if direction is SortDirection.DESCENDING else column.asc()
            order_by.append(ordered.nulls_last())

        stmt = (
            select(self.table)
            .where(*self._where(None, conditions))
            .order_by(*order_by)
            .offset(offset)
            .limit(size + 1)
        )
        async with self.engine.connect() as conn:
            rows = (await conn.execute(stmt)).all()

        has_more = len(rows) > size
        entities = [self._from_row(row) for row in rows[:size]]
        return QueryResult(
            entities=entities,
            cursor=encode_cursor(offset + size) if has_more else None,
        )
