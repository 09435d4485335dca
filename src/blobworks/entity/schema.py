"""Explicit entity schema descriptions.

An EntitySchema lists the properties of a stored record, which of them form
the primary key, and which carry a default sort direction. Stores use it to
key records, default their ordering, and (for SQL) build tables.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class SortDirection(str, Enum):
    """Sort direction for queries."""

    ASCENDING = "asc"
    DESCENDING = "desc"


class PropertyType(str, Enum):
    """Storage type of an entity property."""

    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    OBJECT = "object"


@dataclass(frozen=True)
class EntityProperty:
    """One property of an entity schema."""

    name: str
    type: PropertyType
    is_primary: bool = False
    optional: bool = True
    format: str | None = None
    sort_direction: SortDirection | None = None


@dataclass(frozen=True)
class EntitySchema:
    """Schema of an entity type."""

    type: str
    properties: tuple[EntityProperty, ...] = field(default_factory=tuple)

    @property
    def primary_keys(self) -> tuple[str, ...]:
        return tuple(p.name for p in self.properties if p.is_primary)

    @property
    def property_names(self) -> tuple[str, ...]:
        return tuple(p.name for p in self.properties)

    def get_property(self, name: str) -> EntityProperty | None:
        for prop in self.properties:
            if prop.name == name:
                return prop
        return None

    def default_sort(self) -> list[tuple[str, SortDirection]]:
        """Properties carrying a sort direction, in declaration order."""
        return [
            (p.name, p.sort_direction) for p in self.properties if p.sort_direction is not None
        ]

    def key_of(self, entity: dict[str, object]) -> tuple[object, ...]:
        return tuple(entity.get(name) for name in self.primary_keys)
