"""Entity storage connector interface.

Generic keyed record store with conjunctive conditions, sorting and cursor
pagination. Records are plain dictionaries whose keys are the schema's
property names.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from blobworks.entity.conditions import Condition
from blobworks.entity.schema import EntitySchema, PropertyType, SortDirection
from blobworks.errors import ValidationError


@dataclass
class QueryResult:
    """One page of query results."""

    entities: list[dict[str, Any]] = field(default_factory=list)
    cursor: str | None = None


class EntityStorageConnector(ABC):
    """Abstract base class for entity stores."""

    def __init__(self, schema: EntitySchema) -> None:
        self.schema = schema

    async def bootstrap(self) -> bool:
        """Prepare storage (e.g. create tables)."""
        return True

    async def close(self) -> None:
        return None

    def _resolve_sort(
        self, sort: list[tuple[str, SortDirection]] | None
    ) -> list[tuple[str, SortDirection]]:
        """Sort keys to apply, rejecting unknown and object properties."""
        resolved = sort or self.schema.default_sort()
        for name, _ in resolved:
            prop = self.schema.get_property(name)
            if prop is None or prop.type is PropertyType.OBJECT:
                raise ValidationError(type(self).__name__, "sortUnsupported", {"property": name})
        return resolved

    @abstractmethod
    async def set(self, entity: dict[str, Any]) -> None:
        """Insert or replace a record keyed by the schema's primary keys."""
        ...

    @abstractmethod
    async def get(
        self, id: str, conditions: list[Condition] | None = None
    ) -> dict[str, Any] | None:
        """Get the first record with the given id that matches conditions."""
        ...

    @abstractmethod
    async def remove(self, id: str, conditions: list[Condition] | None = None) -> bool:
        """Remove records with the given id that match conditions.

        Returns:
            True if at least one record was removed
        """
        ...

    @abstractmethod
    async def query(
        self,
        conditions: list[Condition] | None = None,
        sort: list[tuple[str, SortDirection]] | None = None,
        cursor: str | None = None,
        page_size: int | None = None,
    ) -> QueryResult:
        """Query records.

        Args:
            conditions: Conjunctive filters
            sort: (property, direction) pairs; defaults to the schema's sort
            cursor: Cursor from a previous page
            page_size: Maximum records to return

        Returns:
            The page and a cursor for the next page, if any
        """
        ...
