"""Entity storage for blob storage entries.

Provides the keyed record store the blob storage service persists its
metadata entries in:
- EntitySchema: explicit description of a record type
- Condition / cursors: conjunctive filters and opaque pagination
- MemoryEntityStorageConnector: in-process store
- SqlEntityStorageConnector: SQLAlchemy async store
"""

from blobworks.entity.base import EntityStorageConnector, QueryResult
from blobworks.entity.conditions import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    ComparisonOperator,
    Condition,
    decode_cursor,
    encode_cursor,
)
from blobworks.entity.memory import MemoryEntityStorageConnector
from blobworks.entity.schema import (
    EntityProperty,
    EntitySchema,
    PropertyType,
    SortDirection,
)

__all__ = [
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    "ComparisonOperator",
    "Condition",
    "EntityProperty",
    "EntitySchema",
    "EntityStorageConnector",
    "MemoryEntityStorageConnector",
    "PropertyType",
    "QueryResult",
    "SortDirection",
    "decode_cursor",
    "encode_cursor",
]
