"""In-memory entity store."""

from __future__ import annotations

import copy
from typing import Any

from blobworks.entity.base import EntityStorageConnector, QueryResult
from blobworks.entity.conditions import (
    Condition,
    clamp_page_size,
    decode_cursor,
    encode_cursor,
    match_all,
)
from blobworks.entity.schema import EntitySchema, SortDirection


class MemoryEntityStorageConnector(EntityStorageConnector):
    """Dictionary-backed entity store keyed by the schema's primary keys."""

    def __init__(self, schema: EntitySchema) -> None:
        super().__init__(schema)
        self._store: dict[tuple[Any, ...], dict[str, Any]] = {}

    async def set(self, entity: dict[str, Any]) -> None:
        self._store[self.schema.key_of(entity)] = copy.deepcopy(entity)

    async def get(
        self, id: str, conditions: list[Condition] | None = None
    ) -> dict[str, Any] | None:
        for entity in self._store.values():
            if entity.get("id") == id and match_all(entity, conditions or []):
                return copy.deepcopy(entity)
        return None

    async def remove(self, id: str, conditions: list[Condition] | None = None) -> bool:
        keys = [
            key
            for key, entity in self._store.items()
            if entity.get("id") == id and match_all(entity, conditions or [])
        ]
        for key in keys:
            del self._store[key]
        return bool(keys)

    async def query(
        self,
        conditions: list[Condition] | None = None,
        sort: list[tuple[str, SortDirection]] | None = None,
        cursor: str | None = None,
        page_size: int | None = None,
    ) -> QueryResult:
        matched = [e for e in self._store.values() if match_all(e, conditions or [])]

        # Apply sort keys last to first so the first key dominates
        for name, direction in reversed(self._resolve_sort(sort)):
            present = [e for e in matched if e.get(name) is not None]
            missing = [e for e in matched if e.get(name) is None]
            present.sort(key=lambda e: e[name], reverse=direction is SortDirection.DESCENDING)
            matched = present + missing

        offset = decode_cursor(cursor)
        size = clamp_page_size(page_size)
        page = matched[offset : offset + size]
        next_cursor = encode_cursor(offset + size) if offset + size < len(matched) else None

        return QueryResult(entities=[copy.deepcopy(e) for e in page], cursor=next_cursor)

    def get_store(self) -> list[dict[str, Any]]:
        """Snapshot of every stored record (for inspection in tests)."""
        return [copy.deepcopy(e) for e in self._store.values()]
