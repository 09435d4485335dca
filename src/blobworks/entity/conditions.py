"""Query conditions and pagination cursors for entity stores.

Conditions are conjunctive (AND-ed). A condition compares one property of a
record with a value using a ComparisonOperator.

Cursors are opaque base64url tokens encoding the offset of the next page.
"""

from __future__ import annotations

import base64
import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from blobworks.errors import ValidationError

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 1000


class ComparisonOperator(str, Enum):
    """Comparison applied by a condition."""

    EQUALS = "equals"
    NOT_EQUALS = "notEquals"
    GREATER_THAN = "greaterThan"
    GREATER_THAN_OR_EQUAL = "greaterThanOrEqual"
    LESS_THAN = "lessThan"
    LESS_THAN_OR_EQUAL = "lessThanOrEqual"
    INCLUDES = "includes"
    NOT_INCLUDES = "notIncludes"
    IN = "in"


@dataclass(frozen=True)
class Condition:
    """A single property comparison."""

    property: str
    value: Any
    comparison: ComparisonOperator = ComparisonOperator.EQUALS

    def matches(self, entity: Mapping[str, Any]) -> bool:
        """Evaluate the condition against an in-memory record."""
        actual = entity.get(self.property)
        op = self.comparison

        if op is ComparisonOperator.EQUALS:
            return bool(actual == self.value)
        if op is ComparisonOperator.NOT_EQUALS:
            return bool(actual != self.value)
        if op is ComparisonOperator.IN:
            return actual in (self.value or [])
        if op in (ComparisonOperator.INCLUDES, ComparisonOperator.NOT_INCLUDES):
            included = actual is not None and self.value in actual
            return included if op is ComparisonOperator.INCLUDES else not included

        if actual is None:
            return False
        try:
            if op is ComparisonOperator.GREATER_THAN:
                return bool(actual > self.value)
            if op is ComparisonOperator.GREATER_THAN_OR_EQUAL:
                return bool(actual >= self.value)
            if op is ComparisonOperator.LESS_THAN:
                return bool(actual < self.value)
            return bool(actual <= self.value)
        except TypeError:
            return False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Condition":
        """Build from {"property", "value", "comparison"?}.

        Raises:
            ValidationError: If the property is missing or the comparison unknown
        """
        prop = data.get("property")
        if not isinstance(prop, str) or not prop:
            raise ValidationError("Condition", "stringValue", {"property": "property"})
        try:
            comparison = ComparisonOperator(data.get("comparison", ComparisonOperator.EQUALS))
        except ValueError as exc:
            raise ValidationError(
                "Condition", "comparison", {"value": data.get("comparison")}, exc
            ) from exc
        return cls(property=prop, value=data.get("value"), comparison=comparison)


def match_all(entity: Mapping[str, Any], conditions: Iterable[Condition]) -> bool:
    return all(condition.matches(entity) for condition in conditions)


def encode_cursor(offset: int) -> str:
    """Encode the offset of the next page as an opaque cursor."""
    json_bytes = json.dumps({"offset": offset}).encode("utf-8")
    return base64.urlsafe_b64encode(json_bytes).decode("ascii").rstrip("=")


def decode_cursor(cursor: str | None) -> int:
    """Decode a cursor to an offset.

    Raises:
        ValidationError: If the cursor is not one produced by encode_cursor
    """
    if not cursor:
        return 0
    try:
        padded = cursor + "=" * ((4 - len(cursor) % 4) % 4)
        data = json.loads(base64.urlsafe_b64decode(padded.encode("ascii")))
        offset = int(data["offset"])
    except (ValueError, KeyError, TypeError) as exc:
        raise ValidationError("Cursor", "invalidCursor", {"cursor": cursor}, exc) from exc
    if offset < 0:
        raise ValidationError("Cursor", "invalidCursor", {"cursor": cursor})
    return offset


def clamp_page_size(page_size: int | None) -> int:
    if page_size is None:
        return DEFAULT_PAGE_SIZE
    return max(1, min(page_size, MAX_PAGE_SIZE))
