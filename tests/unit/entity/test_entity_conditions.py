"""Tests for entity query conditions and cursors."""

import pytest

from blobworks.entity import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    ComparisonOperator,
    Condition,
    decode_cursor,
    encode_cursor,
)
from blobworks.entity.conditions import clamp_page_size, match_all
from blobworks.errors import ValidationError

RECORD = {"id": "blob:memory:a", "blob_size": 10, "encoding_format": "text/plain", "tags": ["x"]}


class TestCondition:
    """Tests for Condition.matches."""

    @pytest.mark.parametrize(
        ("condition", "expected"),
        [
            (Condition("blob_size", 10), True),
            (Condition("blob_size", 11), False),
            (Condition("blob_size", 11, ComparisonOperator.NOT_EQUALS), True),
            (Condition("blob_size", 5, ComparisonOperator.GREATER_THAN), True),
            (Condition("blob_size", 10, ComparisonOperator.GREATER_THAN_OR_EQUAL), True),
            (Condition("blob_size", 10, ComparisonOperator.LESS_THAN), False),
            (Condition("blob_size", 10, ComparisonOperator.LESS_THAN_OR_EQUAL), True),
            (Condition("encoding_format", "text", ComparisonOperator.INCLUDES), True),
            (Condition("encoding_format", "json", ComparisonOperator.NOT_INCLUDES), True),
            (Condition("tags", "x", ComparisonOperator.INCLUDES), True),
            (Condition("blob_size", [1, 10], ComparisonOperator.IN), True),
            (Condition("missing", 1, ComparisonOperator.GREATER_THAN), False),
            (Condition("missing", None), True),
        ],
    )
    def test_matches(self, condition: Condition, expected: bool) -> None:
        assert condition.matches(RECORD) is expected

    def test_incomparable_types(self) -> None:
        """Ordering comparisons across types do not match."""
        assert Condition("blob_size", "a", ComparisonOperator.LESS_THAN).matches(RECORD) is False

    def test_match_all(self) -> None:
        assert match_all(RECORD, [Condition("blob_size", 10), Condition("id", "blob:memory:a")])
        assert not match_all(RECORD, [Condition("blob_size", 10), Condition("id", "other")])

    def test_from_dict(self) -> None:
        condition = Condition.from_dict(
            {"property": "blob_size", "value": 3, "comparison": "greaterThan"}
        )

        assert condition == Condition("blob_size", 3, ComparisonOperator.GREATER_THAN)

    def test_from_dict_defaults_to_equals(self) -> None:
        assert Condition.from_dict({"property": "id", "value": "x"}).comparison == (
            ComparisonOperator.EQUALS
        )

    @pytest.mark.parametrize(
        "data",
        [{"value": 1}, {"property": "", "value": 1}, {"property": "a", "comparison": "like"}],
    )
    def test_from_dict_invalid(self, data: dict) -> None:
        with pytest.raises(ValidationError):
            Condition.from_dict(data)


class TestCursor:
    """Tests for cursor encoding and page size clamping."""

    def test_roundtrip(self) -> None:
        assert decode_cursor(encode_cursor(40)) == 40

    def test_empty_cursor(self) -> None:
        assert decode_cursor(None) == 0
        assert decode_cursor("") == 0

    @pytest.mark.parametrize("cursor", ["!!!", "bm90LWpzb24", encode_cursor(-5)])
    def test_invalid_cursor(self, cursor: str) -> None:
        with pytest.raises(ValidationError) as exc_info:
            decode_cursor(cursor)
        assert exc_info.value.message == "invalidCursor"

    def test_clamp_page_size(self) -> None:
        assert clamp_page_size(None) == DEFAULT_PAGE_SIZE
        assert clamp_page_size(0) == 1
        assert clamp_page_size(MAX_PAGE_SIZE + 1) == MAX_PAGE_SIZE
        assert clamp_page_size(5) == 5
