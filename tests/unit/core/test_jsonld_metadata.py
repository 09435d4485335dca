"""Tests for structural JSON-LD validation and context merging."""

import pytest

from blobworks import jsonld
from blobworks.errors import ValidationError


class TestValidateNode:
    """Tests for jsonld.validate_node."""

    def test_valid_node(self) -> None:
        """A typical schema.org node passes."""
        jsonld.validate_node(
            {
                "@context": "https://schema.org",
                "@type": "DigitalDocument",
                "@id": "urn:doc:1",
                "name": "Report",
                "author": {"@type": "Person", "name": "A"},
                "keywords": [{"@value": "x", "@language": "en"}],
            },
            "Svc",
        )

    def test_context_list_with_objects(self) -> None:
        jsonld.validate_node(
            {"@context": ["https://schema.org", {"ex": "https://example.org/"}], "ex:a": 1},
            "Svc",
        )

    @pytest.mark.parametrize("metadata", ["text", 1, ["a"], None])
    def test_non_object_rejected(self, metadata: object) -> None:
        with pytest.raises(ValidationError) as exc_info:
            jsonld.validate_node(metadata, "Svc")

        assert exc_info.value.message == "metadata"
        assert exc_info.value.properties == {"failures": ["metadata"]}

    def test_failures_listed(self) -> None:
        """Every failing property is reported with its path."""
        with pytest.raises(ValidationError) as exc_info:
            jsonld.validate_node(
                {
                    "@context": 5,
                    "@id": 7,
                    "@type": ["Thing", 3],
                    "@unknown": "x",
                    "nested": {"@id": False},
                },
                "Svc",
            )

        assert exc_info.value.source == "Svc"
        assert exc_info.value.properties["failures"] == [
            "@context",
            "@id",
            "@type",
            "@unknown",
            "nested.@id",
        ]


class TestContexts:
    """Tests for contexts_of and merge_contexts."""

    def test_contexts_of(self) -> None:
        assert jsonld.contexts_of({"@context": "https://schema.org"}) == ["https://schema.org"]
        assert jsonld.contexts_of({"@context": ["a", "b"]}) == ["a", "b"]
        assert jsonld.contexts_of({"name": "x"}) == []
        assert jsonld.contexts_of(None) == []

    def test_merge_keeps_first_occurrence(self) -> None:
        merged = jsonld.merge_contexts(
            [jsonld.CONTEXT_ROOT, jsonld.CONTEXT_ROOT_COMMON],
            ["https://schema.org", jsonld.CONTEXT_ROOT],
            ["https://schema.org", None],
        )

        assert merged == [jsonld.CONTEXT_ROOT, jsonld.CONTEXT_ROOT_COMMON, "https://schema.org"]
