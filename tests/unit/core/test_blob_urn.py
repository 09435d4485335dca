"""Tests for blob URN parsing and building."""

import pytest

from blobworks import urn
from blobworks.errors import ValidationError
from blobworks.urn import BlobUrn


class TestBlobUrn:
    """Tests for BlobUrn.parse and build."""

    def test_build(self) -> None:
        """Build joins prefix, namespace and content id."""
        assert urn.build("memory", "abc123") == "blob:memory:abc123"

    def test_parse(self) -> None:
        """Parse splits namespace and content id."""
        parsed = BlobUrn.parse("blob:s3:0123abcd")

        assert parsed.namespace == "s3"
        assert parsed.content_id == "0123abcd"
        assert str(parsed) == "blob:s3:0123abcd"

    def test_content_id_may_contain_colons(self) -> None:
        """Only the first two colons separate segments."""
        parsed = BlobUrn.parse("blob:ipfs:Qm:extra")

        assert parsed.namespace == "ipfs"
        assert parsed.content_id == "Qm:extra"

    @pytest.mark.parametrize(
        "value",
        ["", "blob", "blob:memory", "urn:memory:abc", "blob::abc", "blob:memory:", 42, None],
    )
    def test_invalid_values(self, value: object) -> None:
        """Malformed values are rejected."""
        assert urn.is_valid(value) is False

    def test_parse_invalid_raises_validation_error(self) -> None:
        """Parse reports the failing value under the given source."""
        with pytest.raises(ValidationError) as exc_info:
            BlobUrn.parse("not-a-urn", source="MyConnector")

        assert exc_info.value.source == "MyConnector"
        assert exc_info.value.message == "urn"
        assert exc_info.value.properties["value"] == "not-a-urn"
