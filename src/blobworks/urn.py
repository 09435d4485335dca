"""Blob URNs.

Every stored blob is identified by a URN of the form:

    blob:<namespace>:<content-id>

- namespace: the connector that holds the bytes (memory, file, s3, ...)
- content-id: hex SHA-256 of the stored bytes, or the IPFS CID
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Final

from blobworks.errors import ValidationError

BLOB_URN_PREFIX: Final[str] = "blob"

_SEGMENT = re.compile(r"^[A-Za-z0-9][A-Za-z0-9\-._]*$")
_SPECIFIC = re.compile(r"^[A-Za-z0-9()+,\-.:=@;$_!*'%/?#]+$")


@dataclass(frozen=True)
class BlobUrn:
    """Parsed blob URN."""

    namespace: str
    content_id: str

    def __str__(self) -> str:
        return f"{BLOB_URN_PREFIX}:{self.namespace}:{self.content_id}"

    @classmethod
    def parse(cls, value: str, source: str = "BlobUrn") -> "BlobUrn":
        """Parse a URN string.

        Args:
            value: URN in blob:<namespace>:<content-id> form
            source: Name reported in the error when parsing fails

        Returns:
            The parsed URN

        Raises:
            ValidationError: If value is not a well-formed blob URN
        """
        if not is_valid(value):
            raise ValidationError(source, "urn", {"property": "id", "value": value})
        _, namespace, content_id = value.split(":", 2)
        return cls(namespace=namespace, content_id=content_id)


def is_valid(value: object) -> bool:
    """Check whether value is a well-formed blob URN."""
    if not isinstance(value, str):
        return False
    parts = value.split(":", 2)
    if len(parts) != 3 or parts[0] != BLOB_URN_PREFIX:
        return False
    return bool(_SEGMENT.match(parts[1])) and bool(_SPECIFIC.match(parts[2]))


def build(namespace: str, content_id: str) -> str:
    """Build the string form of a blob URN."""
    return str(BlobUrn(namespace=namespace, content_id=content_id))
