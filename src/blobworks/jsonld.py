"""Structural JSON-LD handling for entry metadata.

Metadata is validated as a JSON-LD node object without fetching remote
contexts:
- the node must be a JSON object
- "@context", when present, is a string, an object, or a list of them
- "@id" is a string and "@type" is a string or list of strings
- other "@"-prefixed keys must be JSON-LD keywords

Contexts from several nodes are merged into one deduplicated list for
response envelopes.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from blobworks.errors import ValidationError

CONTEXT_ROOT = "https://schema.twindev.org/blob-storage/"
CONTEXT_ROOT_COMMON = "https://schema.twindev.org/common/"

TYPE_ENTRY = "BlobStorageEntry"
TYPE_ENTRY_LIST = "BlobStorageEntryList"

JSON_LD_MEDIA_TYPE = "application/ld+json"

KEYWORDS = frozenset(
    {
        "@base",
        "@container",
        "@context",
        "@direction",
        "@graph",
        "@id",
        "@import",
        "@included",
        "@index",
        "@json",
        "@language",
        "@list",
        "@nest",
        "@none",
        "@prefix",
        "@propagate",
        "@protected",
        "@reverse",
        "@set",
        "@type",
        "@value",
        "@version",
        "@vocab",
    }
)


def _context_failures(context: Any) -> list[str]:
    items = context if isinstance(context, list) else [context]
    failures = []
    for item in items:
        if item is not None and not isinstance(item, (str, dict)):
            failures.append("@context")
    return failures


def _node_failures(node: Any, path: str) -> list[str]:
    if not isinstance(node, dict):
        return [path or "metadata"]

    failures: list[str] = []
    for key, value in node.items():
        key_path = f"{path}.{key}" if path else key
        if key == "@context":
            failures.extend(_context_failures(value))
        elif key == "@id":
            if not isinstance(value, str):
                failures.append(key_path)
        elif key == "@type":
            values = value if isinstance(value, list) else [value]
            if not all(isinstance(v, str) for v in values):
                failures.append(key_path)
        elif key.startswith("@"):
            if key not in KEYWORDS:
                failures.append(key_path)
        elif isinstance(value, dict):
            failures.extend(_node_failures(value, key_path))
        elif isinstance(value, list):
            for index, item in enumerate(value):
                if isinstance(item, dict):
                    failures.extend(_node_failures(item, f"{key_path}[{index}]"))
    return failures


def validate_node(metadata: Any, source: str) -> None:
    """Validate metadata as a JSON-LD node object.

    Raises:
        ValidationError: Listing the failing properties
    """
    failures = _node_failures(metadata, "")
    if failures:
        raise ValidationError(source, "metadata", {"failures": failures})


def contexts_of(node: dict[str, Any] | None) -> list[Any]:
    """The contexts declared by a node, as a list."""
    if not isinstance(node, dict) or node.get("@context") is None:
        return []
    context = node["@context"]
    return list(context) if isinstance(context, list) else [context]


def merge_contexts(*contexts: Iterable[Any]) -> list[Any]:
    """Concatenate context lists, keeping the first occurrence of each."""
    merged: list[Any] = []
    for group in contexts:
        for item in group:
            if item is not None and item not in merged:
                merged.append(item)
    return merged
