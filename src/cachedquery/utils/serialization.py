"""Canonical serialization helpers for cache key generation."""

import json
from typing import Any


def canonical_json(value: Any) -> str:
    """Serialize a value to JSON with a stable layout.

    Keys are sorted at every nesting level and separators carry no
    whitespace, so two mappings with the same contents produce the same
    string whatever their insertion order.

    Args:
        value: Any JSON-serializable value. Unknown types fall back to str().

    Returns:
        The canonical JSON string. None serializes as ``{}`` so that
        "no filters" and "empty filters" share a key.
    """
    if value is None:
        return "{}"
    return json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)


def approximate_size(value: Any) -> int:
    """Rough size of a cached value in characters of its JSON form."""
    try:
        return len(json.dumps(value, default=str))
    except (TypeError, ValueError):
        # Circular structures and keys json cannot encode
        return len(repr(value))
