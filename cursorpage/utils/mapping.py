"""Helpers for the nested mappings carried inside cursors."""

import json
from collections.abc import Mapping
from typing import Any


def deep_merge(base: Mapping[str, Any], other: Mapping[str, Any]) -> dict[str, Any]:
    """
    Recursively merge ``other`` into a copy of ``base``.

    Nested mappings are merged key by key; any other value in ``other``
    (lists included) replaces the value in ``base``.
    """
    merged = dict(base)
    for key, value in other.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def stringify_keys(value: Any) -> Any:
    """Convert every mapping key in a nested structure to ``str``."""
    if isinstance(value, Mapping):
        return {str(k): stringify_keys(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [stringify_keys(v) for v in value]
    return value


def fingerprint(value: Any) -> str:
    """Order-preserving JSON form used to compare query/sort states."""
    return json.dumps(value, default=str)
