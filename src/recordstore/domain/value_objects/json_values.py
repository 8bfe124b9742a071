"""Semantics of the JSON-like values records are made of.

Records hold None, bool, int, float, str, lists and string-keyed mappings.
This module copies such values defensively, compares them strictly and
gives each one a hashable canonical key for index buckets.

Strict means booleans never equal numbers and None never equals an absent
field; 1 and 1.0 are the same number.
"""

from __future__ import annotations

import json
import math
from typing import Any, Hashable, Mapping

from recordstore.domain.exceptions import InvalidRecordError

MISSING: Any = object()
"""Sentinel for a field that is absent from a record."""

MAX_NESTING_DEPTH = 100
"""Deepest container nesting a record value may have."""


def copy_json_value(value: Any, path: str = "value") -> Any:
    """Deep-copy a JSON-like value, rejecting anything that is not one.

    Tuples become lists, mappings become dicts.

    Raises:
        InvalidRecordError: On non-string keys, non-finite floats, nesting
            deeper than MAX_NESTING_DEPTH or any other unsupported type.
    """
    return _copy(value, path, 0)


def _copy(value: Any, path: str, depth: int) -> Any:
    if value is None or isinstance(value, (bool, str, int)):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise InvalidRecordError(f"{path} is not a finite number")
        return value
    if depth >= MAX_NESTING_DEPTH and isinstance(value, (Mapping, list, tuple)):
        raise InvalidRecordError(f"{path} is nested deeper than {MAX_NESTING_DEPTH} levels")
    if isinstance(value, Mapping):
        copied = {}
        for key, item in value.items():
            if not isinstance(key, str):
                raise InvalidRecordError(f"{path} has non-string key {key!r}")
            copied[key] = _copy(item, f"{path}.{key}", depth + 1)
        return copied
    if isinstance(value, (list, tuple)):
        return [_copy(item, f"{path}[{i}]", depth + 1) for i, item in enumerate(value)]
    raise InvalidRecordError(f"{path} has unsupported type '{type(value).__name__}'")


def canonical_key(value: Any) -> Hashable:
    """Hashable, type-tagged form of a value.

    Two values share a canonical key exactly when `strict_equals` holds.
    """
    if value is None:
        return ("null",)
    if isinstance(value, bool):
        return ("boolean", value)
    if isinstance(value, (int, float)):
        return ("number", value)
    if isinstance(value, str):
        return ("string", value)
    return ("json", json.dumps(value, sort_keys=True, separators=(",", ":")))


def strict_equals(left: Any, right: Any) -> bool:
    """Type-strict equality; MISSING only equals MISSING."""
    if left is MISSING or right is MISSING:
        return left is right
    return canonical_key(left) == canonical_key(right)


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def coerce_to_string(value: Any) -> str | None:
    """String form used when testing a regex against a non-string value.

    Returns None for values with no meaningful string form (absent, None,
    lists, mappings).
    """
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else repr(value)
    return None


def encode_bucket_key(value: Any) -> str:
    """JSON text of an indexed value, used as a bucket key in snapshots."""
    return json.dumps(value, sort_keys=True, separators=(",", ":"))
