"""Record construction and merging.

A record is a plain dict of JSON-like values plus three system fields:

    {
        "name": "Jane",
        "age": 25,
        "_id": "id_3f2a9c01b_2",
        "_createdAt": "2024-05-01T09:30:00.000Z",
        "_updatedAt": "2024-05-01T09:30:00.000Z",
    }

Records enter the store only through these helpers, which deep-copy the
caller's data so later mutation of the caller's objects cannot reach
stored state.
"""

from __future__ import annotations

from typing import Any, Mapping

from recordstore.domain.exceptions import InvalidRecordError
from recordstore.domain.value_objects import (
    CREATED_AT_FIELD,
    ID_FIELD,
    PROTECTED_FIELDS,
    UPDATED_AT_FIELD,
    RecordId,
    copy_json_value,
)

Record = dict[str, Any]


def copy_record_data(data: Any) -> Record:
    """Deep-copy caller-supplied record fields.

    Raises:
        InvalidRecordError: If data is not a mapping of JSON-like values.
    """
    if not isinstance(data, Mapping):
        raise InvalidRecordError("Record must be a mapping of field names to values")
    return copy_json_value(data, "record")


def stamp_new_record(data: Record, record_id: RecordId, timestamp: str) -> Record:
    """Attach id and timestamps to freshly copied record data (in place)."""
    data[ID_FIELD] = record_id
    data[CREATED_AT_FIELD] = timestamp
    data[UPDATED_AT_FIELD] = timestamp
    return data


def merge_update(existing: Mapping[str, Any], changes: Any, timestamp: str) -> Record:
    """Merge partial fields into a copy of an existing record.

    `_id` and `_createdAt` in changes are ignored; `_updatedAt` is always
    set to timestamp.

    Raises:
        InvalidRecordError: If changes is not a mapping of JSON-like values.
    """
    if not isinstance(changes, Mapping):
        raise InvalidRecordError("Update must be a mapping of field names to values")

    merged = copy_json_value(existing, "record")
    for key, value in copy_json_value(changes, "update").items():
        if key in PROTECTED_FIELDS:
            continue
        merged[key] = value
    merged[UPDATED_AT_FIELD] = timestamp
    return merged
