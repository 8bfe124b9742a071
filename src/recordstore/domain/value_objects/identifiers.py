"""Record identifiers and timestamps.

Ids are opaque strings. Each table owns a monotonically increasing
sequence that is embedded in every id it hands out, so an id can never be
reused within a table even after the record holding it is deleted.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import NewType

RecordId = NewType("RecordId", str)
"""Opaque, table-unique record identifier."""

ID_FIELD = "_id"
CREATED_AT_FIELD = "_createdAt"
UPDATED_AT_FIELD = "_updatedAt"

SYSTEM_FIELDS = frozenset({ID_FIELD, CREATED_AT_FIELD, UPDATED_AT_FIELD})
"""Fields set by the engine on every record."""

PROTECTED_FIELDS = frozenset({ID_FIELD, CREATED_AT_FIELD})
"""System fields callers may never overwrite through an update."""


def new_record_id(sequence: int) -> RecordId:
    """Build a record id from a table's id sequence number.

    Example:
        >>> new_record_id(7)  # doctest: +SKIP
        'id_3f2a9c01b_7'
    """
    return RecordId(f"id_{uuid.uuid4().hex[:9]}_{sequence}")


def utc_now() -> datetime:
    """Default clock: timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """Render a timestamp as ISO-8601 with millisecond precision."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")
