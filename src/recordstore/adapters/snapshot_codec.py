"""JSON snapshot codec.

The snapshot is the export/import wire format and also what gets handed to
the snapshot store. It is a single JSON document:

    {
        "name": "tinyDB",
        "tables": {
            "users": {
                "name": "users",
                "schema": {"name": {"type": "string", "required": true}},
                "records": [{"name": "Ada", "_id": "...", "_createdAt": "...", "_updatedAt": "..."}],
                "indices": {"name": {"\"Ada\"": ["..."]}},
                "lastId": 1
            }
        },
        "transactionLog": [{"timestamp": "...", "changes": {"users": {...}}}]
    }

Index buckets are exported for readability; on import indexes are rebuilt
from the records for every field listed under "indices", so they are
consistent with the records by construction.

The document shape is checked with pydantic models; decoding never
touches live state, so a malformed snapshot can be rejected before
anything is discarded.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from recordstore.domain.entities import Table, TransactionLogEntry
from recordstore.domain.exceptions import (
    InvalidRecordError,
    SchemaDefinitionError,
    SnapshotFormatError,
)
from recordstore.domain.value_objects import ID_FIELD, Schema, copy_json_value


class TableSnapshot(BaseModel):
    """Wire model for one table."""

    model_config = ConfigDict(populate_by_name=True)

    name: str | None = None
    schema_definition: dict[str, dict[str, Any]] | None = Field(default=None, alias="schema")
    records: list[dict[str, Any]] = Field(default_factory=list)
    indices: dict[str, dict[str, list[str]]] = Field(default_factory=dict)
    last_id: int = Field(default=0, ge=0, alias="lastId")


class LogEntrySnapshot(BaseModel):
    """Wire model for one transaction log entry."""

    timestamp: str
    changes: dict[str, Any] = Field(default_factory=dict)


class DatabaseSnapshot(BaseModel):
    """Wire model for the whole database."""

    model_config = ConfigDict(populate_by_name=True)

    name: str | None = None
    tables: dict[str, TableSnapshot] = Field(default_factory=dict)
    transaction_log: list[LogEntrySnapshot] = Field(default_factory=list, alias="transactionLog")


@dataclass
class DecodedSnapshot:
    """Live objects rebuilt from a snapshot, ready to replace database state."""

    name: str | None
    tables: dict[str, Table] = field(default_factory=dict)
    transaction_log: list[TransactionLogEntry] = field(default_factory=list)


def encode_snapshot(
    name: str,
    tables: Mapping[str, Table],
    transaction_log: Sequence[TransactionLogEntry],
) -> str:
    """Serialize database state to snapshot JSON."""
    snapshot = DatabaseSnapshot(
        name=name,
        tables={table_name: _encode_table(table) for table_name, table in tables.items()},
        transaction_log=[
            LogEntrySnapshot(**entry.to_dict()) for entry in transaction_log
        ],
    )
    return snapshot.model_dump_json(by_alias=True)


def _encode_table(table: Table) -> TableSnapshot:
    return TableSnapshot(
        name=table.name,
        schema_definition=table.schema.to_dict() if table.schema is not None else None,
        records=[copy_json_value(record) for record in table.records],
        indices=table.indexes.to_dict(),
        last_id=table.last_id,
    )


def decode_snapshot(text: str | bytes) -> DecodedSnapshot:
    """Parse snapshot JSON into live tables and log entries.

    Raises:
        SnapshotFormatError: With the parse or validation diagnostic.
    """
    try:
        snapshot = DatabaseSnapshot.model_validate_json(text)
    except ValidationError as e:
        raise SnapshotFormatError(f"Invalid JSON data: {e}") from e

    tables = {
        table_name: _decode_table(table_name, table_snapshot)
        for table_name, table_snapshot in snapshot.tables.items()
    }
    log = [
        TransactionLogEntry(timestamp=entry.timestamp, changes=entry.changes)
        for entry in snapshot.transaction_log
    ]
    return DecodedSnapshot(name=snapshot.name, tables=tables, transaction_log=log)


def _decode_table(table_name: str, snapshot: TableSnapshot) -> Table:
    try:
        schema = (
            Schema.from_dict(snapshot.schema_definition)
            if snapshot.schema_definition is not None
            else None
        )
    except SchemaDefinitionError as e:
        raise SnapshotFormatError(f"Table '{table_name}': {e}") from e

    records = []
    seen_ids: set[str] = set()
    for position, raw in enumerate(snapshot.records):
        try:
            record = copy_json_value(raw, "record")
        except InvalidRecordError as e:
            raise SnapshotFormatError(f"Table '{table_name}' record {position}: {e}") from e

        record_id = record.get(ID_FIELD)
        if not isinstance(record_id, str):
            raise SnapshotFormatError(
                f"Table '{table_name}' record {position} has no string '{ID_FIELD}'"
            )
        if record_id in seen_ids:
            raise SnapshotFormatError(
                f"Table '{table_name}' has duplicate record id '{record_id}'"
            )
        seen_ids.add(record_id)
        records.append(record)

    return Table(
        table_name,
        schema,
        records=records,
        indexed_fields=list(snapshot.indices),
        last_id=snapshot.last_id,
    )
