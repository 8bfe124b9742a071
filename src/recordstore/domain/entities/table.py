"""Table entity: an ordered collection of records with a schema and indexes.

Records are kept in insertion order, which is the default scan order.
Lookups by id are linear; tables are expected to stay small.

Mutations come in two phases so the transaction buffer can reuse them:
    - prepare_insert / prepare_update validate and build the new record
      without touching the table;
    - append / replace_at / remove_at store the change and keep indexes
      in step.
insert / update / delete combine both phases for direct application.
"""

from __future__ import annotations

from typing import Any, Iterable, Iterator, Sequence

from recordstore.domain.entities.record import (
    Record,
    copy_record_data,
    merge_update,
    stamp_new_record,
)
from recordstore.domain.exceptions import IndexExistsError, RecordNotFoundError
from recordstore.domain.services import IndexManager, Selection, select, validate_record
from recordstore.domain.value_objects import ID_FIELD, Filter, RecordId, Schema, new_record_id


class Table:
    """A named, optionally schema-checked collection of records.

    Example:
        >>> table = Table("users", Schema.from_dict({"name": {"type": "string", "required": True}}))
        >>> record_id = table.insert({"name": "Ada"}, "2024-01-01T00:00:00.000Z")
        >>> table.find_by_id(record_id)["name"]
        'Ada'
    """

    def __init__(
        self,
        name: str,
        schema: Schema | None = None,
        *,
        records: Iterable[Record] = (),
        indexed_fields: Iterable[str] = (),
        last_id: int = 0,
    ) -> None:
        """Initialize a table.

        Args:
            name: Table name, unique within its database.
            schema: Optional schema; immutable for the table's lifetime.
            records: Existing records (restored from a snapshot).
            indexed_fields: Fields to build indexes on over `records`.
            last_id: Last id sequence number handed out.
        """
        self._name = name
        self._schema = schema
        self._records: list[Record] = list(records)
        self._indexes = IndexManager()
        self._last_id = last_id

        for field_name in indexed_fields:
            self._indexes.create_index(field_name, self._records)

    @property
    def name(self) -> str:
        return self._name

    @property
    def schema(self) -> Schema | None:
        return self._schema

    @property
    def indexes(self) -> IndexManager:
        return self._indexes

    @property
    def last_id(self) -> int:
        return self._last_id

    @property
    def records(self) -> Sequence[Record]:
        """Records in insertion order; the records themselves are shared, not copied."""
        return tuple(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Record]:
        return iter(self._records)

    # -- lookups -----------------------------------------------------------

    def position_of(self, record_id: str) -> int:
        """Position of a record in insertion order.

        Raises:
            RecordNotFoundError: If no record has this id.
        """
        for position, record in enumerate(self._records):
            if record[ID_FIELD] == record_id:
                return position
        raise RecordNotFoundError(record_id)

    def find_by_id(self, record_id: str) -> Record:
        return self._records[self.position_of(record_id)]

    def select(self, flt: Filter) -> Selection:
        """Records matching a filter, using indexes where possible."""
        return select(self._records, flt, self._indexes)

    # -- two-phase mutation ------------------------------------------------

    def prepare_insert(self, data: Any, timestamp: str) -> Record:
        """Validate and build a new record without storing it.

        Consumes an id sequence number only when validation succeeds.

        Raises:
            InvalidRecordError: If data is not a mapping of JSON-like values.
            SchemaValidationError: If data violates the schema.
        """
        record = copy_record_data(data)
        validate_record(self._schema, record)
        self._last_id += 1
        return stamp_new_record(record, new_record_id(self._last_id), timestamp)

    def prepare_update(
        self,
        record_id: str,
        changes: Any,
        timestamp: str,
        base: Record | None = None,
    ) -> tuple[int, Record]:
        """Locate, merge and validate an update without storing it.

        Args:
            record_id: Id of the record to update.
            changes: Partial fields to merge.
            timestamp: New `_updatedAt` value.
            base: Version to merge onto instead of the stored record (a
                pending update from the same transaction).

        Returns:
            (position, merged record)

        Raises:
            RecordNotFoundError: If no record has this id.
            InvalidRecordError: If changes is not a mapping.
            SchemaValidationError: If the merged record violates the schema.
        """
        position = self.position_of(record_id)
        current = base if base is not None else self._records[position]
        merged = merge_update(current, changes, timestamp)
        validate_record(self._schema, merged)
        return position, merged

    def append(self, record: Record) -> None:
        self._records.append(record)
        self._indexes.add(record)

    def replace_at(self, position: int, record: Record) -> None:
        old = self._records[position]
        self._records[position] = record
        self._indexes.replace(old, record)

    def remove_at(self, position: int) -> Record:
        record = self._records[position]
        self._indexes.remove(record)
        del self._records[position]
        return record

    # -- direct mutation ---------------------------------------------------

    def insert(self, data: Any, timestamp: str) -> RecordId:
        record = self.prepare_insert(data, timestamp)
        self.append(record)
        return RecordId(record[ID_FIELD])

    def update(self, record_id: str, changes: Any, timestamp: str) -> Record:
        position, merged = self.prepare_update(record_id, changes, timestamp)
        self.replace_at(position, merged)
        return merged

    def delete(self, record_id: str) -> Record:
        return self.remove_at(self.position_of(record_id))

    def create_index(self, field_name: str) -> None:
        """Build an equality index on a field.

        Raises:
            IndexExistsError: If the field already has an index.
        """
        if not self._indexes.create_index(field_name, self._records):
            raise IndexExistsError(field_name)
