"""Per-table equality indexes.

Each index maps the value of one field to the set of ids of the records
currently holding that value:

    index["email"] = {
        ("string", "a@example.com"): {"id_..._1"},
        ("string", "b@example.com"): {"id_..._2", "id_..._5"},
    }

Bucket keys are canonical, type-tagged forms of the value (see
`canonical_key`), so `True`, `1` and `"1"` never share a bucket.

Indexes are built once from the existing records when created and then
maintained incrementally and synchronously with every applied mutation:
bucket membership always reflects current record state. Records that lack
the indexed field are not indexed under any bucket.
"""

from __future__ import annotations

from typing import Any, Hashable, Iterable, Iterator, Mapping

from recordstore.domain.value_objects import (
    ID_FIELD,
    MISSING,
    canonical_key,
    encode_bucket_key,
)

Record = Mapping[str, Any]


class FieldIndex:
    """Equality index over a single field."""

    def __init__(self, field_name: str) -> None:
        self._field = field_name
        self._buckets: dict[Hashable, set[str]] = {}
        self._values: dict[Hashable, Any] = {}

    @property
    def field(self) -> str:
        return self._field

    def __len__(self) -> int:
        """Number of distinct indexed values."""
        return len(self._buckets)

    def add(self, record: Record) -> None:
        value = record.get(self._field, MISSING)
        if value is MISSING:
            return
        key = canonical_key(value)
        bucket = self._buckets.get(key)
        if bucket is None:
            bucket = self._buckets[key] = set()
            self._values[key] = value
        bucket.add(record[ID_FIELD])

    def remove(self, record: Record) -> None:
        value = record.get(self._field, MISSING)
        if value is MISSING:
            return
        key = canonical_key(value)
        bucket = self._buckets.get(key)
        if bucket is None:
            return
        bucket.discard(record[ID_FIELD])
        if not bucket:
            del self._buckets[key]
            del self._values[key]

    def lookup(self, value: Any) -> set[str]:
        """Ids of records whose field equals value (a copy)."""
        return set(self._buckets.get(canonical_key(value), ()))

    def items(self) -> Iterator[tuple[Any, set[str]]]:
        """(value, ids) pairs for every non-empty bucket."""
        for key, ids in self._buckets.items():
            yield self._values[key], set(ids)


class IndexManager:
    """All equality indexes of one table.

    Usage:
        indexes = IndexManager()
        indexes.create_index("email", table_records)
        indexes.add(new_record)
        indexes.replace(old_record, new_record)
        indexes.remove(deleted_record)
        ids = indexes.lookup("email", "a@example.com")
    """

    def __init__(self) -> None:
        self._indexes: dict[str, FieldIndex] = {}

    @property
    def fields(self) -> list[str]:
        """Indexed field names in creation order."""
        return list(self._indexes)

    def has_index(self, field_name: str) -> bool:
        return field_name in self._indexes

    def create_index(self, field_name: str, records: Iterable[Record]) -> bool:
        """Create an index on a field by scanning the current records once.

        Returns:
            True if created, False if the field already had an index (the
            existing index is left untouched).
        """
        if field_name in self._indexes:
            return False

        index = FieldIndex(field_name)
        for record in records:
            index.add(record)
        self._indexes[field_name] = index
        return True

    def add(self, record: Record) -> None:
        """Index a newly stored record under every indexed field."""
        for index in self._indexes.values():
            index.add(record)

    def replace(self, old: Record, new: Record) -> None:
        """Move a record from its previous buckets to its current ones."""
        for index in self._indexes.values():
            index.remove(old)
            index.add(new)

    def remove(self, record: Record) -> None:
        """Drop a deleted record from every indexed field's bucket."""
        for index in self._indexes.values():
            index.remove(record)

    def lookup(self, field_name: str, value: Any) -> set[str]:
        """Ids of records whose field equals value.

        Raises:
            KeyError: If the field has no index.
        """
        return self._indexes[field_name].lookup(value)

    def candidates(self, literals: Iterable[tuple[str, Any]]) -> set[str] | None:
        """Intersect the buckets of every indexed literal condition.

        Args:
            literals: (field, value) pairs from plain equality conditions.

        Returns:
            The candidate id set, or None if no condition could use an
            index. An index miss yields an empty set.
        """
        result: set[str] | None = None
        for field_name, value in literals:
            index = self._indexes.get(field_name)
            if index is None:
                continue
            ids = index.lookup(value)
            result = ids if result is None else result & ids
            if not result:
                return set()
        return result

    def buckets(self, field_name: str) -> dict[Hashable, set[str]]:
        """Canonical bucket key -> ids, for inspection and consistency checks."""
        index = self._indexes[field_name]
        return {canonical_key(value): ids for value, ids in index.items()}

    def to_dict(self) -> dict[str, dict[str, list[str]]]:
        """Export form: field -> {JSON text of value: sorted ids}."""
        exported: dict[str, dict[str, list[str]]] = {}
        for field_name, index in self._indexes.items():
            exported[field_name] = {
                encode_bucket_key(value): sorted(ids) for value, ids in index.items()
            }
        return exported
