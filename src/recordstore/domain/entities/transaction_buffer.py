"""Transaction buffer: staged mutations awaiting commit.

While a transaction is open, inserts, updates and deletes are recorded per
table instead of being applied:

    TableChanges(
        inserts=[<new record>, ...],
        updates=[PendingUpdate(position=3, record=<merged record>), ...],
        deletes=[0, 5, ...],
    )

Positions refer to the table as it stood when the transaction began; the
tables are not mutated while the buffer is open, so they stay valid until
commit. Records are held by value, so discarding the buffer leaves the
tables exactly as they were.

Records inserted within the open transaction are invisible to updates and
deletes of the same transaction (they are not in the table yet), so those
calls report the record as not found.
"""

from __future__ import annotations

from bisect import bisect_left
from dataclasses import dataclass, field
from typing import Any

from recordstore.domain.entities.record import Record
from recordstore.domain.entities.table import Table
from recordstore.domain.exceptions import TransactionStateError
from recordstore.domain.value_objects import TransactionState, copy_json_value


@dataclass
class PendingUpdate:
    """A merged, validated record waiting to replace the one at position."""

    position: int
    record: Record


@dataclass
class TableChanges:
    """Buffered changes for one table."""

    inserts: list[Record] = field(default_factory=list)
    updates: list[PendingUpdate] = field(default_factory=list)
    deletes: list[int] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.inserts or self.updates or self.deletes)

    def pending_update(self, position: int) -> Record | None:
        """Latest buffered version of the record at position, if any."""
        for update in reversed(self.updates):
            if update.position == position:
                return update.record
        return None

    def apply(self, table: Table) -> None:
        """Replay the changes against a table.

        Order:
            1. deletes, highest position first, each position once;
            2. updates, at their recorded position shifted down by the
               number of deleted positions below it (updates of deleted
               records are dropped);
            3. inserts, appended in the order they were staged.

        Every step maintains the table's indexes exactly as a direct
        mutation would.
        """
        deleted = sorted(set(self.deletes))
        for position in reversed(deleted):
            table.remove_at(position)

        deleted_positions = set(deleted)
        for update in self.updates:
            if update.position in deleted_positions:
                continue
            shift = bisect_left(deleted, update.position)
            table.replace_at(update.position - shift, update.record)

        for record in self.inserts:
            table.append(record)

    def to_dict(self) -> dict[str, Any]:
        """Changeset form recorded in the transaction log."""
        return {
            "inserts": [copy_json_value(r) for r in self.inserts],
            "updates": [
                {"index": u.position, "record": copy_json_value(u.record)} for u in self.updates
            ],
            "deletes": list(self.deletes),
        }


@dataclass
class TransactionLogEntry:
    """Audit record of one committed transaction. Never replayed."""

    timestamp: str
    changes: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {"timestamp": self.timestamp, "changes": copy_json_value(self.changes)}


class TransactionBuffer:
    """Staging area for one open transaction.

    Usage:
        buffer = TransactionBuffer()
        buffer.begin()
        buffer.stage_insert("users", record)
        changes = buffer.close()   # {"users": TableChanges(...)}
    """

    def __init__(self) -> None:
        self._state = TransactionState.IDLE
        self._changes: dict[str, TableChanges] = {}

    @property
    def state(self) -> TransactionState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state.is_open()

    def begin(self) -> None:
        """IDLE -> OPEN with an empty buffer.

        Raises:
            TransactionStateError: If a transaction is already open.
        """
        if not self._state.can_begin():
            raise TransactionStateError("Transaction already in progress")
        self._state = TransactionState.OPEN
        self._changes = {}

    def close(self) -> dict[str, TableChanges]:
        """OPEN -> IDLE, handing back everything staged.

        Raises:
            TransactionStateError: If no transaction is open.
        """
        if not self._state.is_open():
            raise TransactionStateError("No transaction in progress")
        changes = self._changes
        self._changes = {}
        self._state = TransactionState.IDLE
        return changes

    def changes_for(self, table_name: str) -> TableChanges:
        changes = self._changes.get(table_name)
        if changes is None:
            changes = self._changes[table_name] = TableChanges()
        return changes

    def stage_insert(self, table_name: str, record: Record) -> None:
        self.changes_for(table_name).inserts.append(record)

    def stage_update(self, table_name: str, position: int, record: Record) -> None:
        self.changes_for(table_name).updates.append(PendingUpdate(position, record))

    def stage_delete(self, table_name: str, position: int) -> None:
        self.changes_for(table_name).deletes.append(position)

    def pending_update(self, table_name: str, position: int) -> Record | None:
        changes = self._changes.get(table_name)
        return changes.pending_update(position) if changes is not None else None

    def discard_table(self, table_name: str) -> None:
        """Forget staged changes for a table that no longer exists."""
        self._changes.pop(table_name, None)

    def changeset(self) -> dict[str, dict[str, Any]]:
        return {name: changes.to_dict() for name, changes in self._changes.items()}
