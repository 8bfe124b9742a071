"""Unit tests for the transaction buffer and commit replay."""

from __future__ import annotations

import pytest

from recordstore.domain.entities import (
    PendingUpdate,
    Table,
    TableChanges,
    TransactionBuffer,
    TransactionLogEntry,
)
from recordstore.domain.exceptions import ErrorKind, TransactionStateError
from recordstore.domain.value_objects import TransactionState

T1 = "2024-01-01T00:00:00.000Z"
T2 = "2024-01-02T00:00:00.000Z"


@pytest.mark.unit
class TestTransactionBufferState:
    """Tests for the IDLE/OPEN state machine."""

    def test_begin_and_close(self) -> None:
        """Begin opens, close returns to idle."""
        buffer = TransactionBuffer()
        assert buffer.state == TransactionState.IDLE

        buffer.begin()
        assert buffer.is_open

        assert buffer.close() == {}
        assert buffer.state == TransactionState.IDLE

    def test_double_begin(self) -> None:
        """Only one transaction can be open."""
        buffer = TransactionBuffer()
        buffer.begin()

        with pytest.raises(TransactionStateError) as exc_info:
            buffer.begin()

        assert str(exc_info.value) == "Transaction already in progress"
        assert exc_info.value.kind == ErrorKind.CONFLICTING_STATE

    def test_close_without_begin(self) -> None:
        """Closing needs an open transaction."""
        with pytest.raises(TransactionStateError) as exc_info:
            TransactionBuffer().close()

        assert str(exc_info.value) == "No transaction in progress"

    def test_staging(self) -> None:
        """Staged changes are grouped per table."""
        buffer = TransactionBuffer()
        buffer.begin()
        buffer.stage_insert("users", {"_id": "n1"})
        buffer.stage_update("users", 2, {"_id": "b", "v": 1})
        buffer.stage_delete("users", 0)

        changes = buffer.close()["users"]

        assert changes.inserts == [{"_id": "n1"}]
        assert changes.updates == [PendingUpdate(2, {"_id": "b", "v": 1})]
        assert changes.deletes == [0]

    def test_pending_update_returns_latest(self) -> None:
        """The latest staged version wins."""
        buffer = TransactionBuffer()
        buffer.begin()
        buffer.stage_update("users", 1, {"v": 1})
        buffer.stage_update("users", 1, {"v": 2})

        assert buffer.pending_update("users", 1) == {"v": 2}
        assert buffer.pending_update("users", 0) is None
        assert buffer.pending_update("other", 1) is None

    def test_discard_table(self) -> None:
        """Discarding a table drops its staged changes."""
        buffer = TransactionBuffer()
        buffer.begin()
        buffer.stage_delete("users", 0)

        buffer.discard_table("users")

        assert buffer.changeset() == {}


@pytest.mark.unit
class TestTableChangesApply:
    """Tests for replaying buffered changes at commit."""

    @pytest.fixture
    def table(self) -> Table:
        table = Table("items", indexed_fields=["tag"])
        for name in ("a", "b", "c", "d"):
            table.insert({"name": name, "tag": "old"}, T1)
        return table

    def _names(self, table: Table) -> list[str]:
        return [r["name"] for r in table.records]

    def test_deletes_then_updates_then_inserts(self, table: Table) -> None:
        """Apply deletes, then shifted updates, then inserts."""
        _, updated = table.prepare_update(table.records[3]["_id"], {"tag": "new"}, T2)
        inserted = table.prepare_insert({"name": "e", "tag": "new"}, T2)
        changes = TableChanges(
            inserts=[inserted],
            updates=[PendingUpdate(3, updated)],
            deletes=[1, 0],
        )

        changes.apply(table)

        assert self._names(table) == ["c", "d", "e"]
        assert table.records[1]["tag"] == "new"
        assert table.indexes.lookup("tag", "new") == {updated["_id"], inserted["_id"]}
        assert table.indexes.lookup("tag", "old") == {table.records[0]["_id"]}

    def test_update_of_deleted_record_dropped(self, table: Table) -> None:
        """Updates of deleted records are skipped."""
        _, updated = table.prepare_update(table.records[1]["_id"], {"tag": "new"}, T2)
        changes = TableChanges(updates=[PendingUpdate(1, updated)], deletes=[1])

        changes.apply(table)

        assert self._names(table) == ["a", "c", "d"]
        assert table.indexes.lookup("tag", "new") == set()

    def test_duplicate_deletes_applied_once(self, table: Table) -> None:
        """Repeated deletes remove one record."""
        TableChanges(deletes=[2, 2]).apply(table)

        assert self._names(table) == ["a", "b", "d"]

    def test_to_dict(self) -> None:
        """Changes export in transaction log form."""
        changes = TableChanges(
            inserts=[{"_id": "n"}],
            updates=[PendingUpdate(0, {"_id": "a"})],
            deletes=[1],
        )

        assert changes.to_dict() == {
            "inserts": [{"_id": "n"}],
            "updates": [{"index": 0, "record": {"_id": "a"}}],
            "deletes": [1],
        }

    def test_log_entry_to_dict(self) -> None:
        """Log entries export timestamp and changes."""
        entry = TransactionLogEntry(timestamp=T1, changes={"items": {"deletes": [0]}})

        assert entry.to_dict() == {"timestamp": T1, "changes": {"items": {"deletes": [0]}}}
