"""Domain entities for the record store.

Entities are objects with identity that have a lifecycle.

Exports:
    Record:
        - Record: dict of JSON-like values plus system fields
        - copy_record_data, stamp_new_record, merge_update

    Table:
        - Table: ordered records, optional schema, equality indexes

    Transaction Buffer:
        - TransactionBuffer: staged changes of the open transaction
        - TableChanges, PendingUpdate: per-table staged changes
        - TransactionLogEntry: audit entry written at commit
"""

from recordstore.domain.entities.record import (
    Record,
    copy_record_data,
    merge_update,
    stamp_new_record,
)
from recordstore.domain.entities.table import Table
from recordstore.domain.entities.transaction_buffer import (
    PendingUpdate,
    TableChanges,
    TransactionBuffer,
    TransactionLogEntry,
)

__all__ = [
    # Record
    "Record",
    "copy_record_data",
    "stamp_new_record",
    "merge_update",
    # Table
    "Table",
    # Transaction buffer
    "TransactionBuffer",
    "TableChanges",
    "PendingUpdate",
    "TransactionLogEntry",
]
