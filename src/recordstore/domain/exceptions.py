"""Exception taxonomy for the record store domain.

Domain code raises these; the application layer converts them into
`OperationResult` failures at the public boundary so that no engine
operation ever escapes with an exception for an expected failure.

Every exception carries an `ErrorKind`:
    - NOT_FOUND: unknown table or record id
    - INVALID: schema violation, malformed query, malformed snapshot,
      duplicate index creation
    - CONFLICTING_STATE: transaction already open / no transaction open
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    """Discriminator for failed operations."""

    NOT_FOUND = "not_found"
    INVALID = "invalid"
    CONFLICTING_STATE = "conflicting_state"


class RecordStoreError(Exception):
    """Base class for all record store errors."""

    kind: ErrorKind = ErrorKind.INVALID


class TableNotFoundError(RecordStoreError):
    """Raised when an operation names a table that does not exist."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, table_name: str) -> None:
        super().__init__("Table does not exist")
        self.table_name = table_name


class RecordNotFoundError(RecordStoreError):
    """Raised when no record with the given id exists in a table."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, record_id: str) -> None:
        super().__init__("Record not found")
        self.record_id = record_id


class SchemaValidationError(RecordStoreError):
    """Raised when a record violates its table's schema."""

    def __init__(self, field_name: str, reason: str) -> None:
        super().__init__(reason)
        self.field_name = field_name
        self.reason = reason


class SchemaDefinitionError(RecordStoreError):
    """Raised when a schema definition itself is malformed."""


class InvalidRecordError(RecordStoreError):
    """Raised when a record is not a mapping of JSON-like values."""


class InvalidQueryError(RecordStoreError):
    """Raised for malformed filters, sort specs or pagination options."""


class IndexExistsError(RecordStoreError):
    """Raised when an index already exists on a field."""

    def __init__(self, field_name: str) -> None:
        super().__init__("Index already exists")
        self.field_name = field_name


class SnapshotFormatError(RecordStoreError):
    """Raised when a snapshot cannot be parsed or is structurally invalid."""


class TransactionStateError(RecordStoreError):
    """Raised when the transaction state machine rejects a transition."""

    kind = ErrorKind.CONFLICTING_STATE
