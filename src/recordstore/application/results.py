"""Discriminated results returned by every engine operation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from recordstore.domain.exceptions import ErrorKind, RecordStoreError


@dataclass
class OperationResult:
    """Outcome of an engine operation.

    On success the payload fields relevant to the operation are set:
        - insert: id
        - find: records
        - find_by_id: record
        - count: count

    On failure `error` holds a human-readable reason and `error_kind`
    classifies it.
    """

    success: bool
    error: str | None = None
    error_kind: ErrorKind | None = None
    id: str | None = None
    record: dict[str, Any] | None = None
    records: list[dict[str, Any]] | None = None
    count: int | None = None

    def __bool__(self) -> bool:
        return self.success

    @classmethod
    def ok(cls, **payload: Any) -> OperationResult:
        return cls(success=True, **payload)

    @classmethod
    def fail(cls, kind: ErrorKind, error: str) -> OperationResult:
        return cls(success=False, error=error, error_kind=kind)

    @classmethod
    def from_error(cls, error: RecordStoreError) -> OperationResult:
        return cls.fail(error.kind, str(error))
