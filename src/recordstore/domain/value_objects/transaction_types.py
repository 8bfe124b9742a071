"""Transaction-related types.

The record store runs a single transaction at a time per database:

    IDLE ──begin()──> OPEN
      ^                 │
      └──commit()/rollback()

While OPEN every insert/update/delete is staged in the transaction buffer
instead of touching the tables.
"""

from __future__ import annotations

from enum import Enum, auto


class TransactionState(Enum):
    """Transaction lifecycle states."""

    IDLE = auto()
    """No transaction in progress; mutations apply directly."""

    OPEN = auto()
    """A transaction is in progress; mutations are buffered."""

    def can_begin(self) -> bool:
        return self == TransactionState.IDLE

    def is_open(self) -> bool:
        return self == TransactionState.OPEN
