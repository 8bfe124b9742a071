"""Application layer for the record store.

The application layer orchestrates domain logic to fulfill use cases.

Exports:
    - Database: Main entry point for the record store
    - OperationResult: Discriminated result of every engine operation
    - create_snapshot_store: Snapshot store factory driven by configuration
"""

from recordstore.application.database import Database, create_snapshot_store
from recordstore.application.results import OperationResult

__all__ = [
    "Database",
    "OperationResult",
    "create_snapshot_store",
]
