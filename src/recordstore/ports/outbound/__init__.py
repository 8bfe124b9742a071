"""Outbound ports - interfaces for external dependencies.

Outbound ports define contracts for external systems that the
record store depends on, such as snapshot persistence.
"""

from recordstore.ports.outbound.snapshot_store import SnapshotStore

__all__ = [
    "SnapshotStore",
]
