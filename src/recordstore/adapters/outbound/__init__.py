"""Outbound adapters - implementations of outbound ports.

These adapters implement snapshot persistence against concrete media.
"""

from recordstore.adapters.outbound.file_snapshot_store import FileSnapshotStore
from recordstore.adapters.outbound.memory_snapshot_store import InMemorySnapshotStore

__all__ = [
    "FileSnapshotStore",
    "InMemorySnapshotStore",
]
