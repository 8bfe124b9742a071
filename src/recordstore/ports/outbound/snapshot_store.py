"""Snapshot Store port for persisting whole-database snapshots.

This outbound port is the only contract the engine has with its
persistence medium: a key-value blob store such as a file, browser-style
local storage, or a remote service. The engine calls `save` after every
durably applied mutation and `load` once when a database is constructed.

Implementations may fail; the engine treats persistence as best effort and
never lets a failed save undo or corrupt in-memory state.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Protocol, runtime_checkable


@runtime_checkable
class SnapshotStore(Protocol):
    """Protocol for snapshot persistence keyed by database name."""

    @abstractmethod
    def save(self, key: str, blob: str) -> None:
        """Store a snapshot, replacing any previous one under key.

        Args:
            key: The database name.
            blob: The serialized snapshot.

        Raises:
            OSError: If the medium rejects the write.
        """
        ...

    @abstractmethod
    def load(self, key: str) -> str | None:
        """Load the snapshot stored under key.

        Args:
            key: The database name.

        Returns:
            The serialized snapshot, or None if nothing is stored.
        """
        ...
