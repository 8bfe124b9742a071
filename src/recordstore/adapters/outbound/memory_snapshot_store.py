"""In-memory snapshot store adapter.

A simple in-memory implementation of SnapshotStore for testing and for
databases that do not need to outlive the process.

Usage:
    store = InMemorySnapshotStore()
    db = Database("app", store=store)
"""

from __future__ import annotations


class InMemorySnapshotStore:
    """In-memory implementation of SnapshotStore.

    Several databases can share one store; each snapshot is kept under its
    database name.
    """

    def __init__(self) -> None:
        """Initialize empty storage."""
        self._blobs: dict[str, str] = {}
        self._save_count = 0

    def save(self, key: str, blob: str) -> None:
        """Store a snapshot in memory."""
        self._blobs[key] = blob
        self._save_count += 1

    def load(self, key: str) -> str | None:
        """Load a snapshot from memory, or None if absent."""
        return self._blobs.get(key)

    def delete(self, key: str) -> bool:
        """Delete a stored snapshot.

        Returns:
            True if deleted, False if not found
        """
        if key in self._blobs:
            del self._blobs[key]
            return True
        return False

    def keys(self) -> list[str]:
        return list(self._blobs.keys())

    @property
    def save_count(self) -> int:
        """Number of successful saves since creation."""
        return self._save_count

    def clear(self) -> None:
        """Clear all stored data."""
        self._blobs.clear()

    def __len__(self) -> int:
        return len(self._blobs)
