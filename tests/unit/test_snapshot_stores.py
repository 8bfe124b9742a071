"""Unit tests for the snapshot store adapters."""

from __future__ import annotations

from pathlib import Path

import pytest

from recordstore.adapters.outbound import FileSnapshotStore, InMemorySnapshotStore
from recordstore.ports.outbound import SnapshotStore


@pytest.mark.unit
class TestInMemorySnapshotStore:
    """Tests for InMemorySnapshotStore."""

    def test_implements_port(self) -> None:
        """The store satisfies SnapshotStore."""
        assert isinstance(InMemorySnapshotStore(), SnapshotStore)

    def test_save_and_load(self) -> None:
        """Saved snapshots load back by key."""
        store = InMemorySnapshotStore()

        store.save("db", '{"a": 1}')

        assert store.load("db") == '{"a": 1}'
        assert store.load("other") is None
        assert store.save_count == 1
        assert store.keys() == ["db"]

    def test_save_replaces(self) -> None:
        """A second save replaces the first."""
        store = InMemorySnapshotStore()
        store.save("db", "1")
        store.save("db", "2")

        assert store.load("db") == "2"
        assert len(store) == 1

    def test_delete_and_clear(self) -> None:
        """Delete one key, then clear the rest."""
        store = InMemorySnapshotStore()
        store.save("a", "1")
        store.save("b", "2")

        assert store.delete("a") is True
        assert store.delete("a") is False
        store.clear()
        assert len(store) == 0


@pytest.mark.unit
class TestFileSnapshotStore:
    """Tests for FileSnapshotStore."""

    @pytest.fixture
    def store(self, temp_dir: Path) -> FileSnapshotStore:
        return FileSnapshotStore(temp_dir / "snapshots", fsync=False)

    def test_implements_port(self, store: FileSnapshotStore) -> None:
        """The store satisfies SnapshotStore."""
        assert isinstance(store, SnapshotStore)

    def test_creates_directory(self, store: FileSnapshotStore) -> None:
        """The data directory is created on demand."""
        assert store.data_dir.is_dir()

    def test_save_and_load(self, store: FileSnapshotStore) -> None:
        """Saved snapshots load back by key."""
        store.save("tinyDB", '{"name": "tinyDB"}')

        assert store.path_for("tinyDB").name == "tinyDB.json"
        assert store.load("tinyDB") == '{"name": "tinyDB"}'

    def test_load_missing(self, store: FileSnapshotStore) -> None:
        """Missing snapshots load as None."""
        assert store.load("absent") is None

    def test_save_replaces_atomically(self, store: FileSnapshotStore) -> None:
        """Replacing leaves only the target file."""
        store.save("db", "first")
        store.save("db", "second")

        assert store.load("db") == "second"
        assert sorted(p.name for p in store.data_dir.iterdir()) == ["db.json"]

    def test_key_is_sanitized(self, store: FileSnapshotStore) -> None:
        """Keys cannot escape the data directory."""
        path = store.path_for("../escape")

        assert path.parent == store.data_dir

    def test_delete(self, store: FileSnapshotStore) -> None:
        """Deleting removes the file."""
        store.save("db", "x")

        assert store.delete("db") is True
        assert store.delete("db") is False
        assert store.load("db") is None

    def test_failed_write_leaves_no_temp_file(self, temp_dir: Path) -> None:
        """A failed save cleans up its temp file."""
        store = FileSnapshotStore(temp_dir / "snapshots", fsync=False)
        store.path_for("db").mkdir()  # A directory cannot be replaced by a file

        with pytest.raises(OSError):
            store.save("db", "x")

        assert [p.name for p in store.data_dir.iterdir()] == ["db.json"]
