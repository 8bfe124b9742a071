"""File-based snapshot store adapter.

Implements SnapshotStore using the local filesystem, one JSON file per
database:

    data_dir/
        tinyDB.json
        inventory.json

Writes go to a temporary file in the same directory which is then renamed
over the target, so a crash mid-write leaves the previous snapshot intact.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

from recordstore.infrastructure.logging import get_logger

logger = get_logger(__name__)


class FileSnapshotStore:
    """File-based implementation of SnapshotStore.

    Attributes:
        data_dir: Directory holding the snapshot files.
    """

    def __init__(self, data_dir: str | Path, fsync: bool = True) -> None:
        """Initialize file storage.

        Args:
            data_dir: Directory for snapshot files (created if missing).
            fsync: Whether to fsync each snapshot before renaming it.
        """
        self._data_dir = Path(data_dir)
        self._data_dir.mkdir(parents=True, exist_ok=True)
        self._fsync = fsync

    @property
    def data_dir(self) -> Path:
        """Root data directory."""
        return self._data_dir

    def path_for(self, key: str) -> Path:
        """Get the file path for a database key."""
        # Sanitize key to be filesystem-safe
        safe_key = key.replace("/", "_").replace("\\", "_")
        return self._data_dir / f"{safe_key}.json"

    def save(self, key: str, blob: str) -> None:
        """Atomically persist a snapshot to disk.

        Raises:
            OSError: If the file cannot be written.
        """
        path = self.path_for(key)
        fd, tmp_name = tempfile.mkstemp(dir=self._data_dir, prefix=f".{path.stem}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(blob)
                f.flush()
                if self._fsync:
                    os.fsync(f.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.debug("snapshot_saved", key=key, path=str(path), size=len(blob))

    def load(self, key: str) -> str | None:
        """Load a snapshot from disk, or None if no file exists."""
        path = self.path_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def delete(self, key: str) -> bool:
        """Delete a stored snapshot.

        Returns:
            True if deleted, False if not found
        """
        path = self.path_for(key)
        if path.exists():
            path.unlink()
            return True
        return False
