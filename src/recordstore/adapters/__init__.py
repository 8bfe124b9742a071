"""Adapters layer - concrete implementations of port interfaces.

Adapters provide the actual implementations:
- Outbound adapters: snapshot stores (memory, file)
- Snapshot codec: the JSON export/import wire format
"""

from recordstore.adapters.outbound import FileSnapshotStore, InMemorySnapshotStore
from recordstore.adapters.snapshot_codec import (
    DatabaseSnapshot,
    DecodedSnapshot,
    decode_snapshot,
    encode_snapshot,
)

__all__ = [
    # Outbound adapters
    "FileSnapshotStore",
    "InMemorySnapshotStore",
    # Snapshot codec
    "DatabaseSnapshot",
    "DecodedSnapshot",
    "decode_snapshot",
    "encode_snapshot",
]
