"""Ports layer - interface definitions following Hexagonal Architecture.

Ports are abstract interfaces (protocols) that define contracts:
- Outbound ports: Dependencies on external systems (e.g., SnapshotStore)

Adapters implement these ports with concrete functionality.
"""

from recordstore.ports.outbound import SnapshotStore

__all__ = [
    # Outbound ports
    "SnapshotStore",
]
