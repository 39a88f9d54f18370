"""Snapshot persistence."""

from birdsim.storage.snapshot_store import (
    PersistenceError,
    SnapshotError,
    SnapshotNotFoundError,
    SnapshotRecord,
    SnapshotStore,
)

__all__ = [
    "PersistenceError",
    "SnapshotError",
    "SnapshotNotFoundError",
    "SnapshotRecord",
    "SnapshotStore",
]
