"""Stores package for scorekeeper snapshot persistence."""

from .snapshot_store import CURRENT_GAME_KEY, SNAPSHOT_VERSION, SnapshotError, SnapshotStore

__all__ = [
    "SnapshotStore",
    "SnapshotError",
    "SNAPSHOT_VERSION",
    "CURRENT_GAME_KEY",
]
