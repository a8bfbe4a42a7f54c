"""
SQLite snapshot store for resuming games.

Each key holds one versioned envelope:

    {"version": "v1.0", "timestamp": <epoch ms>, "data": <payload>}

Snapshots written by a different format version are rejected rather than
half-loaded.
"""

import json
import logging
import sqlite3
import time
from pathlib import Path
from typing import Any, Optional, Union

from config import config
from models.game_state import Game


logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = "v1.0"
CURRENT_GAME_KEY = "current_game"


class SnapshotError(Exception):
    """Raised when a snapshot cannot be read or was written by another version."""
    pass


class SnapshotStore:
    """Keyed, versioned JSON snapshots in a local SQLite file."""

    def __init__(self, db_path: Union[str, Path, None] = None):
        self.db_path = Path(db_path or config.SNAPSHOT_DB_PATH)
        self._init_db()

    def _init_db(self):
        """Initialize database schema."""
        with sqlite3.connect(self.db_path) as conn:
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS snapshots (
                    key TEXT PRIMARY KEY,
                    version TEXT NOT NULL,
                    timestamp INTEGER NOT NULL,
                    data_json TEXT NOT NULL
                );
            """)

    @property
    def current_version(self) -> str:
        return SNAPSHOT_VERSION

    def save(self, key: str, data: Any) -> None:
        """Store data under key, replacing any previous snapshot."""
        try:
            payload = json.dumps(data)
        except (TypeError, ValueError) as e:
            raise SnapshotError(f"Failed to serialize snapshot {key!r}: {e}") from e

        with sqlite3.connect(self.db_path) as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO snapshots (key, version, timestamp, data_json)
                VALUES (?, ?, ?, ?)
                """,
                (key, SNAPSHOT_VERSION, int(time.time() * 1000), payload),
            )
        logger.debug(f"Saved snapshot {key!r}")

    def load(self, key: str) -> Optional[Any]:
        """
        Read the data stored under key.

        Returns:
            The stored data, or None when nothing is stored.

        Raises:
            SnapshotError: If the snapshot is corrupt or from another version.
        """
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            row = conn.execute(
                "SELECT version, data_json FROM snapshots WHERE key = ?",
                (key,),
            ).fetchone()
        if row is None:
            return None

        if row["version"] != SNAPSHOT_VERSION:
            logger.warning(
                f"Snapshot version mismatch for {key!r}: {row['version']} vs {SNAPSHOT_VERSION}"
            )
            raise SnapshotError(
                f"Snapshot {key!r} has version {row['version']}, expected {SNAPSHOT_VERSION}"
            )
        try:
            return json.loads(row["data_json"])
        except json.JSONDecodeError as e:
            raise SnapshotError(f"Snapshot {key!r} is corrupt: {e}") from e

    def info(self, key: str) -> Optional[dict]:
        """Version and timestamp of the snapshot under key, without loading it."""
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            row = conn.execute(
                "SELECT version, timestamp FROM snapshots WHERE key = ?",
                (key,),
            ).fetchone()
        return dict(row) if row else None

    def remove(self, key: str) -> None:
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("DELETE FROM snapshots WHERE key = ?", (key,))

    def clear(self) -> None:
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("DELETE FROM snapshots")

    # Game helpers

    def save_game(self, snapshot: dict, key: str = CURRENT_GAME_KEY) -> None:
        """Store a Game.to_dict() / GameSession.snapshot() payload."""
        self.save(key, snapshot)

    def load_game(self, key: str = CURRENT_GAME_KEY) -> Optional[Game]:
        data = self.load(key)
        if data is None:
            return None
        try:
            return Game.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            raise SnapshotError(f"Snapshot {key!r} is not a valid game: {e}") from e
