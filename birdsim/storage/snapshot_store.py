"""Append-only SQLite store for simulation snapshots.

One row per save: serialized world state, serialized config, the
time-step multiplier and a creation timestamp. Rows are never updated or
deleted; loads always read the newest row.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import closing
from dataclasses import dataclass
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS saved_states (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    state TEXT NOT NULL,
    config TEXT NOT NULL,
    time_step INTEGER NOT NULL,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP
)
"""


class SnapshotError(Exception):
    """Base class for snapshot persistence failures."""


class PersistenceError(SnapshotError):
    """Serialization or store I/O failed."""


class SnapshotNotFoundError(SnapshotError, LookupError):
    """The store holds no snapshot yet."""


@dataclass(frozen=True, slots=True)
class SnapshotRecord:
    id: int
    state: dict[str, Any]
    config: dict[str, Any]
    time_step: int
    created_at: str


class SnapshotStore:
    """Thin wrapper around one SQLite file.

    Opens a short-lived connection per call so it can be used from any
    thread.
    """

    __slots__ = ("_path",)

    def __init__(self, path: str | Path) -> None:
        self._path = str(path)

    def _connect(self) -> closing[sqlite3.Connection]:
        return closing(sqlite3.connect(self._path))

    def initialize(self) -> None:
        """Create the table if needed. Raises PersistenceError on failure."""
        try:
            with self._connect() as conn, conn:
                conn.execute(_SCHEMA)
        except sqlite3.Error as exc:
            raise PersistenceError(f"error creating saved_states table at {self._path}: {exc}") from exc
        logger.info("Snapshot store ready at %s", self._path)

    def append(self, state: dict[str, Any], config: dict[str, Any], time_step: int) -> int:
        """Persist one snapshot. Returns the new row id."""
        try:
            state_json = json.dumps(state)
        except (TypeError, ValueError) as exc:
            raise PersistenceError(f"error serializing simulation state: {exc}") from exc
        try:
            config_json = json.dumps(config)
        except (TypeError, ValueError) as exc:
            raise PersistenceError(f"error serializing simulation config: {exc}") from exc

        try:
            with self._connect() as conn, conn:
                cursor = conn.execute(
                    "INSERT INTO saved_states (state, config, time_step) VALUES (?, ?, ?)",
                    (state_json, config_json, int(time_step)),
                )
                row_id = cursor.lastrowid
        except sqlite3.Error as exc:
            raise PersistenceError(f"error saving simulation state to DB: {exc}") from exc

        logger.info("Saved snapshot #%d (tick=%s)", row_id, state.get("tick"))
        return row_id

    def latest(self) -> SnapshotRecord:
        """Newest snapshot. Raises SnapshotNotFoundError when the store is empty."""
        try:
            with self._connect() as conn:
                row = conn.execute(
                    "SELECT id, state, config, time_step, created_at "
                    "FROM saved_states ORDER BY id DESC LIMIT 1"
                ).fetchone()
        except sqlite3.Error as exc:
            raise PersistenceError(f"error loading simulation state from DB: {exc}") from exc

        if row is None:
            raise SnapshotNotFoundError("no saved state found")

        row_id, state_json, config_json, time_step, created_at = row
        try:
            state = json.loads(state_json)
        except ValueError as exc:
            raise PersistenceError(f"error unmarshaling simulation state: {exc}") from exc
        try:
            config = json.loads(config_json)
        except ValueError as exc:
            raise PersistenceError(f"error unmarshaling simulation config: {exc}") from exc

        return SnapshotRecord(
            id=row_id, state=state, config=config,
            time_step=int(time_step), created_at=str(created_at),
        )

    def count(self) -> int:
        try:
            with self._connect() as conn:
                (total,) = conn.execute("SELECT COUNT(*) FROM saved_states").fetchone()
        except sqlite3.Error as exc:
            raise PersistenceError(f"error counting saved states: {exc}") from exc
        return int(total)
