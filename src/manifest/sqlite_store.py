# src/manifest/sqlite_store.py — v1
"""SQLite-based manifest store (MANIFEST_BACKEND=sqlite).

Uses stdlib sqlite3 — no external dependency. One row per network; the
exclusive session is a ``BEGIN IMMEDIATE`` transaction, so a failed session
rolls back any write made inside it. WAL mode keeps readers unblocked while
a session is open.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
import time
from pathlib import Path

from fetchdeploy.manifest.base_manifest_store import (
    BaseManifestStore,
    ManifestLockTimeout,
)

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS manifests (
    network TEXT PRIMARY KEY,
    data TEXT NOT NULL,
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
);
"""


class SqliteManifestStore(BaseManifestStore):
    """SQLite-backed manifest store shared by every network."""

    def __init__(
        self,
        db_path: Path | str,
        network_name: str,
        lock_timeout_s: float = 300.0,
        lock_poll_interval_s: float = 0.25,
    ) -> None:
        super().__init__(network_name)
        self._db_path = Path(db_path).expanduser()
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._lock_timeout_s = lock_timeout_s
        self._lock_poll_interval_s = lock_poll_interval_s
        # Autocommit mode, no busy wait: _acquire polls without blocking the loop.
        self._conn = sqlite3.connect(str(self._db_path), timeout=0, isolation_level=None)
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(_SCHEMA)

    async def _acquire(self) -> None:
        deadline = time.monotonic() + self._lock_timeout_s
        while True:
            try:
                self._conn.execute("BEGIN IMMEDIATE")
                return
            except sqlite3.OperationalError as e:
                if "locked" not in str(e).lower() and "busy" not in str(e).lower():
                    raise
                if time.monotonic() >= deadline:
                    raise ManifestLockTimeout(self._network_name, self._lock_timeout_s) from e
            logger.debug("Waiting for manifest transaction on %s", self._db_path)
            await asyncio.sleep(self._lock_poll_interval_s)

    async def _release(self, success: bool) -> None:
        if success:
            self._conn.execute("COMMIT")
        else:
            logger.debug("Rolling back manifest session for %s", self._network_name)
            self._conn.execute("ROLLBACK")

    async def _load(self) -> str | None:
        rows = self._conn.execute(
            "SELECT data FROM manifests WHERE network = ?", (self._network_name,)
        ).fetchall()
        return rows[0][0] if rows else None

    async def _store(self, raw: str) -> None:
        self._conn.execute(
            """INSERT OR REPLACE INTO manifests (network, data, updated_at)
               VALUES (?, ?, CURRENT_TIMESTAMP)""",
            (self._network_name, raw),
        )

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()
