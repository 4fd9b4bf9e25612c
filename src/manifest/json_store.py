# src/manifest/json_store.py — v1
"""JSON file manifest store (default MANIFEST_BACKEND=json).

One file per network under MANIFEST_DIR. Cross-process exclusion uses an
``fcntl.flock`` on a ``.lock`` sidecar so the data file itself can be
replaced atomically.
"""

from __future__ import annotations

import asyncio
import fcntl
import logging
import os
import tempfile
import time
from pathlib import Path
from typing import IO

from fetchdeploy.manifest.base_manifest_store import (
    BaseManifestStore,
    ManifestLockTimeout,
)

logger = logging.getLogger(__name__)


class JsonManifestStore(BaseManifestStore):
    """File-based manifest store."""

    def __init__(
        self,
        manifest_dir: Path | str,
        network_name: str,
        lock_timeout_s: float = 300.0,
        lock_poll_interval_s: float = 0.25,
    ) -> None:
        super().__init__(network_name)
        self._root = Path(manifest_dir).expanduser()
        self._root.mkdir(parents=True, exist_ok=True)
        self._lock_timeout_s = lock_timeout_s
        self._lock_poll_interval_s = lock_poll_interval_s
        self._lock_handle: IO[str] | None = None

    @property
    def path(self) -> Path:
        return self._root / f"{self._network_name}.json"

    @property
    def lock_path(self) -> Path:
        return self._root / f"{self._network_name}.json.lock"

    async def _acquire(self) -> None:
        handle = self.lock_path.open("a+", encoding="utf-8")
        deadline = time.monotonic() + self._lock_timeout_s
        try:
            while True:
                try:
                    fcntl.flock(handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
                    break
                except BlockingIOError:
                    if time.monotonic() >= deadline:
                        raise ManifestLockTimeout(
                            self._network_name, self._lock_timeout_s
                        ) from None
                logger.debug("Waiting for manifest lock %s", self.lock_path)
                await asyncio.sleep(self._lock_poll_interval_s)
        except BaseException:
            # Covers timeout and cancellation while sleeping.
            handle.close()
            raise
        self._lock_handle = handle

    async def _release(self, success: bool) -> None:
        handle = self._lock_handle
        self._lock_handle = None
        if handle is None:
            return
        try:
            fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
        finally:
            handle.close()

    async def _load(self) -> str | None:
        if not self.path.exists():
            return None
        return self.path.read_text(encoding="utf-8")

    async def _store(self, raw: str) -> None:
        fd, tmp_path = tempfile.mkstemp(
            dir=str(self._root), prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                tmp.write(raw)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_path, self.path)
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise
