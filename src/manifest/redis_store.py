# src/manifest/redis_store.py — v1
"""Redis-based manifest store (MANIFEST_BACKEND=redis).

Requires 'redis' package: pip install redis.
Suitable when deployments run from several machines. The exclusive session
is a redis-py ``Lock`` whose lease expires after LOCK_TIMEOUT_S, so a crashed
holder cannot block the network forever.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

from fetchdeploy.manifest.base_manifest_store import (
    BaseManifestStore,
    ManifestLockError,
    ManifestLockTimeout,
)

logger = logging.getLogger(__name__)

_KEY_PREFIX = "fetchdeploy:manifest:"


class RedisManifestStore(BaseManifestStore):
    """Redis-backed manifest store for distributed deployments."""

    def __init__(
        self,
        redis_url: str,
        network_name: str,
        lock_timeout_s: float = 300.0,
        lock_poll_interval_s: float = 0.25,
    ) -> None:
        super().__init__(network_name)
        try:
            import redis
        except ImportError as e:
            raise ImportError(
                "redis package required: pip install redis"
            ) from e

        self._client = redis.Redis.from_url(redis_url, decode_responses=True)
        self._lock_timeout_s = lock_timeout_s
        self._lock_poll_interval_s = lock_poll_interval_s
        self._lock: Any = None

    @property
    def data_key(self) -> str:
        return f"{_KEY_PREFIX}{self._network_name}"

    async def _acquire(self) -> None:
        lock = self._client.lock(
            f"{self.data_key}:lock", timeout=self._lock_timeout_s
        )
        deadline = time.monotonic() + self._lock_timeout_s
        while not lock.acquire(blocking=False):
            if time.monotonic() >= deadline:
                raise ManifestLockTimeout(self._network_name, self._lock_timeout_s)
            logger.debug("Waiting for manifest lock %s:lock", self.data_key)
            await asyncio.sleep(self._lock_poll_interval_s)
        self._lock = lock

    async def _release(self, success: bool) -> None:
        lock = self._lock
        self._lock = None
        if lock is None:
            return
        try:
            lock.release()
        except Exception as e:
            # Lease expired while held: another process may have written since.
            raise ManifestLockError(
                f"Manifest lock for '{self._network_name}' was lost: {e}"
            ) from e

    async def _load(self) -> str | None:
        return self._client.get(self.data_key)

    async def _store(self, raw: str) -> None:
        self._client.set(self.data_key, raw)

    def close(self) -> None:
        """Close the Redis connection."""
        self._client.close()
