# src/manifest/base_manifest_store.py — v1
"""Abstract per-network manifest store with an exclusive session.

Backends supply the locking primitive and raw document I/O; parsing,
serialisation and session bookkeeping live here so every backend enforces the
same rules: writes only inside ``locked_run``, sessions are not re-entrant,
and the session is always released, even when the callback raises.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, TypeVar

from pydantic import ValidationError

from fetchdeploy.core.models import ManifestData

logger = logging.getLogger(__name__)

R = TypeVar("R")


class ManifestLockError(Exception):
    """Exclusive session misuse (write outside a session, nested session)."""


class ManifestLockTimeout(ManifestLockError):
    """Exclusive session could not be acquired in time."""

    def __init__(self, network: str, timeout_s: float):
        self.network = network
        self.timeout_s = timeout_s
        super().__init__(
            f"Could not lock manifest for network '{network}' within {timeout_s:.1f}s"
        )


class ManifestCorruptError(Exception):
    """Stored manifest document cannot be parsed."""


class BaseManifestStore(ABC):
    """Durable manifest document for one network."""

    def __init__(self, network_name: str) -> None:
        self._network_name = network_name
        self._locked = False

    @property
    def network_name(self) -> str:
        return self._network_name

    @property
    def locked(self) -> bool:
        """Whether this handle currently holds the exclusive session."""
        return self._locked

    async def locked_run(self, fn: Callable[[], Awaitable[R]]) -> R:
        """Run ``fn`` while holding the exclusive session.

        Raises:
            ManifestLockError: If this handle already holds the session.
            ManifestLockTimeout: If the session cannot be acquired.
        """
        if self._locked:
            raise ManifestLockError(
                f"Manifest for '{self._network_name}' is already locked by this handle"
            )
        await self._acquire()
        self._locked = True
        logger.debug("Acquired manifest lock for %s", self._network_name)
        try:
            result = await fn()
        except BaseException:
            self._locked = False
            try:
                await self._release(success=False)
            except Exception:
                # The callback's error is the one the caller needs to see.
                logger.exception(
                    "Failed to release manifest lock for %s", self._network_name
                )
            raise
        self._locked = False
        await self._release(success=True)
        logger.debug("Released manifest lock for %s", self._network_name)
        return result

    async def read(self) -> ManifestData:
        """Load the document; an absent document reads as empty."""
        raw = await self._load()
        if raw is None:
            return ManifestData()
        try:
            return ManifestData.model_validate_json(raw)
        except ValidationError as e:
            raise ManifestCorruptError(
                f"Manifest for '{self._network_name}' is corrupt: {e}"
            ) from e

    async def write(self, data: ManifestData) -> None:
        """Persist the whole document. Only legal inside ``locked_run``."""
        if not self._locked:
            raise ManifestLockError(
                f"Manifest for '{self._network_name}' written without holding the lock"
            )
        await self._store(data.model_dump_json(indent=2, exclude_none=True))

    def close(self) -> None:
        """Release backend resources. The handle is unusable afterwards."""

    @abstractmethod
    async def _acquire(self) -> None:
        """Block until the exclusive session is held."""

    @abstractmethod
    async def _release(self, success: bool) -> None:
        """Release the exclusive session."""

    @abstractmethod
    async def _load(self) -> str | None:
        """Raw document text, or None when nothing is stored."""

    @abstractmethod
    async def _store(self, raw: str) -> None:
        """Replace the raw document text."""
