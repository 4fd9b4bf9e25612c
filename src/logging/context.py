# src/logging/context.py — v2
"""Contextual logging support — attach network, key and phase to log records.

Context lives in contextvars, so concurrent coordinator calls on one event
loop each see their own values.
"""

from __future__ import annotations

import contextvars
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator

_network: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "network", default=None
)
_key: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "key", default=None
)
_phase: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "phase", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    network: str | None = None
    key: str | None = None
    phase: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(network=_network.get(), key=_key.get(), phase=_phase.get())


@contextmanager
def deployment_context(network: str, key: str) -> Iterator[None]:
    """Scope network and logical key for one fetch-or-deploy call."""
    network_token = _network.set(network)
    key_token = _key.set(key)
    try:
        yield
    finally:
        _key.reset(key_token)
        _network.reset(network_token)


@contextmanager
def phase_context(phase: str) -> Iterator[None]:
    """Scope the current coordinator phase (locked, settle, cleanup)."""
    token = _phase.set(phase)
    try:
        yield
    finally:
        _phase.reset(token)


def clear_context() -> None:
    """Reset all context variables."""
    _network.set(None)
    _key.set(None)
    _phase.set(None)
