# src/network/base_provider.py — v1
"""Abstract blockchain provider interface.

Only the read calls the deployment layer needs: chain identity, code at an
address, and transaction / receipt lookup.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class ProviderError(Exception):
    """Raised when the node rejects or fails a request."""

    def __init__(self, method: str, message: str, code: int | None = None):
        self.method = method
        self.code = code
        super().__init__(f"{method} failed: {message}")


class BaseProvider(ABC):
    """Unified interface for blockchain network access."""

    @abstractmethod
    async def get_chain_id(self) -> int:
        """Chain id of the connected network."""

    @abstractmethod
    async def get_code(self, address: str) -> str:
        """Runtime bytecode at ``address`` as 0x-prefixed hex ("0x" if none)."""

    @abstractmethod
    async def get_transaction(self, tx_hash: str) -> dict[str, Any] | None:
        """Transaction by hash, or None when the node does not know it."""

    @abstractmethod
    async def get_transaction_receipt(self, tx_hash: str) -> dict[str, Any] | None:
        """Receipt by hash, or None while the transaction is pending."""
