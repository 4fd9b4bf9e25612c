# tests/conftest.py — v2
"""Shared test fixtures for all unit and integration tests.

Provides an in-memory chain provider, settings rooted in a temp directory and
sample deployments. No external services — the chain is simulated.
"""

from __future__ import annotations

import itertools
from pathlib import Path
from typing import Any

import pytest

from fetchdeploy.config.settings import Settings
from fetchdeploy.core.models import Deployment, ImplDeployment
from fetchdeploy.network.base_provider import BaseProvider

SAMPLE_CODE = "0x6080604052348015600f57600080fd5b50"


class FakeChainProvider(BaseProvider):
    """In-memory chain: transactions, receipts and code keyed by hash/address.

    ``submit`` registers a pending transaction; ``mine`` settles it with a
    success or revert receipt; ``drop`` forgets it as a node would after a
    reorg or a chain reset.
    """

    def __init__(self, chain_id: int = 11155111) -> None:
        self.chain_id = chain_id
        self.codes: dict[str, str] = {}
        self.transactions: dict[str, dict[str, Any]] = {}
        self.receipts: dict[str, dict[str, Any]] = {}
        self.calls: list[str] = []
        self._counter = itertools.count(1)

    async def get_chain_id(self) -> int:
        self.calls.append("get_chain_id")
        return self.chain_id

    async def get_code(self, address: str) -> str:
        self.calls.append("get_code")
        return self.codes.get(address, "0x")

    async def get_transaction(self, tx_hash: str) -> dict[str, Any] | None:
        self.calls.append("get_transaction")
        return self.transactions.get(tx_hash)

    async def get_transaction_receipt(self, tx_hash: str) -> dict[str, Any] | None:
        self.calls.append("get_transaction_receipt")
        return self.receipts.get(tx_hash)

    def submit(self, address: str | None = None, tx_hash: str | None = None) -> tuple[str, str]:
        n = next(self._counter)
        address = address or f"0x{n:040x}"
        tx_hash = tx_hash or f"0x{n:064x}"
        self.transactions[tx_hash] = {"hash": tx_hash, "to": None}
        return address, tx_hash

    def mine(self, address: str, tx_hash: str, success: bool = True) -> None:
        self.receipts[tx_hash] = {
            "transactionHash": tx_hash,
            "contractAddress": address,
            "status": "0x1" if success else "0x0",
        }
        if success:
            self.codes[address] = SAMPLE_CODE

    def drop(self, tx_hash: str) -> None:
        self.transactions.pop(tx_hash, None)
        self.receipts.pop(tx_hash, None)

    def deployer(self, success: bool = True, mine: bool = True, cls: type = ImplDeployment):
        """Deploy callback that submits (and optionally mines) a new contract."""
        calls: list[Deployment] = []

        async def deploy() -> Deployment:
            address, tx_hash = self.submit()
            if mine:
                self.mine(address, tx_hash, success=success)
            deployment = cls(address=address, tx_hash=tx_hash)
            calls.append(deployment)
            return deployment

        deploy.calls = calls  # type: ignore[attr-defined]
        return deploy


# === FIXTURES ===


@pytest.fixture
def provider() -> FakeChainProvider:
    """Provider on a live (non-development) network."""
    return FakeChainProvider()


@pytest.fixture
def dev_provider() -> FakeChainProvider:
    """Provider on a local development network."""
    return FakeChainProvider(chain_id=31337)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings with JSON manifests under tmp_path and fast polling."""
    return Settings(
        _env_file=None,
        manifest_dir=tmp_path / "manifests",
        lock_timeout_s=2.0,
        lock_poll_interval_s=0.01,
        validation_poll_interval_s=0.01,
        validation_timeout_s=0.5,
    )


@pytest.fixture
def sample_deployment() -> ImplDeployment:
    return ImplDeployment(
        address="0x00000000000000000000000000000000000000aa",
        tx_hash="0x01",
        bytecode_hash="abc123",
    )
