# src/network/networks.py — v1
"""Network identity: chain id to manifest name, development detection."""

from __future__ import annotations

from fetchdeploy.network.base_provider import BaseProvider

NETWORK_NAMES: dict[int, str] = {
    1: "mainnet",
    5: "goerli",
    10: "optimism",
    56: "bsc",
    100: "xdai",
    137: "polygon",
    8453: "base",
    42161: "arbitrum-one",
    43114: "avalanche",
    80001: "polygon-mumbai",
    11155111: "sepolia",
}

DEFAULT_DEV_CHAIN_IDS: frozenset[int] = frozenset({1337, 31337})


def network_name(chain_id: int) -> str:
    """Manifest name for a chain id (``unknown-<id>`` when not a known chain)."""
    return NETWORK_NAMES.get(chain_id, f"unknown-{chain_id}")


async def is_development_network(
    provider: BaseProvider,
    dev_chain_ids: frozenset[int] | set[int] | list[int] | None = None,
) -> bool:
    """Whether the provider is connected to a local development chain."""
    chain_id = await provider.get_chain_id()
    ids = DEFAULT_DEV_CHAIN_IDS if dev_chain_ids is None else dev_chain_ids
    return chain_id in ids
