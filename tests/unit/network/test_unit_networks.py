# tests/unit/network/test_networks.py — v1
"""Tests for network/networks.py — network naming and dev detection."""

from __future__ import annotations

import pytest

from fetchdeploy.network.networks import is_development_network, network_name


class TestNetworkName:
    @pytest.mark.parametrize("chain_id,expected", [
        (1, "mainnet"),
        (11155111, "sepolia"),
        (137, "polygon"),
        (31337, "unknown-31337"),
        (999999, "unknown-999999"),
    ])
    def test_names(self, chain_id, expected):
        assert network_name(chain_id) == expected


class TestIsDevelopmentNetwork:
    @pytest.mark.asyncio
    async def test_default_dev_ids(self, dev_provider, provider):
        assert await is_development_network(dev_provider) is True
        assert await is_development_network(provider) is False

    @pytest.mark.asyncio
    async def test_custom_dev_ids(self, provider):
        assert await is_development_network(provider, [11155111]) is True
        assert await is_development_network(provider, []) is False
