# src/network/jsonrpc_provider.py — v1
"""Ethereum JSON-RPC provider over HTTP (aiohttp)."""

from __future__ import annotations

import itertools
import logging
from typing import Any

import aiohttp

from fetchdeploy.network.base_provider import BaseProvider, ProviderError

logger = logging.getLogger(__name__)


class JsonRpcProvider(BaseProvider):
    """Provider talking to a node's JSON-RPC HTTP endpoint."""

    def __init__(self, url: str, timeout_s: float = 30.0) -> None:
        self._url = url
        self._timeout = aiohttp.ClientTimeout(total=timeout_s)
        self._ids = itertools.count(1)
        self._chain_id: int | None = None

    @property
    def url(self) -> str:
        return self._url

    async def get_chain_id(self) -> int:
        # Chain id cannot change for an endpoint.
        if self._chain_id is None:
            self._chain_id = int(await self._request("eth_chainId", []), 16)
        return self._chain_id

    async def get_code(self, address: str) -> str:
        return await self._request("eth_getCode", [address, "latest"])

    async def get_transaction(self, tx_hash: str) -> dict[str, Any] | None:
        return await self._request("eth_getTransactionByHash", [tx_hash])

    async def get_transaction_receipt(self, tx_hash: str) -> dict[str, Any] | None:
        return await self._request("eth_getTransactionReceipt", [tx_hash])

    async def _request(self, method: str, params: list[Any]) -> Any:
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params,
        }
        logger.debug("RPC %s %s", method, params)
        try:
            async with aiohttp.ClientSession(timeout=self._timeout) as session:
                async with session.post(self._url, json=payload) as resp:
                    if resp.status != 200:
                        error_text = await resp.text()
                        raise ProviderError(method, f"HTTP {resp.status}: {error_text}")
                    body = await resp.json(content_type=None)
        except aiohttp.ClientError as e:
            raise ProviderError(method, str(e)) from e

        if "error" in body:
            error = body["error"] or {}
            raise ProviderError(
                method, error.get("message", "unknown error"), error.get("code")
            )
        return body.get("result")
