# src/deployment/resumer.py — v1
"""Decide whether a stored record can be resumed or a fresh deploy is needed."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, TypeVar

from fetchdeploy.core.models import Deployment
from fetchdeploy.deployment.errors import InvalidDeployment
from fetchdeploy.network.base_provider import BaseProvider
from fetchdeploy.network.networks import is_development_network

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Deployment)


def is_empty_code(code: str | None) -> bool:
    """Whether ``eth_getCode`` output denotes an address without code."""
    return code is None or code in ("", "0x", "0x0")


async def resume_or_deploy(
    provider: BaseProvider,
    stored: T | None,
    deploy: Callable[[], Awaitable[T]],
    dev_chain_ids: list[int] | None = None,
) -> T:
    """Return ``stored`` if it is still usable, else the result of ``deploy()``.

    A stored record with a transaction hash is resumed while the node still
    knows the transaction, pending or mined. Records without a hash are
    resumed when code exists at their address. An unusable record raises
    ``InvalidDeployment`` on live networks; development chains are reset
    often, so there it is silently replaced.

    Never writes to the manifest; ``deploy`` is called at most once.
    """
    if stored is not None:
        if stored.tx_hash is not None:
            tx = await provider.get_transaction(stored.tx_hash)
            if tx is not None:
                logger.debug("Resuming deployment %s (tx %s)", stored.address, stored.tx_hash)
                return stored
            reason = f"transaction {stored.tx_hash} not found"
        else:
            code = await provider.get_code(stored.address)
            if not is_empty_code(code):
                logger.debug("Reusing deployment %s", stored.address)
                return stored
            reason = f"no code at {stored.address}"

        if not await is_development_network(provider, dev_chain_ids):
            raise InvalidDeployment(stored, reason)
        logger.info("Ignoring stale deployment on development network: %s", reason)

    deployment = await deploy()
    logger.info("Deployed %s (tx %s)", deployment.address, deployment.tx_hash)
    return deployment
