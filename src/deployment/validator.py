# src/deployment/validator.py — v1
"""Wait for a deployment to settle and assert it succeeded."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

from fetchdeploy.core.models import Deployment
from fetchdeploy.deployment.errors import DeploymentTimeout, InvalidDeployment
from fetchdeploy.deployment.resumer import is_empty_code
from fetchdeploy.network.base_provider import BaseProvider

logger = logging.getLogger(__name__)


def _receipt_failed(receipt: dict[str, Any]) -> bool:
    status = receipt.get("status")
    if status is None:
        # Pre-Byzantium receipts carry no status.
        return False
    if isinstance(status, str):
        return int(status, 16) == 0
    return int(status) == 0


async def wait_and_validate_deployment(
    provider: BaseProvider,
    deployment: Deployment,
    poll_interval_s: float = 2.0,
    timeout_s: float = 600.0,
) -> None:
    """Block until ``deployment`` is mined and has code.

    Raises:
        InvalidDeployment: Transaction reverted, was dropped, or left no code.
        DeploymentTimeout: Transaction still pending after ``timeout_s``.
    """
    if deployment.tx_hash is not None:
        deadline = time.monotonic() + timeout_s
        while True:
            receipt = await provider.get_transaction_receipt(deployment.tx_hash)
            if receipt is not None:
                if _receipt_failed(receipt):
                    raise InvalidDeployment(deployment, "transaction reverted")
                break

            if await provider.get_transaction(deployment.tx_hash) is None:
                raise InvalidDeployment(deployment, "transaction was dropped")

            if time.monotonic() >= deadline:
                raise DeploymentTimeout(deployment, timeout_s)

            logger.debug("Waiting for tx %s to be mined", deployment.tx_hash)
            await asyncio.sleep(poll_interval_s)

    code = await provider.get_code(deployment.address)
    if is_empty_code(code):
        raise InvalidDeployment(deployment, "no code at address")
    logger.debug("Deployment %s validated", deployment.address)
