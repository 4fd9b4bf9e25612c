# src/deployment/errors.py — v1
"""Deployment failure taxonomy.

Only ``InvalidDeployment`` means "the recorded deployment is known bad"; the
coordinator matches on that type alone to purge manifest records.
"""

from __future__ import annotations

from fetchdeploy.core.models import Deployment


class DeploymentError(Exception):
    """Base class for deployment failures."""


class InvalidDeployment(DeploymentError):
    """A recorded deployment did not settle successfully on-chain."""

    def __init__(self, deployment: Deployment, reason: str = "deployment is invalid"):
        self.deployment = deployment
        self.reason = reason
        tx = f" (tx {deployment.tx_hash})" if deployment.tx_hash else ""
        super().__init__(f"Invalid deployment at {deployment.address}{tx}: {reason}")


class DeploymentTimeout(DeploymentError):
    """Settlement did not complete in time; the deployment may still succeed."""

    def __init__(self, deployment: Deployment, timeout_s: float):
        self.deployment = deployment
        self.timeout_s = timeout_s
        super().__init__(
            f"Timed out after {timeout_s:.0f}s waiting for deployment at "
            f"{deployment.address} (tx {deployment.tx_hash})"
        )
