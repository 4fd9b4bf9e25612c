# src/__init__.py — v1
"""fetchdeploy — idempotent fetch-or-deploy of on-chain contracts."""

from fetchdeploy.deployment.coordinator import (
    DeploymentCoordinator,
    fetch_or_deploy,
    fetch_or_deploy_admin,
)
from fetchdeploy.version import __version__

__all__ = [
    "DeploymentCoordinator",
    "__version__",
    "fetch_or_deploy",
    "fetch_or_deploy_admin",
]
