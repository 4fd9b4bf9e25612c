# src/deployment/coordinator.py — v1
"""Idempotent fetch-or-deploy over the per-network manifest.

Each call runs in two phases:

1. Under the manifest's exclusive session: read the slot for the logical key,
   let the resumer reuse the stored record or deploy a new one, and write the
   record back before the session is released. Other processes targeting the
   same key then see the pending record and resume it instead of deploying a
   duplicate.
2. Outside the session: wait for the deployment to settle. Settlement can
   take minutes and must not block other keys.

If settlement (or resumption) proves the record invalid, a second session
clears the slot, but only if it still holds the failed transaction, then the
original error is re-raised. No state is cached between calls.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, TypeVar

from fetchdeploy.config.settings import Settings
from fetchdeploy.core.lenses import LensFactory, path_lens
from fetchdeploy.core.models import Deployment, ImplDeployment
from fetchdeploy.core.version import Version
from fetchdeploy.deployment.errors import InvalidDeployment
from fetchdeploy.deployment.resumer import resume_or_deploy
from fetchdeploy.deployment.validator import wait_and_validate_deployment
from fetchdeploy.logging.context import deployment_context, phase_context
from fetchdeploy.manifest.base_manifest_store import BaseManifestStore
from fetchdeploy.manifest.manifest_factory import create_manifest_store
from fetchdeploy.network.base_provider import BaseProvider

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Deployment)

DeployFn = Callable[[], Awaitable[T]]
StoreFactory = Callable[[BaseProvider], Awaitable[BaseManifestStore]]
Resumer = Callable[
    [BaseProvider, Deployment | None, Callable[[], Awaitable[Deployment]]],
    Awaitable[Deployment],
]
Validator = Callable[[BaseProvider, Deployment], Awaitable[None]]

ADMIN_KEY = "admin"


def impl_lens(version: Version) -> LensFactory:
    """Lens factory for the implementation slot of ``version``."""
    return path_lens("impls", version.without_metadata)


def admin_lens() -> LensFactory:
    """Lens factory for the singleton admin slot."""
    return path_lens(ADMIN_KEY)


def same_deployment(stored: Deployment, failed: Deployment) -> bool:
    """Whether ``stored`` is the record that ``failed`` was raised for."""
    if failed.tx_hash is not None:
        return stored.tx_hash == failed.tx_hash
    return stored.tx_hash is None and stored.address == failed.address


class DeploymentCoordinator:
    """Fetch a recorded deployment for a logical key, or deploy and record one."""

    def __init__(
        self,
        settings: Settings | None = None,
        store_factory: StoreFactory | None = None,
        resumer: Resumer | None = None,
        validator: Validator | None = None,
    ) -> None:
        self._settings = settings or Settings()
        self._store_factory = store_factory or self._open_store
        self._resumer = resumer or self._resume
        self._validator = validator or self._validate

    async def fetch_or_deploy(
        self,
        version: Version | str,
        provider: BaseProvider,
        deploy: DeployFn[ImplDeployment],
    ) -> str:
        """Address of the implementation recorded for ``version``, deploying if needed."""
        if isinstance(version, str):
            version = Version.parse(version)
        return await self.fetch_or_deploy_generic(
            impl_lens(version), provider, deploy, key=f"impls/{version.without_metadata}"
        )

    async def fetch_or_deploy_admin(
        self, provider: BaseProvider, deploy: DeployFn[Deployment]
    ) -> str:
        """Address of the network's admin deployment, deploying if needed."""
        return await self.fetch_or_deploy_generic(
            admin_lens(), provider, deploy, key=ADMIN_KEY
        )

    async def fetch_or_deploy_generic(
        self,
        lens: LensFactory,
        provider: BaseProvider,
        deploy: DeployFn[T],
        key: str = "",
    ) -> str:
        """Run fetch-or-deploy for the slot selected by ``lens``.

        Raises:
            InvalidDeployment: The record failed to settle; the slot has been
                cleared unless another process already replaced it.
            Any error from the store, the deploy callback, the resumer or the
                validator, unchanged.
        """
        store = await self._store_factory(provider)
        try:
            with deployment_context(store.network_name, key or "-"):
                try:
                    with phase_context("locked"):
                        deployment = await store.locked_run(
                            lambda: self._resume_locked(store, lens, provider, deploy)
                        )
                    with phase_context("settle"):
                        await self._validator(provider, deployment)
                except InvalidDeployment as e:
                    logger.warning("%s", e)
                    with phase_context("cleanup"):
                        await store.locked_run(
                            lambda: self._clear_if_unchanged(store, lens, e.deployment)
                        )
                    raise
        finally:
            store.close()

        return deployment.address

    async def _resume_locked(
        self,
        store: BaseManifestStore,
        lens: LensFactory,
        provider: BaseProvider,
        deploy: DeployFn[T],
    ) -> Deployment:
        data = await store.read()
        slot = lens(data)
        stored = slot.get()
        updated = await self._resumer(provider, stored, deploy)
        if updated is not stored:
            slot.set(updated)
            await store.write(data)
            logger.info("Recorded deployment %s (tx %s)", updated.address, updated.tx_hash)
        return updated

    async def _clear_if_unchanged(
        self, store: BaseManifestStore, lens: LensFactory, failed: Deployment
    ) -> None:
        data = await store.read()
        slot = lens(data)
        stored = slot.get()
        if stored is not None and same_deployment(stored, failed):
            slot.set(None)
            await store.write(data)
            logger.info("Removed invalid deployment %s from manifest", failed.address)
        else:
            logger.info("Manifest slot already changed; leaving it untouched")

    async def _open_store(self, provider: BaseProvider) -> BaseManifestStore:
        return await create_manifest_store(provider, self._settings)

    async def _resume(
        self,
        provider: BaseProvider,
        stored: Deployment | None,
        deploy: Callable[[], Awaitable[Deployment]],
    ) -> Deployment:
        return await resume_or_deploy(
            provider, stored, deploy, dev_chain_ids=self._settings.dev_chain_ids_list
        )

    async def _validate(self, provider: BaseProvider, deployment: Deployment) -> None:
        await wait_and_validate_deployment(
            provider,
            deployment,
            poll_interval_s=self._settings.validation_poll_interval_s,
            timeout_s=self._settings.validation_timeout_s,
        )


async def fetch_or_deploy(
    version: Version | str,
    provider: BaseProvider,
    deploy: DeployFn[ImplDeployment],
    settings: Settings | None = None,
) -> str:
    """Module-level shortcut for ``DeploymentCoordinator.fetch_or_deploy``."""
    return await DeploymentCoordinator(settings).fetch_or_deploy(version, provider, deploy)


async def fetch_or_deploy_admin(
    provider: BaseProvider,
    deploy: DeployFn[Deployment],
    settings: Settings | None = None,
) -> str:
    """Module-level shortcut for ``DeploymentCoordinator.fetch_or_deploy_admin``."""
    return await DeploymentCoordinator(settings).fetch_or_deploy_admin(provider, deploy)
