# src/manifest/manifest_factory.py — v1
"""Factory for per-network manifest store instantiation."""

from __future__ import annotations

from fetchdeploy.config.settings import Settings
from fetchdeploy.manifest.base_manifest_store import BaseManifestStore
from fetchdeploy.network.base_provider import BaseProvider
from fetchdeploy.network.networks import network_name


async def create_manifest_store(
    provider: BaseProvider, settings: Settings | None = None
) -> BaseManifestStore:
    """Open the manifest store for the provider's network.

    Args:
        provider: Provider whose chain id selects the network document.
        settings: Application settings. Defaults to the JSON backend.

    Returns:
        Configured BaseManifestStore implementation.
    """
    settings = settings or Settings()
    name = network_name(await provider.get_chain_id())
    return create_store_for_network(name, settings)


def create_store_for_network(name: str, settings: Settings) -> BaseManifestStore:
    """Instantiate the configured backend for a network name."""
    backend = settings.manifest_backend

    if backend == "json":
        from fetchdeploy.manifest.json_store import JsonManifestStore
        return JsonManifestStore(
            manifest_dir=settings.manifest_dir,
            network_name=name,
            lock_timeout_s=settings.lock_timeout_s,
            lock_poll_interval_s=settings.lock_poll_interval_s,
        )

    if backend == "sqlite":
        from fetchdeploy.manifest.sqlite_store import SqliteManifestStore
        return SqliteManifestStore(
            db_path=settings.manifest_dir / "manifests.db",
            network_name=name,
            lock_timeout_s=settings.lock_timeout_s,
            lock_poll_interval_s=settings.lock_poll_interval_s,
        )

    if backend == "redis":
        from fetchdeploy.manifest.redis_store import RedisManifestStore
        if not settings.manifest_redis_url:
            raise ValueError(
                "MANIFEST_REDIS_URL must be set when MANIFEST_BACKEND=redis"
            )
        return RedisManifestStore(
            redis_url=settings.manifest_redis_url,
            network_name=name,
            lock_timeout_s=settings.lock_timeout_s,
            lock_poll_interval_s=settings.lock_poll_interval_s,
        )

    raise ValueError(f"Unsupported manifest backend: {backend!r}")
