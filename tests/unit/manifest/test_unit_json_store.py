# tests/unit/manifest/test_unit_json_store.py — v1
"""Tests for manifest/json_store.py and the shared session rules."""

from __future__ import annotations

import asyncio
import fcntl
import json
from pathlib import Path

import pytest

from fetchdeploy.core.models import ManifestData
from fetchdeploy.manifest.base_manifest_store import (
    ManifestCorruptError,
    ManifestLockError,
    ManifestLockTimeout,
)
from fetchdeploy.manifest.json_store import JsonManifestStore


@pytest.fixture
def store(tmp_path):
    return JsonManifestStore(
        manifest_dir=tmp_path, network_name="sepolia",
        lock_timeout_s=0.2, lock_poll_interval_s=0.01,
    )


class TestJsonManifestStore:
    @pytest.mark.asyncio
    async def test_read_absent_is_empty(self, store):
        data = await store.read()
        assert data == ManifestData()
        assert not store.path.exists()

    @pytest.mark.asyncio
    async def test_write_and_read(self, store, sample_deployment):
        async def update():
            data = await store.read()
            data.impls["1.0.0"] = sample_deployment
            await store.write(data)

        await store.locked_run(update)
        data = await store.read()
        assert data.impls["1.0.0"].address == sample_deployment.address
        on_disk = json.loads(store.path.read_text(encoding="utf-8"))
        assert on_disk["impls"]["1.0.0"]["tx_hash"] == "0x01"
        assert "admin" not in on_disk

    @pytest.mark.asyncio
    async def test_write_outside_session_rejected(self, store):
        with pytest.raises(ManifestLockError, match="without holding the lock"):
            await store.write(ManifestData())

    @pytest.mark.asyncio
    async def test_nested_session_rejected(self, store):
        async def outer():
            await store.locked_run(store.read)

        with pytest.raises(ManifestLockError, match="already locked"):
            await store.locked_run(outer)
        assert store.locked is False

    @pytest.mark.asyncio
    async def test_released_after_error(self, store):
        async def fail():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            await store.locked_run(fail)
        assert store.locked is False
        # Lock is free again: a second session succeeds.
        assert await store.locked_run(store.read) == ManifestData()

    @pytest.mark.asyncio
    async def test_returns_callback_result(self, store):
        async def compute():
            return 42

        assert await store.locked_run(compute) == 42

    @pytest.mark.asyncio
    async def test_lock_timeout_when_held_elsewhere(self, store):
        with store.lock_path.open("a+") as other:
            fcntl.flock(other.fileno(), fcntl.LOCK_EX)
            with pytest.raises(ManifestLockTimeout, match="sepolia"):
                await store.locked_run(store.read)
            fcntl.flock(other.fileno(), fcntl.LOCK_UN)
        assert store.locked is False

    @pytest.mark.asyncio
    async def test_cancelled_wait_closes_lock_handle(self, tmp_path, monkeypatch):
        """Cancelling a caller queued on the lock leaves no open file behind."""
        store = JsonManifestStore(
            tmp_path, "sepolia", lock_timeout_s=5.0, lock_poll_interval_s=0.01
        )
        opened = []
        real_open = Path.open

        def tracking_open(self, *args, **kwargs):
            handle = real_open(self, *args, **kwargs)
            opened.append(handle)
            return handle

        with open(store.lock_path, "a+") as other:
            fcntl.flock(other.fileno(), fcntl.LOCK_EX)
            monkeypatch.setattr(Path, "open", tracking_open)
            waiter = asyncio.create_task(store.locked_run(store.read))
            await asyncio.sleep(0.05)
            waiter.cancel()
            with pytest.raises(asyncio.CancelledError):
                await waiter
            monkeypatch.undo()
            fcntl.flock(other.fileno(), fcntl.LOCK_UN)

        assert len(opened) == 1
        assert opened[0].closed
        assert store.locked is False
        assert await store.locked_run(store.read) == ManifestData()

    @pytest.mark.asyncio
    async def test_sessions_serialize(self, tmp_path):
        order: list[str] = []
        a = JsonManifestStore(tmp_path, "sepolia", lock_timeout_s=2.0, lock_poll_interval_s=0.01)
        b = JsonManifestStore(tmp_path, "sepolia", lock_timeout_s=2.0, lock_poll_interval_s=0.01)

        def session(name):
            async def run():
                order.append(f"{name}-enter")
                await asyncio.sleep(0.05)
                order.append(f"{name}-exit")
            return run

        await asyncio.gather(a.locked_run(session("a")), b.locked_run(session("b")))
        assert order in (
            ["a-enter", "a-exit", "b-enter", "b-exit"],
            ["b-enter", "b-exit", "a-enter", "a-exit"],
        )

    @pytest.mark.asyncio
    async def test_networks_use_separate_files(self, tmp_path):
        a = JsonManifestStore(tmp_path, "sepolia")
        b = JsonManifestStore(tmp_path, "mainnet")
        assert a.path != b.path
        assert a.lock_path != b.lock_path

    @pytest.mark.asyncio
    async def test_corrupt_document(self, store):
        store.path.write_text('{"impls": [1, 2]}', encoding="utf-8")
        with pytest.raises(ManifestCorruptError, match="sepolia"):
            await store.read()

    @pytest.mark.asyncio
    async def test_no_temp_files_left(self, store):
        async def update():
            await store.write(ManifestData())

        await store.locked_run(update)
        leftovers = [p for p in store.path.parent.iterdir() if p.suffix == ".tmp"]
        assert leftovers == []
