# src/core/models.py — v2
"""Manifest domain models: Deployment, ImplDeployment, ManifestData.

No module redefines these types — all imports come from core.models.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

MANIFEST_VERSION = "3.2"


class Deployment(BaseModel):
    """A contract deployed on-chain, identified by its address.

    ``tx_hash`` is missing for records imported from tooling that did not
    track the creation transaction.
    """

    model_config = ConfigDict(extra="allow")

    address: str
    tx_hash: str | None = None


class ImplDeployment(Deployment):
    """Implementation contract deployment with staleness metadata."""

    layout: dict[str, Any] | None = None
    bytecode_hash: str | None = None


class ManifestData(BaseModel):
    """Whole per-network manifest document.

    Each logical key maps to at most one record: ``admin`` is the singleton
    slot, ``impls`` is keyed by version without metadata.
    """

    model_config = ConfigDict(extra="allow")

    manifest_version: str = MANIFEST_VERSION
    admin: Deployment | None = None
    impls: dict[str, ImplDeployment] = Field(default_factory=dict)
