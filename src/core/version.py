# src/core/version.py — v1
"""Logical keys for implementation deployments.

A version identifies an implementation independently of build metadata, so
two builds of the same release share one manifest slot.
"""

from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass

_SEMVER_RE = re.compile(
    r"^v?(?P<core>(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*))"
    r"(?:-(?P<pre>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+(?P<build>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$"
)


@dataclass(frozen=True)
class Version:
    """Version identifier with and without metadata."""

    with_metadata: str
    without_metadata: str

    @classmethod
    def parse(cls, text: str) -> Version:
        """Parse a semantic version, dropping pre-release and build metadata.

        Raises:
            ValueError: If ``text`` is not a semantic version.
        """
        match = _SEMVER_RE.match(text.strip())
        if match is None:
            raise ValueError(f"Invalid version identifier: {text!r}")
        return cls(
            with_metadata=text.strip().lstrip("v"),
            without_metadata=match.group("core"),
        )

    @classmethod
    def from_bytecode(cls, bytecode: str) -> Version:
        """Derive a version from contract creation bytecode.

        The trailing Solidity CBOR metadata section is excluded from
        ``without_metadata``; its length is encoded in the final two bytes.

        Keys are sha256 hex digests (stdlib ``hashlib``, no keccak available).
        They only need to be stable within manifests written by this package
        and are not interchangeable with the keccak256 version keys that
        other EVM upgrade tooling writes, so bytecode-derived entries are
        never matched across the two.
        """
        raw = _hex_to_bytes(bytecode)
        return cls(
            with_metadata=hashlib.sha256(raw).hexdigest(),
            without_metadata=hashlib.sha256(_strip_metadata(raw)).hexdigest(),
        )

    def __str__(self) -> str:
        return self.with_metadata


def _hex_to_bytes(bytecode: str) -> bytes:
    text = bytecode[2:] if bytecode.startswith(("0x", "0X")) else bytecode
    try:
        return bytes.fromhex(text)
    except ValueError as e:
        raise ValueError(f"Invalid bytecode: {e}") from e


def _strip_metadata(raw: bytes) -> bytes:
    if len(raw) < 2:
        return raw
    metadata_length = int.from_bytes(raw[-2:], "big")
    if metadata_length + 2 > len(raw):
        return raw
    return raw[: -(metadata_length + 2)]
