# src/config/settings.py — v2
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for manifest storage, settlement polling and logging.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Manifest storage ===
    manifest_backend: Literal["json", "sqlite", "redis"] = "json"
    manifest_dir: Path = Path(".fetchdeploy")
    manifest_redis_url: str = ""

    # === Exclusive session ===
    lock_timeout_s: float = 300.0
    lock_poll_interval_s: float = 0.25

    # === Settlement ===
    validation_poll_interval_s: float = 2.0
    validation_timeout_s: float = 600.0

    # === Network ===
    rpc_timeout_s: float = 30.0
    dev_chain_ids: str = "1337,31337"

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "text"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 5

    # --- Validators ---

    @field_validator(
        "lock_timeout_s",
        "lock_poll_interval_s",
        "validation_poll_interval_s",
        "validation_timeout_s",
        "rpc_timeout_s",
    )
    @classmethod
    def validate_positive(cls, v: float) -> float:  # noqa: N805
        if v <= 0:
            raise ValueError("must be > 0")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.manifest_backend == "redis" and not self.manifest_redis_url:
            errors.append("MANIFEST_BACKEND=redis requires MANIFEST_REDIS_URL")

        if self.lock_poll_interval_s >= self.lock_timeout_s:
            errors.append("LOCK_POLL_INTERVAL_S must be < LOCK_TIMEOUT_S")

        if self.validation_poll_interval_s >= self.validation_timeout_s:
            errors.append(
                "VALIDATION_POLL_INTERVAL_S must be < VALIDATION_TIMEOUT_S"
            )

        try:
            self.dev_chain_ids_list
        except ValueError:
            errors.append(f"DEV_CHAIN_IDS is not a list of integers: {self.dev_chain_ids!r}")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def dev_chain_ids_list(self) -> list[int]:
        """Parse comma-separated development chain ids."""
        return [int(c.strip()) for c in self.dev_chain_ids.split(",") if c.strip()]


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or per-call config).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
