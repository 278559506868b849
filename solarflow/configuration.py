"""Mini README: Centralised configuration models and helpers for SolarFlow.

Structure:
    * SolarFlowSettings - Pydantic model describing runtime configuration.
    * get_settings - cached accessor for environment-aware settings.

Usage:
    Import ``get_settings`` to read ``SOLARFLOW_*`` environment variables
    (or a local ``.env`` file), choose the initial energy rates, and
    specify service ports. The configuration is cached so validation
    happens only once per process.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SolarFlowSettings(BaseSettings):
    """Runtime configuration for the SolarFlow ledger service."""

    model_config = SettingsConfigDict(
        env_prefix="SOLARFLOW_",
        env_file=".env",
        case_sensitive=False,
    )

    environment: str = Field(
        "development",
        description="Environment label controlling debug toggles and logging levels.",
    )
    interface_host: str = Field(
        "0.0.0.0",
        description="Network interface for the ledger API to bind to.",
    )
    interface_port: int = Field(
        8000,
        description="Default port the ledger API exposes.",
        ge=1,
        le=65535,
    )
    standard_rate: Decimal = Field(
        Decimal("0.10"),
        description="Initial off-peak price per kWh used to value energy sales.",
        ge=0,
    )
    peak_rate: Decimal = Field(
        Decimal("0.15"),
        description="Initial peak-hour price per kWh.",
        ge=0,
    )
    seed_demo_data: bool = Field(
        True,
        description="Populate services built from settings with the demo devices and users.",
    )
    currency_symbol: str = Field(
        "KRNL",
        description="Unit of account appended to formatted balances.",
    )
    log_level: str = Field(
        "INFO",
        description="Root logging level applied by the command line launcher.",
    )

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        """Accept any standard logging level name regardless of casing."""

        normalised = value.strip().upper()
        if not isinstance(logging.getLevelName(normalised), int):
            raise ValueError(f"Unknown log level: {value}")
        return normalised


@lru_cache()
def get_settings() -> SolarFlowSettings:
    """Return cached settings, ensuring consistent configuration across modules."""

    return SolarFlowSettings()
