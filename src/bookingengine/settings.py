"""Engine defaults read from the environment via pydantic settings."""

from decimal import Decimal
from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    """Typed engine configuration.

    Every field can be overridden with a ``BOOKING_ENGINE_`` prefixed
    environment variable, e.g. ``BOOKING_ENGINE_ROUNDING_MODE=half_even``.
    """

    model_config = SettingsConfigDict(
        env_prefix="BOOKING_ENGINE_",
        env_file=".env",
        extra="ignore",
    )

    default_currency: str = "usd"
    default_platform_fee_percent: Decimal = Field(Decimal("5"), ge=0, le=100)
    default_processor_fee_percent: Decimal = Field(Decimal("2.9"), ge=0, lt=100)
    default_processor_fee_fixed: Decimal = Field(Decimal("0.30"), ge=0)
    default_fee_label: str = "Service Fee"
    rounding_mode: Literal["half_up", "half_even"] = "half_up"
    log_level: str = "WARNING"

    @field_validator("default_currency", mode="before")
    @classmethod
    def _lowercase_currency(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("log_level", mode="before")
    @classmethod
    def _uppercase_level(cls, value: str) -> str:
        return value.strip().upper()


@lru_cache
def get_settings() -> EngineSettings:
    """Return cached engine settings."""
    return EngineSettings()
