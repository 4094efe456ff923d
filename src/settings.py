"""
Configuration Management Module

Environment-based settings for the payments engine, read with pydantic-settings.
Every field can be overridden with a PAYMENTS_ prefixed variable, e.g.
PAYMENTS_LOG_LEVEL=INFO.
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class PaymentsSettings(BaseSettings):
    """Payments engine configuration"""

    # Logging configuration
    log_level: str = "WARNING"
    log_format: Literal["text", "json"] = "text"

    # Decimal places kept on input amounts; extra digits are truncated
    amount_precision: int = Field(default=4, ge=0, le=12)

    model_config = SettingsConfigDict(
        env_prefix="PAYMENTS_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level {value!r}")
        return level


def get_settings() -> PaymentsSettings:
    """
    Read settings from the environment.

    Raises pydantic.ValidationError when a PAYMENTS_ variable holds a bad value.
    """
    return PaymentsSettings()
