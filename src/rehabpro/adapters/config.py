# src/rehabpro/adapters/config.py
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    # App & logging
    ENV: str = Field(default="dev")
    LOG_LEVEL: str = Field(default="INFO")

    # Settings profile used when a caller does not identify a user
    DEFAULT_USER_ID: str = Field(default="default")

    # Decimal places for money / percent values returned by the HTTP API
    API_ROUND_DIGITS: int = Field(default=2)

    model_config = SettingsConfigDict(
        env_prefix="REHABPRO_",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def _upper_level(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @field_validator("API_ROUND_DIGITS", mode="before")
    @classmethod
    def _digits_range(cls, v: Any) -> Any:
        try:
            n = int(v)
        except (TypeError, ValueError) as err:
            raise ValueError("API_ROUND_DIGITS must be an integer") from err
        if not (0 <= n <= 6):
            raise ValueError("API_ROUND_DIGITS must be between 0 and 6")
        return n


config = AppConfig()
