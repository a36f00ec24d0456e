"""
Library configuration using Pydantic Settings.
All configuration is loaded from ``EASYCRYPTO_``-prefixed environment variables
with sensible defaults.
"""

from functools import lru_cache
from typing import Literal, Self

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Library settings loaded from environment variables.

    The scrypt cost parameters are the ones implied by
    ``HashAlgorithm.SCRYPT``: envelopes hashed under one set of values only
    verify under the same values, so changing them in a deployment means
    stored credentials must be rehashed (or verified with explicit params).
    """

    model_config = SettingsConfigDict(
        env_prefix="EASYCRYPTO_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Core Settings
    # ==========================================================================
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # ==========================================================================
    # Password Hashing (scrypt)
    # ==========================================================================
    scrypt_cost: int = Field(
        default=16384,
        ge=2,
        description="CPU/memory cost (N); must be a power of two",
    )
    scrypt_block_size: int = Field(default=8, ge=1, description="Block size (r)")
    scrypt_parallelization: int = Field(
        default=1, ge=1, description="Parallelization factor (p)"
    )

    @field_validator("scrypt_cost")
    @classmethod
    def _validate_scrypt_cost(cls, value: int) -> int:
        if value & (value - 1):
            raise ValueError("scrypt_cost must be a power of two")
        return value

    @model_validator(mode="after")
    def _validate_production_settings(self) -> Self:
        """Refuse weakened scrypt parameters outside development."""
        if self.environment in ("production", "staging") and self.scrypt_cost < 16384:
            raise ValueError(
                f"scrypt_cost must be at least 16384 in {self.environment} environment"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """
    Get cached library settings.

    Using lru_cache ensures settings are loaded once and reused,
    avoiding repeated environment variable parsing.
    """
    return Settings()
