"""Application configuration management using Pydantic Settings."""

import logging
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from finatlas.models.monte_carlo import MonteCarloConfig
from finatlas.models.projection import TaxAdjustment

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Application Environment
    app_env: str = Field(default="development", alias="APP_ENV")

    # Flask Configuration
    secret_key: str = Field(..., alias="SECRET_KEY")

    # Logging Configuration
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Monte Carlo defaults
    mc_default_simulations: int = Field(default=500, alias="MC_DEFAULT_SIMULATIONS")
    mc_default_volatility_pct: float = Field(
        default=15.0, alias="MC_DEFAULT_VOLATILITY_PCT"
    )
    mc_default_seed: int = Field(default=42, ge=0, alias="MC_DEFAULT_SEED")
    mc_max_workers: int = Field(default=1, ge=1, alias="MC_MAX_WORKERS")
    mc_deadline_seconds: Optional[float] = Field(
        default=None, gt=0, alias="MC_DEADLINE_SECONDS"
    )

    # Projection
    tax_adjustment: TaxAdjustment = Field(
        default=TaxAdjustment.DAMPENED, alias="TAX_ADJUSTMENT"
    )

    @field_validator("secret_key")
    @classmethod
    def validate_secret_key(cls, v):
        """Ensure SECRET_KEY is provided and not a placeholder."""
        if not v or v == "your-secret-key-here-change-in-production":
            raise ValueError("SECRET_KEY must be set to a secure value")
        return v

    @field_validator("app_env")
    @classmethod
    def validate_app_env(cls, v):
        """Validate application environment."""
        allowed_envs = {"development", "testing", "production"}
        if v not in allowed_envs:
            raise ValueError(f"APP_ENV must be one of {allowed_envs}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        allowed_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed_levels:
            raise ValueError(f"LOG_LEVEL must be one of {allowed_levels}")
        return v.upper()

    @field_validator("tax_adjustment", mode="before")
    @classmethod
    def validate_tax_adjustment(cls, v):
        """Accept the tax adjustment mode in any case."""
        return v.lower() if isinstance(v, str) else v

    def monte_carlo_defaults(self) -> MonteCarloConfig:
        """Monte Carlo configuration built from the MC_* settings."""
        return MonteCarloConfig(
            simulations=self.mc_default_simulations,
            volatility_pct=self.mc_default_volatility_pct,
            seed=self.mc_default_seed,
            max_workers=self.mc_max_workers,
            deadline_seconds=self.mc_deadline_seconds,
        )


def get_settings(env_file: Optional[str] = None) -> Settings:
    """Get application settings instance."""
    if env_file is not None:
        return Settings(_env_file=env_file)
    return Settings()


_settings: Optional[Settings] = None


def get_global_settings() -> Settings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        _settings = get_settings()
    return _settings


def reset_global_settings() -> None:
    """Reset global settings instance (useful for testing)."""
    global _settings
    _settings = None


def configure_logging(settings: Settings) -> None:
    """Apply the configured log level to the root logger."""
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
    logging.getLogger().setLevel(settings.log_level)
