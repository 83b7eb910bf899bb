"""Tests for application configuration management."""

import logging
import os
import tempfile
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from finatlas.config import (
    Settings,
    configure_logging,
    get_global_settings,
    get_settings,
    reset_global_settings,
)
from finatlas.models.projection import TaxAdjustment


class TestSettings:
    """Test cases for Settings class."""

    def test_settings_loads_from_env_file(self):
        """Test that settings can load from a .env file."""
        with tempfile.NamedTemporaryFile(mode="w", suffix=".env", delete=False) as f:
            f.write("APP_ENV=production\n")
            f.write("SECRET_KEY=test-secret-key-123\n")
            f.write("LOG_LEVEL=DEBUG\n")
            f.write("MC_DEFAULT_SIMULATIONS=250\n")
            temp_env_file = f.name

        try:
            with patch.dict(os.environ, {}, clear=True):
                settings = Settings(_env_file=temp_env_file)

                assert settings.app_env == "production"
                assert settings.secret_key == "test-secret-key-123"
                assert settings.log_level == "DEBUG"
                assert settings.mc_default_simulations == 250
        finally:
            os.unlink(temp_env_file)

    def test_missing_secret_key_raises_exception(self):
        """Test that missing SECRET_KEY raises ValidationError."""
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValidationError) as exc_info:
                Settings(_env_file=None)

            assert "SECRET_KEY" in str(exc_info.value)

    def test_placeholder_secret_key_raises_exception(self):
        """Test that placeholder SECRET_KEY raises ValidationError."""
        with patch.dict(
            os.environ,
            {"SECRET_KEY": "your-secret-key-here-change-in-production"},
            clear=True,
        ):
            with pytest.raises(ValidationError) as exc_info:
                Settings()

            assert "SECRET_KEY must be set to a secure value" in str(exc_info.value)

    def test_app_env_validation(self):
        """Test APP_ENV validation."""
        with patch.dict(
            os.environ,
            {"SECRET_KEY": "valid-secret-key-123", "APP_ENV": "invalid-env"},
            clear=True,
        ):
            with pytest.raises(ValidationError) as exc_info:
                Settings()

            assert "APP_ENV must be one of" in str(exc_info.value)

    def test_log_level_case_insensitive(self):
        """Test that LOG_LEVEL is case insensitive."""
        with patch.dict(
            os.environ,
            {"SECRET_KEY": "valid-secret-key-123", "LOG_LEVEL": "debug"},
            clear=True,
        ):
            settings = Settings()
            assert settings.log_level == "DEBUG"

    def test_log_level_validation(self):
        """Test LOG_LEVEL validation."""
        with patch.dict(
            os.environ,
            {"SECRET_KEY": "valid-secret-key-123", "LOG_LEVEL": "LOUD"},
            clear=True,
        ):
            with pytest.raises(ValidationError) as exc_info:
                Settings()

            assert "LOG_LEVEL must be one of" in str(exc_info.value)

    def test_default_values(self):
        """Test default values when environment variables are not set."""
        with patch.dict(os.environ, {"SECRET_KEY": "valid-secret-key-123"}, clear=True):
            settings = Settings()

            assert settings.app_env == "development"
            assert settings.log_level == "INFO"
            assert settings.tax_adjustment == TaxAdjustment.DAMPENED
            assert settings.mc_max_workers == 1
            assert settings.mc_deadline_seconds is None

    def test_tax_adjustment_any_case(self):
        """Test that TAX_ADJUSTMENT accepts upper-case names."""
        with patch.dict(
            os.environ,
            {"SECRET_KEY": "valid-secret-key-123", "TAX_ADJUSTMENT": "INDEXED"},
            clear=True,
        ):
            assert Settings().tax_adjustment == TaxAdjustment.INDEXED

    def test_invalid_worker_count(self):
        """Test that MC_MAX_WORKERS must be positive."""
        with patch.dict(
            os.environ,
            {"SECRET_KEY": "valid-secret-key-123", "MC_MAX_WORKERS": "0"},
            clear=True,
        ):
            with pytest.raises(ValidationError):
                Settings()

    def test_monte_carlo_defaults(self):
        """Test the Monte Carlo config built from settings."""
        with patch.dict(
            os.environ,
            {
                "SECRET_KEY": "valid-secret-key-123",
                "MC_DEFAULT_SIMULATIONS": "100",
                "MC_DEFAULT_VOLATILITY_PCT": "12.5",
                "MC_DEFAULT_SEED": "7",
                "MC_MAX_WORKERS": "4",
                "MC_DEADLINE_SECONDS": "30",
            },
            clear=True,
        ):
            config = Settings().monte_carlo_defaults()

            assert config.simulations == 100
            assert config.volatility_pct == 12.5
            assert config.seed == 7
            assert config.max_workers == 4
            assert config.deadline_seconds == 30


class TestSettingsAccessors:
    """Test module-level settings helpers."""

    def test_get_settings_function(self):
        """Test the get_settings function."""
        with patch.dict(os.environ, {"SECRET_KEY": "valid-secret-key-123"}, clear=True):
            settings = get_settings()
            assert isinstance(settings, Settings)

    def test_global_settings_cached(self):
        """Test that global settings are created once until reset."""
        with patch.dict(os.environ, {"SECRET_KEY": "valid-secret-key-123"}, clear=True):
            reset_global_settings()
            first = get_global_settings()

            assert get_global_settings() is first

            reset_global_settings()
            assert get_global_settings() is not first
        reset_global_settings()

    def test_configure_logging(self):
        """Test that the configured level reaches the root logger."""
        root = logging.getLogger()
        previous = root.level
        with patch.dict(
            os.environ,
            {"SECRET_KEY": "valid-secret-key-123", "LOG_LEVEL": "WARNING"},
            clear=True,
        ):
            try:
                configure_logging(Settings())
                assert root.level == logging.WARNING
            finally:
                root.setLevel(previous)
