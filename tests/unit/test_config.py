"""
Unit Tests for Configuration

Tests for settings and configuration management.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from atec.config import Settings


def test_settings_defaults():
    """Test default settings values."""
    settings = Settings()

    assert settings.ENVIRONMENT in ["local", "staging", "production"]
    assert settings.LOG_LEVEL in ["DEBUG", "INFO", "WARNING", "ERROR"]
    assert isinstance(settings.DATABASE_URL, str)
    assert settings.SERVER_PORT == 5000


def test_settings_computed_properties():
    """Test computed properties."""
    settings = Settings(REDIS_ADDR="cache.internal:6380")

    assert settings.redis_host == "cache.internal"
    assert settings.redis_port == 6380
    assert len(settings.iv) == 16
    assert isinstance(settings.is_production, bool)
    assert isinstance(settings.is_local, bool)


def test_redis_port_defaults_when_omitted():
    settings = Settings(REDIS_ADDR="redis")

    assert settings.redis_host == "redis"
    assert settings.redis_port == 6379


def test_settings_environment_specific():
    """Test environment-specific behavior."""
    # Local environment
    settings_local = Settings(ENVIRONMENT="local")
    assert settings_local.is_local is True
    assert settings_local.is_production is False

    # Production environment needs a real signing key path
    settings_prod = Settings(ENVIRONMENT="production", SIGNING_KEY_PATH=Path("/run/keys/signing"))
    assert settings_prod.is_local is False
    assert settings_prod.is_production is True


def test_default_signing_key_rejected_outside_local():
    """Deployed environments must configure SIGNING_KEY_PATH."""
    with pytest.raises(ValidationError, match="SIGNING_KEY_PATH"):
        Settings(ENVIRONMENT="staging")


class TestIVKey:
    """Test IV_KEY validation."""

    def test_non_hex_rejected(self):
        with pytest.raises(ValidationError, match="not valid hex"):
            Settings(IV_KEY="not-hex-at-all!!")

    def test_wrong_length_rejected(self):
        with pytest.raises(ValidationError, match="16 bytes"):
            Settings(IV_KEY="0011")

    def test_valid_iv_decoded(self):
        settings = Settings(IV_KEY="ff" * 16)
        assert settings.iv == b"\xff" * 16
