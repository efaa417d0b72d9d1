"""Tests for configuration management."""

import os
import pytest
from unittest.mock import patch

from relay_proxy.config import Settings, get_settings


class TestSettings:
    """Test Settings class."""

    def test_default_values(self):
        """Test default configuration values."""
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings()

        assert settings.app_name == "Relay Proxy API"
        assert settings.debug is False
        assert settings.host == "0.0.0.0"
        assert settings.port == 8000
        assert settings.upstream_base_url == "https://www.anapioficeandfire.com/api"
        assert settings.upstream_timeout == 30.0
        assert settings.upstream_max_connections == 20
        assert settings.upstream_page_size == 50
        assert settings.cors_origins == ["*"]
        assert settings.cors_allow_methods == ["GET", "OPTIONS"]
        assert settings.log_level == "INFO"
        assert settings.default_first == 10
        assert settings.max_first == 100
        assert settings.max_expand_depth == 3

    def test_environment_override(self):
        """Test that environment variables override defaults."""
        env_vars = {
            "APP_NAME": "Test API",
            "DEBUG": "true",
            "PORT": "9000",
            "UPSTREAM_BASE_URL": "https://upstream.example.com/api",
            "UPSTREAM_TIMEOUT": "2.5",
            "UPSTREAM_PAGE_SIZE": "25",
            "DEFAULT_FIRST": "5",
            "MAX_FIRST": "20",
            "MAX_EXPAND_DEPTH": "2",
            "LOG_LEVEL": "DEBUG"
        }

        with patch.dict(os.environ, env_vars):
            settings = Settings()

            assert settings.app_name == "Test API"
            assert settings.debug is True
            assert settings.port == 9000
            assert settings.upstream_base_url == "https://upstream.example.com/api"
            assert settings.upstream_timeout == 2.5
            assert settings.upstream_page_size == 25
            assert settings.default_first == 5
            assert settings.max_first == 20
            assert settings.max_expand_depth == 2
            assert settings.log_level == "DEBUG"

    def test_cors_configuration_via_json(self):
        """Test CORS configuration via JSON arrays."""
        env_vars = {
            "CORS_ORIGINS": '["http://localhost:3000", "https://example.com"]',
            "CORS_ALLOW_METHODS": '["GET"]'
        }

        with patch.dict(os.environ, env_vars):
            settings = Settings()
            assert settings.cors_origins == ["http://localhost:3000", "https://example.com"]
            assert settings.cors_allow_methods == ["GET"]

    def test_log_level_validation(self):
        """Test log level validation."""
        for level in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            with patch.dict(os.environ, {"LOG_LEVEL": level.lower()}):
                assert Settings().log_level == level

        with patch.dict(os.environ, {"LOG_LEVEL": "INVALID"}):
            with pytest.raises(ValueError, match="Log level must be one of"):
                Settings()

    @pytest.mark.parametrize("field", ["UPSTREAM_PAGE_SIZE", "MAX_FIRST", "MAX_EXPAND_DEPTH"])
    def test_sizes_must_be_positive(self, field):
        """Page size, first limit and expansion depth must be at least one."""
        with patch.dict(os.environ, {field: "0"}):
            with pytest.raises(ValueError, match="positive integer"):
                Settings()

    def test_base_url_trailing_slash(self):
        """Trailing slashes are stripped so resource URLs join cleanly."""
        settings = Settings(upstream_base_url="https://upstream.example.com/api/")

        assert settings.upstream_base_url == "https://upstream.example.com/api"

    def test_get_settings_singleton(self):
        """Test that get_settings returns consistent instance."""
        assert get_settings() is get_settings()
