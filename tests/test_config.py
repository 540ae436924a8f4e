"""Tests for configuration and error formatting."""

import logging

from turnkey_signer.config import TURNKEY_API_BASE_URL, Settings, configure_logging, get_settings
from turnkey_signer.errors import (
    ActivityFailedError,
    ApiError,
    ConfigurationError,
    MissingParameterError,
    TurnkeyError,
)


class TestSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("TURNKEY_BASE_URL", raising=False)
        settings = Settings()

        assert settings.turnkey_base_url == TURNKEY_API_BASE_URL
        assert settings.activity_poll_interval == 1.0
        assert settings.activity_timeout == 30.0
        assert settings.stamp_header == "X-Stamp"
        assert settings.chain_id is None

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("CHAIN_ID", "137")
        monkeypatch.setenv("ACTIVITY_TIMEOUT", "2.5")

        settings = Settings()

        assert settings.chain_id == 137
        assert settings.activity_timeout == 2.5
        assert settings.turnkey_organization_id == "test-org"

    def test_safe_dict_redacts_private_key(self):
        settings = Settings(turnkey_api_private_key="deadbeef")

        data = settings.get_safe_dict()

        assert data["api_private_key"] == "***"
        assert "deadbeef" not in str(data)
        assert settings.has_credentials

    def test_get_settings_cached(self):
        get_settings.cache_clear()
        assert get_settings() is get_settings()
        get_settings.cache_clear()

    def test_configure_logging(self, monkeypatch):
        calls = []
        monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.append(kw))

        configure_logging(Settings(debug=True))

        assert calls[0]["level"] == logging.DEBUG


class TestErrors:
    """Tests for the error taxonomy."""

    def test_api_error_format(self):
        error = ApiError("TEST_CODE", "Test message")

        assert str(error) == "API error [TEST_CODE]: Test message"
        assert error.status_code is None

    def test_configuration_error_format(self):
        assert str(ConfigurationError("test config error")) == (
            "Configuration error: test config error"
        )

    def test_hierarchy(self):
        assert issubclass(MissingParameterError, ConfigurationError)
        for cls in (ConfigurationError, ApiError, ActivityFailedError):
            assert issubclass(cls, TurnkeyError)

    def test_activity_failed_keeps_message(self):
        error = ActivityFailedError("insufficient funds")

        assert error.message == "insufficient funds"
        assert "insufficient funds" in str(error)
