"""Tests for environment configuration."""

import pytest
from pydantic import ValidationError

from src.utils.config import Settings, get_base_url, get_settings, reset_settings


class TestSettings:
    """Test the Settings class."""

    def test_valid_config_with_required_fields(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that config loads successfully with required fields."""
        monkeypatch.setenv("APP_NAME", "test-app")

        settings = Settings()

        assert settings.APP_NAME == "test-app"
        assert settings.ENVIRONMENT == "dev"  # Default
        assert settings.LOG_LEVEL == "INFO"  # Default
        assert settings.LOG_TO_FILE is False  # Default
        assert settings.API_TIMEOUT == 30.0  # Default
        assert settings.SOURCING_CHANNEL_CODE == "DSP-UAT"  # Default

    def test_missing_required_field_raises_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that missing APP_NAME raises explicit ValidationError."""
        monkeypatch.delenv("APP_NAME", raising=False)

        with pytest.raises(ValidationError) as exc_info:
            Settings(_env_file=None)  # Disable .env file loading

        assert "APP_NAME" in str(exc_info.value)

    def test_optional_fields_can_be_overridden(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that optional fields can be set via environment variables."""
        monkeypatch.setenv("ENVIRONMENT", "staging")
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("LOG_TO_FILE", "true")
        monkeypatch.setenv("API_TIMEOUT", "12.5")
        monkeypatch.setenv("SOURCING_CHANNEL_CODE", "DSP-PROD")

        settings = Settings()

        assert settings.ENVIRONMENT == "staging"
        assert settings.LOG_LEVEL == "DEBUG"
        assert settings.LOG_TO_FILE is True
        assert settings.API_TIMEOUT == 12.5
        assert settings.SOURCING_CHANNEL_CODE == "DSP-PROD"

    def test_secret_key_is_masked_in_repr(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that the partner secret is masked in string representation."""
        monkeypatch.setenv("DSP_SECRET_KEY", "super-secret-key")

        settings = Settings()

        assert "super-secret-key" not in str(settings)
        assert "super-secret-key" not in repr(settings)
        assert settings.get_dsp_secret_key() == "super-secret-key"

    def test_secret_key_defaults_to_none(self) -> None:
        """Test that an unset secret is reported as None."""
        settings = Settings()

        assert settings.DSP_SECRET_KEY is None
        assert settings.get_dsp_secret_key() is None

    def test_environment_validation(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that ENVIRONMENT only accepts dev, staging or prod."""
        monkeypatch.setenv("ENVIRONMENT", "development")

        with pytest.raises(ValidationError) as exc_info:
            Settings()

        assert "ENVIRONMENT" in str(exc_info.value)

    def test_log_level_validation(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that LOG_LEVEL is validated and normalized to uppercase."""
        monkeypatch.setenv("LOG_LEVEL", "debug")

        assert Settings().LOG_LEVEL == "DEBUG"

    def test_invalid_log_level_raises_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that invalid log level raises ValidationError."""
        monkeypatch.setenv("LOG_LEVEL", "INVALID")

        with pytest.raises(ValidationError) as exc_info:
            Settings()

        assert "LOG_LEVEL" in str(exc_info.value)

    def test_api_timeout_must_be_positive(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that API_TIMEOUT must be greater than 0."""
        monkeypatch.setenv("API_TIMEOUT", "0")

        with pytest.raises(ValidationError) as exc_info:
            Settings()

        error_str = str(exc_info.value)
        assert "API_TIMEOUT" in error_str or "greater than 0" in error_str


class TestBaseUrls:
    """Test environment base URL resolution."""

    @pytest.mark.parametrize(
        "env,expected",
        [
            ("dev", "https://api.dev.voltmoney.in"),
            ("staging", "https://api.staging.voltmoney.in"),
            ("prod", "https://api.voltmoney.in"),
        ],
    )
    def test_known_environments(self, env: str, expected: str) -> None:
        assert get_base_url(env) == expected

    def test_unknown_environment_raises(self) -> None:
        with pytest.raises(ValueError, match="Invalid environment: qa"):
            get_base_url("qa")

    def test_defaults_to_configured_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ENVIRONMENT", "staging")

        assert get_base_url() == "https://api.staging.voltmoney.in"

    def test_base_url_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BASE_URL", "http://localhost:8080/")

        settings = Settings()

        assert settings.resolve_base_url() == "http://localhost:8080"
        assert settings.resolve_dsp_base_url() == "http://localhost:8080"

    def test_dsp_base_url_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DSP_BASE_URL", "https://dsp.example.com")

        settings = Settings()

        assert settings.resolve_base_url() == "https://api.dev.voltmoney.in"
        assert settings.resolve_dsp_base_url() == "https://dsp.example.com"


class TestSettingsSingleton:
    """Test the get_settings/reset_settings pair."""

    def test_get_settings_returns_same_instance(self) -> None:
        assert get_settings() is get_settings()

    def test_reset_settings_reloads(self, monkeypatch: pytest.MonkeyPatch) -> None:
        first = get_settings()
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        reset_settings()

        second = get_settings()

        assert second is not first
        assert second.LOG_LEVEL == "ERROR"
