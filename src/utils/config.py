"""Type-safe environment configuration using Pydantic Settings."""

from pathlib import Path
from typing import Final, Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Base URLs per target environment
ENVIRONMENT_BASE_URLS: Final[dict[str, str]] = {
    "dev": "https://api.dev.voltmoney.in",
    "staging": "https://api.staging.voltmoney.in",
    "prod": "https://api.voltmoney.in",
}


class Settings(BaseSettings):
    """
    Framework configuration loaded from environment variables.

    Required fields will raise validation errors if missing.
    Optional fields have sensible defaults.
    Secrets are masked in string representations.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",  # Ignore extra fields in .env
        env_ignore_empty=True,
    )

    # Required fields - will raise error if missing
    APP_NAME: str = Field(
        ...,
        description="Name reported in structured logs"
    )

    ENVIRONMENT: Literal["dev", "staging", "prod"] = Field(
        default="dev",
        description="Target environment for API calls"
    )

    # Logging
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level"
    )

    LOG_TO_FILE: bool = Field(
        default=False,
        description="Also write date-rotated log files under LOG_DIR"
    )

    LOG_DIR: Path = Field(
        default=Path("logs"),
        description="Directory for log files"
    )

    API_TIMEOUT: float = Field(
        default=30.0,
        description="HTTP timeout in seconds",
        gt=0  # Must be greater than 0
    )

    # Hosts
    BASE_URL: str | None = Field(
        default=None,
        description="Override for the per-environment base URL"
    )

    DSP_BASE_URL: str | None = Field(
        default=None,
        description="Override for the partner (DSP) API host"
    )

    # Partner signing
    DSP_SECRET_KEY: SecretStr | None = Field(
        default=None,
        description="Shared HMAC secret for partner API requests"
    )

    SOURCING_CHANNEL_CODE: str = Field(
        default="DSP-UAT",
        description="Value of the X-SourcingChannelCode header"
    )

    # Data locations
    CONFIG_DIR: Path = Field(
        default=Path("config"),
        description="Directory holding endpoints.json"
    )

    TESTDATA_DIR: Path = Field(
        default=Path("testdata"),
        description="Directory holding per-pod fixture files"
    )

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the standard levels."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(
                f"LOG_LEVEL must be one of {valid_levels}, got '{v}'"
            )
        return v_upper

    @field_validator("BASE_URL", "DSP_BASE_URL")
    @classmethod
    def strip_trailing_slash(cls, v: str | None) -> str | None:
        """Endpoints are appended as '/path', so drop a trailing slash."""
        return v.rstrip("/") if v else v

    def get_dsp_secret_key(self) -> str | None:
        """Get the partner secret key value if set."""
        return self.DSP_SECRET_KEY.get_secret_value() if self.DSP_SECRET_KEY else None

    def resolve_base_url(self) -> str:
        """Base URL for the configured environment, honouring BASE_URL."""
        return self.BASE_URL or get_base_url(self.ENVIRONMENT)

    def resolve_dsp_base_url(self) -> str:
        """Partner API host, falling back to the environment base URL."""
        return self.DSP_BASE_URL or self.resolve_base_url()


def get_base_url(env: str | None = None) -> str:
    """
    Look up the base URL for a target environment.

    Args:
        env: One of 'dev', 'staging' or 'prod'. Defaults to the
            configured ENVIRONMENT.

    Returns:
        Base URL without a trailing slash

    Raises:
        ValueError: If the environment is unknown
    """
    if env is None:
        env = get_settings().ENVIRONMENT
    if env not in ENVIRONMENT_BASE_URLS:
        raise ValueError(f"Invalid environment: {env}")
    return ENVIRONMENT_BASE_URLS[env]


# Singleton instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get the framework settings singleton.

    Loads settings from environment variables and .env file on first call.
    Subsequent calls return the cached instance.

    Returns:
        Settings: The settings instance

    Raises:
        ValidationError: If required environment variables are missing or invalid
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset the settings singleton. Useful for testing."""
    global _settings
    _settings = None
