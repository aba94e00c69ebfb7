"""Shared fixtures for integration tests against a live partner environment.

Set DSP_SECRET_KEY (and optionally ENVIRONMENT or DSP_BASE_URL) to run them;
without a key every test here is skipped.
"""

import os

import pytest

from src.utils.config import reset_settings
from src.utils.logging_config import reset_logging
from src.utils.testdata import clear_cache


@pytest.fixture(scope="session", autouse=True)
def setup_integration_env():
    """Ensure required environment variables are set for integration tests."""
    os.environ.setdefault("APP_NAME", "dsp-api-tests")
    os.environ.setdefault("ENVIRONMENT", "dev")
    os.environ.setdefault("LOG_LEVEL", "INFO")

    yield


@pytest.fixture(autouse=True)
def setup_test_env():
    """Reset cached settings, logging and fixtures around each test."""
    reset_settings()
    reset_logging()
    clear_cache()

    yield

    reset_logging()
    reset_settings()


@pytest.fixture
def require_partner_credentials():
    if not os.environ.get("DSP_SECRET_KEY"):
        pytest.skip("DSP_SECRET_KEY not set; skipping live partner tests")
