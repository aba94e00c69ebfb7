"""Shared pytest fixtures."""

import json
import shutil
from pathlib import Path
from typing import Callable

import httpx
import pytest

from src.utils.config import Settings, reset_settings
from src.utils.logging_config import reset_logging
from src.utils.testdata import clear_cache

REPO_ROOT = Path(__file__).resolve().parent.parent
SECRET = "test-secret"


@pytest.fixture(scope="session", autouse=True)
def backup_env_file():
    """Backup .env file during test session to prevent pollution."""
    env_file = Path(".env")
    backup_file = Path(".env.test_backup")

    # Backup if exists
    if env_file.exists():
        shutil.copy(env_file, backup_file)
        env_file.unlink()

    yield

    # Restore
    if backup_file.exists():
        shutil.move(backup_file, env_file)


@pytest.fixture(autouse=True)
def base_env(monkeypatch: pytest.MonkeyPatch):
    """Minimal environment so Settings() loads, with clean singletons."""
    monkeypatch.setenv("APP_NAME", "dsp-api-tests")
    monkeypatch.setenv("CONFIG_DIR", str(REPO_ROOT / "config"))
    monkeypatch.setenv("TESTDATA_DIR", str(REPO_ROOT / "testdata"))
    for name in ("ENVIRONMENT", "BASE_URL", "DSP_BASE_URL", "DSP_SECRET_KEY", "LOG_TO_FILE"):
        monkeypatch.delenv(name, raising=False)
    reset_settings()
    reset_logging()
    clear_cache()

    yield

    reset_settings()
    reset_logging()
    clear_cache()


@pytest.fixture
def settings(monkeypatch: pytest.MonkeyPatch) -> Settings:
    """Settings pointing at a fake partner host with a known secret."""
    monkeypatch.setenv("DSP_BASE_URL", "https://dsp.test")
    monkeypatch.setenv("DSP_SECRET_KEY", SECRET)
    return Settings(_env_file=None)


class RecordingHandler:
    """httpx.MockTransport handler that records requests and replays canned responses.

    ``routes`` maps ``"METHOD /path"`` to a status/body pair or to a list of
    them consumed in order.
    """

    def __init__(self, routes: dict):
        self.routes = {key: list(value) if isinstance(value, list) else [value]
                       for key, value in routes.items()}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = f"{request.method} {request.url.path}"
        if key not in self.routes:
            return httpx.Response(404, json={"message": f"no route for {key}"})
        queue = self.routes[key]
        status, body = queue.pop(0) if len(queue) > 1 else queue[0]
        return httpx.Response(status, json=body)

    def bodies(self, path: str) -> list[dict]:
        return [json.loads(r.content) for r in self.requests if r.url.path == path and r.content]

    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]


@pytest.fixture
def make_handler() -> Callable[[dict], RecordingHandler]:
    return RecordingHandler
