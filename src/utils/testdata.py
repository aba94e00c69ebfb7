"""Read-only access to endpoint config and per-pod fixture files.

Endpoint paths live in ``<CONFIG_DIR>/endpoints.json`` keyed by
pod -> category -> name. Request templates and expected responses live in
``<TESTDATA_DIR>/<pod>/<name>.json``. Files are parsed once per process and
callers always receive deep copies.
"""

import copy
import json
import re
from functools import lru_cache
from pathlib import Path
from typing import Any

from src.utils.config import get_settings

_DATA_URL_PREFIX = re.compile(r"^data:[^;,]*;base64,")


class FixtureError(Exception):
    """Raised when a config or fixture file or key is missing."""


@lru_cache(maxsize=None)
def _read_json(path: Path) -> Any:
    if not path.is_file():
        raise FixtureError(f"Fixture file not found: {path}")
    with path.open(encoding="utf-8") as fh:
        return json.load(fh)


def load_endpoints(config_dir: Path | None = None) -> dict:
    """Return the parsed endpoints.json."""
    config_dir = config_dir or get_settings().CONFIG_DIR
    return copy.deepcopy(_read_json(Path(config_dir) / "endpoints.json"))


def get_endpoint(pod: str, category: str, name: str, config_dir: Path | None = None) -> str:
    """Look up a single endpoint path.

    Raises:
        FixtureError: If the pod, category or endpoint name is unknown
    """
    endpoints = load_endpoints(config_dir)
    try:
        return endpoints[pod][category][name]
    except KeyError as e:
        raise FixtureError(f"Endpoint '{pod}.{category}.{name}' not configured") from e


def load_testdata(pod: str, name: str, testdata_dir: Path | None = None) -> dict:
    """Return the parsed fixture ``<pod>/<name>.json``."""
    testdata_dir = testdata_dir or get_settings().TESTDATA_DIR
    return copy.deepcopy(_read_json(Path(testdata_dir) / pod / f"{name}.json"))


def clear_cache() -> None:
    """Drop parsed files. Useful for testing."""
    _read_json.cache_clear()


def replace_path_params(endpoint: str, params: dict[str, str]) -> str:
    """Substitute ``{name}`` placeholders in an endpoint path.

    Example:
        >>> replace_path_params("/api/loans/{id}", {"id": "123"})
        '/api/loans/123'
    """
    result = endpoint
    for key, value in params.items():
        result = result.replace(f"{{{key}}}", str(value))
    return result


def strip_data_url_prefix(value: str) -> str:
    """Remove a leading ``data:<mime>;base64,`` prefix if present."""
    return _DATA_URL_PREFIX.sub("", value.strip(), count=1)


def load_image_base64(path: Path | str, testdata_dir: Path | None = None) -> str:
    """Read a base64 image fixture and return the bare base64 payload.

    Relative paths are resolved against TESTDATA_DIR.
    """
    path = Path(path)
    if not path.is_absolute():
        path = Path(testdata_dir or get_settings().TESTDATA_DIR) / path
    if not path.is_file():
        raise FixtureError(f"Image fixture not found: {path}")
    return strip_data_url_prefix(path.read_text(encoding="utf-8"))
