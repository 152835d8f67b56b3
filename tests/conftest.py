"""
Test session bootstrap for octyne_client

Ensures that the in-repo octyne_client package is importable without requiring
an editable install, and that no OCTYNE_* variables from the developer's shell
leak into the tests.

- Adds octyne_client/src to sys.path so `import octyne_client` works.
- Clears the cached client settings around every test.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest


def _add_sys_path(p: Path) -> None:
    """
    Prepend a filesystem path to sys.path if it's not already present.
    """
    try:
        rp = str(p.resolve())
    except OSError:
        rp = str(p)
    if rp not in sys.path:
        sys.path.insert(0, rp)


# Compute important paths relative to this file
_THIS_FILE = Path(__file__).resolve()
_TESTS_DIR = _THIS_FILE.parent                  # .../tests
_PROJECT_DIR = _TESTS_DIR.parent                # repo root

# Make octyne_client importable (client is laid out with a 'src' root)
_CLIENT_SRC = _PROJECT_DIR / "octyne_client" / "src"
if _CLIENT_SRC.exists():
    _add_sys_path(_CLIENT_SRC)


_OCTYNE_ENV = (
    "OCTYNE_URL",
    "OCTYNE_USERNAME",
    "OCTYNE_PASSWORD",
    "OCTYNE_TOKEN",
    "OCTYNE_REQUEST_TIMEOUT",
    "OCTYNE_CONSOLE_OPEN_TIMEOUT",
    "OCTYNE_VERIFY_TLS",
    "OCTYNE_HEADERS_SUPPORTED",
    "OCTYNE_LOG_LEVEL",
    "OCTYNE_LOG_FILE",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _isolated_client_env(monkeypatch: pytest.MonkeyPatch):
    """
    Each test starts from a clean OCTYNE_* environment and an empty settings cache.
    """
    import octyne_client.config as client_config

    for name in _OCTYNE_ENV:
        monkeypatch.delenv(name, raising=False)
    client_config.get_settings.cache_clear()
    yield
    client_config.get_settings.cache_clear()
