"""
SDK configuration for octyne_client.

This module centralizes:
- Defaults for the client (endpoint, timeouts, console auth policy)
- Loading values from environment variables
- Convenience helpers (normalized base_url, configured credentials)

Typical usage:
    from octyne_client import OctyneClient
    from octyne_client.config import get_settings

    cfg = get_settings()
    client = OctyneClient(cfg.base_url_normalized, cfg.credentials())

    # or simply
    client = OctyneClient.from_env()

- Environment variables (client-side):
  - OCTYNE_URL: Base URL of the control plane (default: http://localhost:42069)
  - OCTYNE_USERNAME / OCTYNE_PASSWORD: Credentials used by login()
  - OCTYNE_TOKEN: A session token issued earlier; takes precedence over username/password
  - OCTYNE_REQUEST_TIMEOUT: HTTP timeout in seconds, 0 disables it (default: 60)
  - OCTYNE_CONSOLE_OPEN_TIMEOUT: Console websocket handshake timeout in seconds (default: 10)
  - OCTYNE_VERIFY_TLS: "true"/"false" for TLS verification on https URLs (default: "true")
  - OCTYNE_HEADERS_SUPPORTED: "false" when console connections cannot carry an
    Authorization header and must use tickets instead (default: "true")

Notes:
- This module does not modify process environment variables.
- Values are read once and cached; call get_settings.cache_clear() if you need to reload during a process lifetime.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Optional
from urllib.parse import urlparse

from .constants import (
    DEFAULT_BASE_URL,
    DEFAULT_CONSOLE_OPEN_TIMEOUT,
    DEFAULT_REQUEST_TIMEOUT,
    ENV_CONSOLE_OPEN_TIMEOUT,
    ENV_HEADERS_SUPPORTED,
    ENV_PASSWORD,
    ENV_REQUEST_TIMEOUT,
    ENV_TOKEN,
    ENV_URL,
    ENV_USERNAME,
    ENV_VERIFY_TLS,
)
from .credentials import Credentials, PasswordCredentials, TokenCredentials
from .errors import ConfigurationError


def _str2bool(val: Optional[str], default: bool) -> bool:
    if val is None:
        return default
    s = val.strip().lower()
    return s in ("1", "true", "yes", "y", "on")


def validate_base_url(url: str) -> str:
    """
    Return the URL without trailing slashes, rejecting anything that is not http(s).
    """
    parsed = urlparse(url or "")
    scheme = (parsed.scheme or "").lower()
    if not scheme:
        raise ConfigurationError(f"Invalid control plane URL (missing scheme): {url!r}")
    if scheme not in ("http", "https"):
        raise ConfigurationError(f"Unsupported control plane URL scheme {scheme!r}; only http/https are supported")
    if not parsed.netloc:
        raise ConfigurationError(f"Invalid control plane URL (missing host): {url!r}")
    return url.rstrip("/")


@dataclass(frozen=True)
class ClientConfig:
    """
    Immutable configuration for the octyne_client SDK.
    Construct via ClientConfig.from_env() or use get_settings().
    """

    # Server connection
    base_url: str
    verify_tls: bool

    # Auth (secrets are kept out of repr)
    username: Optional[str]
    password: Optional[str] = field(repr=False)
    token: Optional[str] = field(repr=False)

    # Timeouts (seconds); None disables the HTTP timeout
    request_timeout: Optional[float]
    console_open_timeout: float

    # Console auth policy
    headers_supported: bool

    @property
    def base_url_normalized(self) -> str:
        """
        Base URL with any trailing slash removed to avoid double slashes in requests.
        """
        return (self.base_url or "").rstrip("/")

    def credentials(self) -> Optional[Credentials]:
        """
        Credentials configured in the environment, or None when there are none.
        A token wins over a username/password pair.
        """
        if self.token:
            return TokenCredentials(token=self.token)
        if self.username and self.password:
            return PasswordCredentials(username=self.username, password=self.password)
        return None

    @staticmethod
    def from_env() -> "ClientConfig":
        """
        Build ClientConfig from environment variables with sensible defaults.
        """
        base_url = validate_base_url(os.getenv(ENV_URL) or DEFAULT_BASE_URL)

        def _float_env(name: str, default_s: float) -> float:
            try:
                return float(os.getenv(name, str(default_s)))
            except ValueError:
                return default_s

        request_timeout: Optional[float] = _float_env(ENV_REQUEST_TIMEOUT, DEFAULT_REQUEST_TIMEOUT)
        if request_timeout is not None and request_timeout <= 0:
            request_timeout = None
        console_open_timeout = _float_env(ENV_CONSOLE_OPEN_TIMEOUT, DEFAULT_CONSOLE_OPEN_TIMEOUT)
        if console_open_timeout <= 0:
            raise ConfigurationError(f"{ENV_CONSOLE_OPEN_TIMEOUT} must be a positive number of seconds")

        return ClientConfig(
            base_url=base_url,
            verify_tls=_str2bool(os.getenv(ENV_VERIFY_TLS), default=True),
            username=os.getenv(ENV_USERNAME) or None,
            password=os.getenv(ENV_PASSWORD) or None,
            token=os.getenv(ENV_TOKEN) or None,
            request_timeout=request_timeout,
            console_open_timeout=console_open_timeout,
            headers_supported=_str2bool(os.getenv(ENV_HEADERS_SUPPORTED), default=True),
        )


@lru_cache(maxsize=1)
def get_settings() -> ClientConfig:
    """
    Cached accessor for the SDK configuration.
    Call get_settings.cache_clear() to reload after environment changes.
    """
    return ClientConfig.from_env()


__all__ = ["ClientConfig", "get_settings", "validate_base_url"]
