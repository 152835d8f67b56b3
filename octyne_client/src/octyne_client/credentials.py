"""
Credential variants and private secret storage for octyne_client.

A client is built from exactly one of two credential shapes:

- PasswordCredentials(username, password): the client logs in to obtain a token.
- TokenCredentials(token): a token issued earlier is used directly.

Passwords and session tokens are never stored as instance attributes of the
client. They live in a module-private store keyed by the owning object, so they
cannot leak through vars(), __dict__, repr() or naive serialization.
"""

from __future__ import annotations

import weakref
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Union

from .errors import ConfigurationError


@dataclass(frozen=True)
class PasswordCredentials:
    """Username/password pair used by login()."""

    username: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class TokenCredentials:
    """A pre-issued session token."""

    token: str = field(repr=False)


Credentials = Union[PasswordCredentials, TokenCredentials]


def _non_empty(value: Any) -> bool:
    return isinstance(value, str) and value != ""


def parse_credentials(value: Any) -> Credentials:
    """
    Validate and normalize caller-supplied credentials.

    Accepts a PasswordCredentials/TokenCredentials instance, or a mapping with
    either {"username", "password"} or {"token"}. Raises ConfigurationError
    when neither a token nor a complete username/password pair is present.
    """
    if isinstance(value, PasswordCredentials):
        if _non_empty(value.username) and _non_empty(value.password):
            return value
        raise ConfigurationError("PasswordCredentials require a non-empty username and password")
    if isinstance(value, TokenCredentials):
        if _non_empty(value.token):
            return value
        raise ConfigurationError("TokenCredentials require a non-empty token")
    if isinstance(value, Mapping):
        token = value.get("token")
        if _non_empty(token):
            return TokenCredentials(token=token)
        username = value.get("username")
        password = value.get("password")
        if _non_empty(username) and _non_empty(password):
            return PasswordCredentials(username=username, password=password)
        raise ConfigurationError(
            "No valid credentials provided: pass either a token or both username and password"
        )
    if value is None:
        raise ConfigurationError("Credentials are required (username/password or token)")
    raise ConfigurationError(f"Unsupported credentials type: {type(value).__name__}")


@dataclass
class _Secrets:
    password: Optional[str] = field(default=None, repr=False)
    token: Optional[str] = field(default=None, repr=False)


class _SecretStore:
    """
    Holds per-owner secrets outside the owner's attribute namespace.

    Entries disappear together with their owner (weak keys), so nothing
    outlives the client that created it.
    """

    def __init__(self) -> None:
        self._entries: "weakref.WeakKeyDictionary[object, _Secrets]" = weakref.WeakKeyDictionary()

    def _entry(self, owner: object) -> _Secrets:
        entry = self._entries.get(owner)
        if entry is None:
            entry = _Secrets()
            self._entries[owner] = entry
        return entry

    def get_password(self, owner: object) -> Optional[str]:
        return self._entry(owner).password

    def set_password(self, owner: object, password: Optional[str]) -> None:
        self._entry(owner).password = password

    def get_token(self, owner: object) -> Optional[str]:
        return self._entry(owner).token

    def set_token(self, owner: object, token: Optional[str]) -> None:
        self._entry(owner).token = token

    def clear_token(self, owner: object) -> None:
        self._entry(owner).token = None


_SECRETS = _SecretStore()


__all__ = [
    "PasswordCredentials",
    "TokenCredentials",
    "Credentials",
    "parse_credentials",
]
