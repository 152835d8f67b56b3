"""
Exception types for octyne_client.

Every failure raised by the client is an OctyneError subclass, so callers can
catch the whole family or pick the kind they know how to recover from (for
example re-running login() on NotAuthenticatedError or AuthenticationError).
Messages sent back by the control plane are kept verbatim.
"""

from __future__ import annotations

from typing import Optional


class OctyneError(Exception):
    """Base exception for all octyne_client errors."""


class ConfigurationError(OctyneError, ValueError):
    """Client was constructed or configured with unusable input."""


class NotAuthenticatedError(OctyneError):
    """An authenticated call was attempted without a session token."""

    def __init__(self, message: str = "You need to be logged in to do this") -> None:
        super().__init__(message)


class AuthenticationError(OctyneError):
    """The control plane rejected a login or logout."""


class TicketError(OctyneError):
    """The control plane refused to issue a console ticket."""


class RequestError(OctyneError):
    """
    The control plane rejected an operation.

    `message` is the server-supplied error text; `status_code` is the HTTP
    status of the response when one was received.
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message={self.message!r}, status_code={self.status_code!r})"


class SessionExpiredError(RequestError, AuthenticationError):
    """
    An operation was rejected with HTTP 401: the session token is missing,
    revoked or expired on the server side. Log in again to recover.
    """


def rejection(message: str, status_code: Optional[int] = None) -> RequestError:
    """Build the error for a rejected operation, picking the session kind for HTTP 401."""
    if status_code == 401:
        return SessionExpiredError(message, status_code)
    return RequestError(message, status_code)


class TransportError(OctyneError):
    """Network or socket failure; the underlying exception is chained as __cause__."""


__all__ = [
    "OctyneError",
    "ConfigurationError",
    "NotAuthenticatedError",
    "AuthenticationError",
    "TicketError",
    "RequestError",
    "SessionExpiredError",
    "TransportError",
    "rejection",
]
