"""
Console stream connections.

A process console is a websocket at /server/{name}/console. Clients that can
set headers authenticate with the usual Authorization header; clients that
cannot (browser-originated sockets, some proxies) append a one-time ticket as
the `ticket` query parameter instead.
"""

from __future__ import annotations

import logging
import ssl
from typing import Dict, Optional
from urllib.parse import quote, urlparse, urlunparse

from websockets.exceptions import InvalidStatus, WebSocketException
from websockets.sync.client import ClientConnection, connect

from .constants import PATH_CONSOLE, TICKET_QUERY_PARAM
from .errors import TransportError


logger = logging.getLogger(__name__)

_WS_SCHEMES = {"http": "ws", "https": "wss"}


def build_console_url(base_url: str, server: str, ticket: Optional[str] = None) -> str:
    """
    Translate the http(s) base URL into the ws(s) console URL for `server`.
    """
    parsed = urlparse(base_url)
    scheme = _WS_SCHEMES.get(parsed.scheme.lower(), parsed.scheme)
    path = parsed.path.rstrip("/") + PATH_CONSOLE.format(name=quote(server, safe=""))
    query = f"{TICKET_QUERY_PARAM}={quote(ticket, safe='')}" if ticket else ""
    return urlunparse((scheme, parsed.netloc, path, "", query, ""))


def open_connection(
    url: str,
    headers: Optional[Dict[str, str]] = None,
    open_timeout: Optional[float] = None,
    verify_tls: bool = True,
) -> ClientConnection:
    """
    Open the websocket and return it once the opening handshake has completed.

    Anything that fails before the connection is open is raised as
    TransportError chained to the original exception. After this returns the
    caller owns the connection (recv/send/close).
    """
    ssl_context = None
    if url.startswith("wss://") and not verify_tls:
        ssl_context = ssl.create_default_context()
        ssl_context.check_hostname = False
        ssl_context.verify_mode = ssl.CERT_NONE

    # Log the URL without the ticket; it is a credential until used.
    logger.debug("console.connect url=%s", url.split("?", 1)[0])
    try:
        return connect(
            url,
            additional_headers=headers or None,
            open_timeout=open_timeout,
            ssl=ssl_context,
        )
    except InvalidStatus as exc:
        status = getattr(exc.response, "status_code", None)
        raise TransportError(f"Console handshake rejected (HTTP {status})") from exc
    except (WebSocketException, OSError) as exc:
        raise TransportError(f"Console connection failed: {exc}") from exc


__all__ = ["build_console_url", "open_connection"]
