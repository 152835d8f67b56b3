"""
Octyne Python Client

This module provides a thin, synchronous client for the Octyne process-management
control plane. It owns the session lifecycle (login, logout, one-time console
tickets) and turns every backend failure into one of the exceptions in
octyne_client.errors.

Features implemented:
- login() / logout() / get_ticket()
- request(endpoint, method, ...): the authenticated JSON request primitive
- get_servers() / get_server(name) / start_server(name) / stop_server(name)
- get_files / get_file / create_folder / move_file / copy_file / rename_file / delete_file
- console_url(name) / open_console(name)

Example:
    client = OctyneClient("https://octyne.example.test", {"username": "admin", "password": "pw"})
    client.login()
    for entry in client.get_files("survival", "/world"):
        print(entry.name, entry.size)
    client.logout()
"""

from __future__ import annotations

import json
import logging
import posixpath
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union
from urllib.parse import quote

import requests
from requests.structures import CaseInsensitiveDict

from . import console
from .config import get_settings as get_client_settings
from .config import validate_base_url
from .constants import (
    AUTHORIZATION_HEADER,
    FILE_OP_COPY,
    FILE_OP_MOVE,
    LOGIN_PASSWORD_HEADER,
    LOGIN_USERNAME_HEADER,
    PATH_FILE,
    PATH_FILES,
    PATH_FOLDER,
    PATH_LOGIN,
    PATH_LOGOUT,
    PATH_SERVER,
    PATH_SERVERS,
    PATH_TICKET,
    SERVER_START,
    SERVER_STOP,
)
from .credentials import (
    _SECRETS,
    Credentials,
    PasswordCredentials,
    TokenCredentials,
    parse_credentials,
)
from .errors import (
    AuthenticationError,
    ConfigurationError,
    NotAuthenticatedError,
    OctyneError,
    RequestError,
    SessionExpiredError,
    TicketError,
    TransportError,
    rejection,
)
from .models import FileEntry, ServerInfo, ServerStatus, parse_server_statuses


logger = logging.getLogger(__name__)

_UNSET = object()


class OctyneClient:
    """
    Minimal synchronous client for the Octyne control plane.

    Only `endpoint` and `username` are ordinary attributes. The password and the
    session token live in a private store and are reachable only through the
    request machinery, so printing, vars() or serializing the client never
    reveals them.

    HTTP calls use the configured request timeout (OCTYNE_REQUEST_TIMEOUT,
    60 seconds by default). Pass timeout=None, or set OCTYNE_REQUEST_TIMEOUT=0,
    to disable it, for example for long streamed downloads.

    Example:
        client = OctyneClient("http://localhost:42069", {"token": "abc"})
        info = client.get_server("survival")
        client.start_server("survival")
    """

    def __init__(
        self,
        endpoint: str,
        credentials: Union[Credentials, Mapping[str, Any], None],
        session: Optional[requests.Session] = None,
        *,
        timeout: Any = _UNSET,
        verify_tls: Optional[bool] = None,
        headers_supported: Optional[bool] = None,
        console_open_timeout: Optional[float] = None,
    ) -> None:
        creds = parse_credentials(credentials)
        self._endpoint = validate_base_url(endpoint)
        self.username: Optional[str] = creds.username if isinstance(creds, PasswordCredentials) else None

        cfg = get_client_settings()
        self.timeout: Optional[float] = cfg.request_timeout if timeout is _UNSET else timeout
        self.verify_tls = bool(cfg.verify_tls if verify_tls is None else verify_tls)
        self.headers_supported = bool(cfg.headers_supported if headers_supported is None else headers_supported)
        self.console_open_timeout = float(
            cfg.console_open_timeout if console_open_timeout is None else console_open_timeout
        )
        self._session = session or requests.Session()
        if session is None:
            self._session.verify = self.verify_tls

        if isinstance(creds, PasswordCredentials):
            _SECRETS.set_password(self, creds.password)
        else:
            _SECRETS.set_token(self, creds.token)

    @classmethod
    def from_env(cls, session: Optional[requests.Session] = None, **kwargs: Any) -> "OctyneClient":
        """
        Build a client from OCTYNE_* environment variables (see octyne_client.config).
        """
        cfg = get_client_settings()
        creds = cfg.credentials()
        if creds is None:
            raise ConfigurationError(
                "No credentials configured: set OCTYNE_TOKEN or OCTYNE_USERNAME and OCTYNE_PASSWORD"
            )
        return cls(cfg.base_url_normalized, creds, session=session, **kwargs)

    @property
    def endpoint(self) -> str:
        return self._endpoint

    @property
    def authenticated(self) -> bool:
        return _SECRETS.get_token(self) is not None

    def __repr__(self) -> str:
        return f"OctyneClient(endpoint={self._endpoint!r}, username={self.username!r})"

    # -----------------------
    # Internal helpers
    # -----------------------

    def _url(self, template: str, name: Optional[str] = None, path: Optional[str] = None) -> str:
        url = self._endpoint + (template.format(name=quote(name, safe="")) if name is not None else template)
        if path is not None:
            url += "?path=" + quote(path, safe="")
        return url

    def _require_token(self) -> str:
        token = _SECRETS.get_token(self)
        if token is None:
            raise NotAuthenticatedError()
        return token

    def _auth_headers(self, token: str, extra: Optional[Mapping[str, str]] = None) -> CaseInsensitiveDict:
        headers: CaseInsensitiveDict = CaseInsensitiveDict(extra or {})
        if AUTHORIZATION_HEADER in headers:
            # The session token always wins over caller-supplied authorization.
            logger.warning("request.header.dropped header=%s", AUTHORIZATION_HEADER)
        headers[AUTHORIZATION_HEADER] = token
        return headers

    def _send(self, method: str, url: str, **opts: Any) -> requests.Response:
        opts.setdefault("timeout", self.timeout)
        logger.debug("request method=%s url=%s", method, url)
        try:
            return self._session.request(method, url, **opts)
        except requests.RequestException as exc:
            raise TransportError(f"{method} {url} failed: {exc}") from exc

    @staticmethod
    def _decode(resp: requests.Response) -> Any:
        try:
            return resp.json()
        except ValueError as exc:
            raise rejection(
                f"Invalid JSON response from control plane (HTTP {resp.status_code})",
                resp.status_code,
            ) from exc

    def _call(self, method: str, url: str, **opts: Any) -> requests.Response:
        token = self._require_token()
        headers = self._auth_headers(token, opts.pop("headers", None))
        return self._send(method, url, headers=headers, **opts)

    def _call_json(self, method: str, url: str, **opts: Any) -> Tuple[int, Any]:
        resp = self._call(method, url, **opts)
        return resp.status_code, self._decode(resp)

    @staticmethod
    def _error_message(data: Any, operation: str, status_code: Optional[int]) -> str:
        if isinstance(data, Mapping) and data.get("error"):
            return str(data["error"])
        return f"{operation} failed (HTTP {status_code})"

    def _expect_no_error(self, operation: str, method: str, url: str, **opts: Any) -> None:
        status_code, data = self._call_json(method, url, **opts)
        if not isinstance(data, Mapping) or data.get("error"):
            raise rejection(self._error_message(data, operation, status_code), status_code)

    # -----------------------
    # Session lifecycle
    # -----------------------

    def login(self) -> None:
        """
        Exchange the stored username/password for a session token.

        Replaces any token held before. Raises AuthenticationError with the
        server's message when the control plane does not return a token.
        """
        password = _SECRETS.get_password(self)
        if not self.username or password is None:
            raise ConfigurationError("login() requires username/password credentials")
        # http.client encodes str header values as Latin-1 only; send UTF-8 bytes.
        resp = self._send(
            "POST",
            self._url(PATH_LOGIN),
            headers={
                LOGIN_USERNAME_HEADER: self.username.encode("utf-8"),
                LOGIN_PASSWORD_HEADER: password.encode("utf-8"),
            },
        )
        try:
            data = resp.json()
        except ValueError as exc:
            raise AuthenticationError(f"login failed (HTTP {resp.status_code})") from exc
        token = data.get("token") if isinstance(data, Mapping) else None
        if not token:
            raise AuthenticationError(self._error_message(data, "login", resp.status_code))
        _SECRETS.set_token(self, token)
        logger.info("session.login endpoint=%s username=%s", self._endpoint, self.username)

    def logout(self) -> None:
        """
        Invalidate the session token on the server and forget it locally.

        On failure the local token is left in place.
        """
        resp = self._call("POST", self._url(PATH_LOGOUT))
        try:
            data = resp.json()
        except ValueError as exc:
            raise AuthenticationError(f"logout failed (HTTP {resp.status_code})") from exc
        if not (isinstance(data, Mapping) and data.get("success")):
            raise AuthenticationError(self._error_message(data, "logout", resp.status_code))
        _SECRETS.clear_token(self)
        logger.info("session.logout endpoint=%s", self._endpoint)

    def get_ticket(self) -> str:
        """
        Mint a one-time ticket for connections that cannot send headers.

        Tickets are single use, expire after about two minutes and are bound to
        the caller's IP by the server. They are never cached here.
        """
        resp = self._call("GET", self._url(PATH_TICKET))
        try:
            data = resp.json()
        except ValueError as exc:
            raise TicketError(f"ticket request failed (HTTP {resp.status_code})") from exc
        ticket = data.get("ticket") if isinstance(data, Mapping) else None
        if not ticket:
            raise TicketError(self._error_message(data, "ticket request", resp.status_code))
        return str(ticket)

    def request(self, endpoint: str, method: str = "GET", **opts: Any) -> Any:
        """
        Send an authenticated request and return the decoded JSON body as-is.

        `endpoint` is an absolute URL. Extra keyword arguments are passed to
        requests (data, params, headers, timeout). The Authorization header is
        always the session token, even when `headers` contains one. Non-2xx
        responses are not raised here; callers inspect the body's `error`.
        """
        _status_code, data = self._call_json(method, endpoint, **opts)
        return data

    # -----------------------
    # Processes
    # -----------------------

    def get_servers(self) -> Dict[str, Any]:
        """
        Map every managed process name to its ServerStatus.
        """
        status_code, data = self._call_json("GET", self._url(PATH_SERVERS))
        if not isinstance(data, Mapping) or isinstance(data.get("error"), str):
            raise rejection(self._error_message(data, "list servers", status_code), status_code)
        servers = data.get("servers") if isinstance(data.get("servers"), Mapping) else data
        return parse_server_statuses(servers)

    def get_server(self, server: str) -> ServerInfo:
        status_code, data = self._call_json("GET", self._url(PATH_SERVER, server))
        if not isinstance(data, Mapping) or data.get("status") is None:
            raise rejection(self._error_message(data, "get server", status_code), status_code)
        return ServerInfo.from_json(data)

    def start_server(self, server: str) -> None:
        self._expect_no_error("start server", "POST", self._url(PATH_SERVER, server), data=SERVER_START)

    def stop_server(self, server: str) -> None:
        self._expect_no_error("stop server", "POST", self._url(PATH_SERVER, server), data=SERVER_STOP)

    # -----------------------
    # Console
    # -----------------------

    def console_url(self, server: str, ticket: Optional[str] = None) -> str:
        """
        Websocket URL of a process console, with the ticket query param when given.
        """
        return console.build_console_url(self._endpoint, server, ticket)

    def open_console(
        self,
        server: str,
        *,
        ticket: Optional[str] = None,
        use_ticket: Optional[bool] = None,
        open_timeout: Optional[float] = None,
    ):
        """
        Open the console websocket of `server` and return the open connection.

        Authentication:
          - ticket given: used as-is in the query string
          - use_ticket=True, or use_ticket=None on a client created with
            headers_supported=False: a fresh ticket is minted via get_ticket()
          - otherwise the session token is sent in the Authorization header

        The caller owns the returned connection (recv, send, close).
        """
        if ticket is None:
            wants_ticket = (not self.headers_supported) if use_ticket is None else bool(use_ticket)
            if wants_ticket:
                ticket = self.get_ticket()

        headers: Dict[str, str] = {}
        if ticket is None:
            headers[AUTHORIZATION_HEADER] = self._require_token()

        return console.open_connection(
            self.console_url(server, ticket),
            headers=headers,
            open_timeout=self.console_open_timeout if open_timeout is None else open_timeout,
            verify_tls=self.verify_tls,
        )

    # -----------------------
    # Files
    # -----------------------

    def get_files(self, server: str, directory: str) -> List[FileEntry]:
        """
        List the contents of `directory` in the process's working directory.
        """
        status_code, data = self._call_json("GET", self._url(PATH_FILES, server, directory))
        contents = data.get("contents") if isinstance(data, Mapping) else None
        if not isinstance(contents, list) or not all(isinstance(item, Mapping) for item in contents):
            raise rejection(self._error_message(data, "list files", status_code), status_code)
        try:
            return [FileEntry.from_json(item) for item in contents]
        except (TypeError, ValueError) as exc:
            raise rejection(f"Malformed file listing (HTTP {status_code})", status_code) from exc

    def get_file(self, server: str, path: str, stream: bool = False) -> Union[bytes, requests.Response]:
        """
        Download a file.

        With stream=True the live requests.Response is returned unread; use
        iter_content() and close it (or use it as a context manager).

        Otherwise the whole body is read. A successful response always returns
        the raw bytes, even when they happen to be valid JSON. A failed response
        raises RequestError if the body is a JSON object with an `error` field,
        and falls back to returning the raw bytes if it is not.
        """
        resp = self._call("GET", self._url(PATH_FILE, server, path), stream=stream)
        if stream:
            return resp

        content = resp.content
        if resp.ok:
            return content
        try:
            data = json.loads(content)
        except ValueError:
            data = None
        if isinstance(data, Mapping) and data.get("error"):
            raise rejection(str(data["error"]), resp.status_code)
        logger.debug("file.download.unparsed_error status=%s bytes=%d", resp.status_code, len(content))
        return content

    def create_folder(self, server: str, path: str) -> None:
        self._expect_no_error("create folder", "POST", self._url(PATH_FOLDER, server, path))

    def move_file(self, server: str, old_path: str, new_path: str) -> None:
        body = f"{FILE_OP_MOVE}\n{old_path}\n{new_path}"
        self._expect_no_error("move file", "PATCH", self._url(PATH_FILE, server), data=body)

    def copy_file(self, server: str, old_path: str, new_path: str) -> None:
        body = f"{FILE_OP_COPY}\n{old_path}\n{new_path}"
        self._expect_no_error("copy file", "PATCH", self._url(PATH_FILE, server), data=body)

    def rename_file(self, server: str, old_path: str, new_name: str) -> None:
        """
        Rename a file in place; a move to `new_name` inside the same parent directory.
        """
        new_path = posixpath.normpath(posixpath.join(old_path, "..", new_name))
        self.move_file(server, old_path, new_path)

    def delete_file(self, server: str, path: str) -> None:
        self._expect_no_error("delete file", "DELETE", self._url(PATH_FILE, server, path))


__all__ = [
    "OctyneClient",
    "PasswordCredentials",
    "TokenCredentials",
    "ServerInfo",
    "ServerStatus",
    "FileEntry",
    "OctyneError",
    "ConfigurationError",
    "NotAuthenticatedError",
    "AuthenticationError",
    "TicketError",
    "RequestError",
    "SessionExpiredError",
    "TransportError",
]
