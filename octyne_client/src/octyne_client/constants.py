"""
Centralized constants for octyne_client.

These constants describe the wire contract with the Octyne control plane
(header names, endpoint paths, request bodies) and the defaults used by the
client configuration.
"""

from __future__ import annotations

# HTTP/API defaults
DEFAULT_BASE_URL = "http://localhost:42069"
DEFAULT_REQUEST_TIMEOUT = 60
DEFAULT_CONSOLE_OPEN_TIMEOUT = 10

# Authentication headers
AUTHORIZATION_HEADER = "Authorization"
LOGIN_USERNAME_HEADER = "Username"
LOGIN_PASSWORD_HEADER = "Password"

# Console connections that cannot carry headers authenticate with this query param
TICKET_QUERY_PARAM = "ticket"

# Endpoint paths (relative to the base URL)
PATH_SERVERS = "/servers"
PATH_LOGIN = "/login"
PATH_LOGOUT = "/logout"
PATH_TICKET = "/ott"
PATH_SERVER = "/server/{name}"
PATH_CONSOLE = "/server/{name}/console"
PATH_FILES = "/server/{name}/files"
PATH_FILE = "/server/{name}/file"
PATH_FOLDER = "/server/{name}/folder"

# Request bodies understood by the control plane
SERVER_START = "start"
SERVER_STOP = "stop"
FILE_OP_MOVE = "mv"
FILE_OP_COPY = "cp"

# Environment variables (client-side)
ENV_URL = "OCTYNE_URL"
ENV_USERNAME = "OCTYNE_USERNAME"
ENV_PASSWORD = "OCTYNE_PASSWORD"
ENV_TOKEN = "OCTYNE_TOKEN"
ENV_REQUEST_TIMEOUT = "OCTYNE_REQUEST_TIMEOUT"
ENV_CONSOLE_OPEN_TIMEOUT = "OCTYNE_CONSOLE_OPEN_TIMEOUT"
ENV_VERIFY_TLS = "OCTYNE_VERIFY_TLS"
ENV_HEADERS_SUPPORTED = "OCTYNE_HEADERS_SUPPORTED"
ENV_LOG_LEVEL = "OCTYNE_LOG_LEVEL"
ENV_LOG_FILE = "OCTYNE_LOG_FILE"

__all__ = [
    "DEFAULT_BASE_URL",
    "DEFAULT_REQUEST_TIMEOUT",
    "DEFAULT_CONSOLE_OPEN_TIMEOUT",
    "AUTHORIZATION_HEADER",
    "LOGIN_USERNAME_HEADER",
    "LOGIN_PASSWORD_HEADER",
    "TICKET_QUERY_PARAM",
    "PATH_SERVERS",
    "PATH_LOGIN",
    "PATH_LOGOUT",
    "PATH_TICKET",
    "PATH_SERVER",
    "PATH_CONSOLE",
    "PATH_FILES",
    "PATH_FILE",
    "PATH_FOLDER",
    "SERVER_START",
    "SERVER_STOP",
    "FILE_OP_MOVE",
    "FILE_OP_COPY",
    "ENV_URL",
    "ENV_USERNAME",
    "ENV_PASSWORD",
    "ENV_TOKEN",
    "ENV_REQUEST_TIMEOUT",
    "ENV_CONSOLE_OPEN_TIMEOUT",
    "ENV_VERIFY_TLS",
    "ENV_HEADERS_SUPPORTED",
    "ENV_LOG_LEVEL",
    "ENV_LOG_FILE",
]
