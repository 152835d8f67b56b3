"""
Response projections for the control plane's process and file payloads.

These are plain snapshots of a single response; nothing here is cached and
every read goes back to the server.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Dict, Mapping


class ServerStatus(enum.IntEnum):
    OFFLINE = 0
    ONLINE = 1
    CRASHED = 2


def _coerce_status(value: Any) -> Any:
    try:
        return ServerStatus(int(value))
    except (TypeError, ValueError):
        # Unknown codes from newer servers are passed through untouched.
        return value


@dataclass
class ServerInfo:
    """Status and resource usage of one managed process."""

    status: Any
    cpu_usage: float
    memory_usage: float
    total_memory: float
    uptime: float
    server_version: str

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "ServerInfo":
        return cls(
            status=_coerce_status(data.get("status")),
            cpu_usage=data.get("cpuUsage", 0),
            memory_usage=data.get("memoryUsage", 0),
            total_memory=data.get("totalMemory", 0),
            uptime=data.get("uptime", 0),
            server_version=data.get("serverVersion", "") or "",
        )


@dataclass
class FileEntry:
    """One entry of a directory listing."""

    name: str
    size: int
    folder: bool
    mime_type: str
    last_modified: int

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "FileEntry":
        return cls(
            name=data.get("name", ""),
            size=int(data.get("size", 0) or 0),
            folder=bool(data.get("folder", False)),
            mime_type=data.get("mimeType", "") or "",
            last_modified=int(data.get("lastModified", 0) or 0),
        )


def parse_server_statuses(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Map process name -> ServerStatus from a /servers payload."""
    return {name: _coerce_status(code) for name, code in data.items()}


__all__ = ["ServerStatus", "ServerInfo", "FileEntry", "parse_server_statuses"]
