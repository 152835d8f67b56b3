"""
Opt-in logging configuration for applications using octyne_client.

The library itself only creates loggers under the "octyne_client" namespace and
never attaches handlers. Scripts and services that want to see those records
can call setup_logging() once at startup:

    from octyne_client.logging_setup import setup_logging

    setup_logging()                       # console only, level from env
    setup_logging(log_file="octyne.log")  # plus a rotating file

Environment variables (optional):
- OCTYNE_LOG_LEVEL: Level for octyne_client logs (default: INFO).
- LOG_LEVEL: Fallback for OCTYNE_LOG_LEVEL when unset.
- OCTYNE_LOG_FILE: Path of a rotating log file to attach.
- OCTYNE_LOG_MAX_BYTES: Max file size before rotate (default: 10485760 = 10MB).
- OCTYNE_LOG_BACKUP_COUNT: Number of rotated files to keep (default: 5).
"""

from __future__ import annotations

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Optional, Union

from .constants import ENV_LOG_FILE, ENV_LOG_LEVEL

__all__ = [
    "setup_logging",
    "configure_third_party_loggers",
]

_LOGGER_NAME = "octyne_client"
_DEFAULT_MAX_BYTES = 10 * 1024 * 1024  # 10MB
_DEFAULT_BACKUP_COUNT = 5
_DEFAULT_FORMAT_FILE = "%(asctime)s %(levelname)s [octyne_client] %(name)s pid=%(process)d %(filename)s:%(lineno)d - %(message)s"
_DEFAULT_FORMAT_CONSOLE = "%(asctime)s %(levelname)s [octyne_client] %(message)s"
_DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _coerce_level(level: Optional[Union[int, str]], default: int = logging.INFO) -> int:
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        upper = level.strip().upper()
        return getattr(logging, upper, default)
    return default


def configure_third_party_loggers(base_level: int) -> None:
    """
    Tame noisy transport libraries while allowing escalation via DEBUG when needed.
    """
    lib_level = logging.INFO if base_level <= logging.DEBUG else logging.WARNING
    for name in ("urllib3", "requests", "websockets"):
        logging.getLogger(name).setLevel(lib_level)

    # Connection pool chatter stays quiet even when debugging
    logging.getLogger("urllib3.connectionpool").setLevel(logging.WARNING)


def setup_logging(
    *,
    level: Optional[Union[int, str]] = None,
    log_file: Optional[Union[str, Path]] = None,
    max_bytes: Optional[int] = None,
    backup_count: Optional[int] = None,
    add_console: bool = True,
) -> logging.Logger:
    """
    Attach handlers to the "octyne_client" logger and return it.

    - Console handler on stderr (skipped when add_console is False).
    - RotatingFileHandler when log_file or OCTYNE_LOG_FILE is set.

    Calling it again does not duplicate handlers.
    """
    base_level = _coerce_level(
        level if level is not None else (os.getenv(ENV_LOG_LEVEL) or os.getenv("LOG_LEVEL") or "INFO"),
        default=logging.INFO,
    )
    bytes_limit = int(os.getenv("OCTYNE_LOG_MAX_BYTES", str(max_bytes if max_bytes is not None else _DEFAULT_MAX_BYTES)))
    keep_files = int(
        os.getenv("OCTYNE_LOG_BACKUP_COUNT", str(backup_count if backup_count is not None else _DEFAULT_BACKUP_COUNT))
    )

    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(base_level)

    if add_console:
        has_console = any(
            type(h) is logging.StreamHandler and getattr(h, "stream", None) in (sys.stdout, sys.stderr)
            for h in logger.handlers
        )
        if not has_console:
            ch = logging.StreamHandler(stream=sys.stderr)
            ch.setLevel(base_level)
            ch.setFormatter(logging.Formatter(_DEFAULT_FORMAT_CONSOLE, datefmt=_DEFAULT_DATEFMT))
            logger.addHandler(ch)

    target = log_file or os.getenv(ENV_LOG_FILE)
    if target:
        log_path = Path(target).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        target_key = str(log_path.resolve())
        already_attached = any(
            getattr(h, "baseFilename", None) and str(Path(getattr(h, "baseFilename")).resolve()) == target_key
            for h in logger.handlers
        )
        if not already_attached:
            file_handler = logging.handlers.RotatingFileHandler(
                filename=log_path,
                maxBytes=max(1, bytes_limit),
                backupCount=max(1, keep_files),
                encoding="utf-8",
            )
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter(_DEFAULT_FORMAT_FILE, datefmt=_DEFAULT_DATEFMT))
            logger.addHandler(file_handler)

    configure_third_party_loggers(base_level)

    logger.debug(
        "Logging initialized: level=%s file=%s",
        logging.getLevelName(base_level),
        str(target) if target else None,
    )
    return logger
