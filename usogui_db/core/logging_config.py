"""
Logging setup for Usogui DB.

Everything logs through the standard library. ``setup_logging`` installs one
console handler on the root logger (plus an optional ``usogui_db.log`` file)
and pins noisy third-party loggers to quieter levels.

Environment knobs read at import time:

- ``USOGUI_DB_LOG_LEVEL``: console level when the server settings cannot load
- ``LOG_FORMAT``: ``simple``, ``detailed`` or ``json``
- ``LOG_FILE_DIR`` / ``ENABLE_FILE_LOGGING``: optional file output
"""

import logging
import os
from pathlib import Path
from typing import Dict, Optional

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_NAME = "usogui_db.log"

SIMPLE_FORMAT = "%(levelname)s - %(name)s - %(message)s"
DETAILED_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(funcName)s() - %(message)s"
JSON_FORMAT = (
    '{"timestamp": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", '
    '"module": "%(filename)s", "function": "%(funcName)s", "line": %(lineno)d, '
    '"message": "%(message)s"}'
)

_FORMATS: Dict[str, str] = {
    "simple": SIMPLE_FORMAT,
    "detailed": DETAILED_FORMAT,
    "json": JSON_FORMAT,
}

MODULE_LOG_LEVELS: Dict[str, str] = {
    "usogui_db.core": "INFO",
    "usogui_db.core.database": "INFO",
    "usogui_db.core.database.repositories": "DEBUG",
    "usogui_db.server": "INFO",
    "usogui_db.server.api": "DEBUG",
    "usogui_db.server.services": "DEBUG",
    "usogui_db.server.core": "INFO",
    # third party
    "sqlalchemy": "WARNING",
    "sqlalchemy.engine": "WARNING",
    "sqlalchemy.pool": "WARNING",
    "httpx": "WARNING",
    "asyncio": "WARNING",
    "uvicorn": "INFO",
    "uvicorn.access": "INFO",
}


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("true", "1", "yes")


def _default_level() -> str:
    # The server settings import this module, so they are loaded lazily.
    try:
        from usogui_db.server.core.config import settings

        return settings.log_level
    except Exception:
        return os.getenv("USOGUI_DB_LOG_LEVEL", "INFO")


LOG_LEVEL = _default_level().upper()
LOG_FORMAT = os.getenv("LOG_FORMAT", "detailed")
LOG_FILE_DIR = os.getenv("LOG_FILE_DIR", "logs")
ENABLE_FILE_LOGGING = _env_flag("ENABLE_FILE_LOGGING")


def _file_handler(formatter: logging.Formatter) -> logging.Handler:
    directory = Path(LOG_FILE_DIR)
    directory.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(directory / LOG_FILE_NAME)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    enable_file: bool = True,
) -> None:
    """
    Configure the root logger.

    Calling it again replaces the handlers installed by the previous call.

    Args:
        log_level: Console level, defaults to ``LOG_LEVEL``
        log_format: One of ``simple``, ``detailed`` or ``json``; unknown names fall back to ``detailed``
        enable_file: Also write to ``LOG_FILE_DIR`` when ``ENABLE_FILE_LOGGING`` is on
    """
    level = (log_level or LOG_LEVEL).upper()
    fmt = log_format or LOG_FORMAT
    formatter = logging.Formatter(_FORMATS.get(fmt, DETAILED_FORMAT), datefmt=DATE_FORMAT)

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    # Handlers do the filtering
    root.setLevel(logging.DEBUG)

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(formatter)
    root.addHandler(console)

    to_file = enable_file and ENABLE_FILE_LOGGING
    if to_file:
        root.addHandler(_file_handler(formatter))

    for name, module_level in MODULE_LOG_LEVELS.items():
        logging.getLogger(name).setLevel(module_level)

    root.info(f"Logging configured: level={level}, format={fmt}, file_logging={to_file}")


def get_logger(name: str) -> logging.Logger:
    """Return the logger for ``name`` (usually ``__name__``)."""
    return logging.getLogger(name)
