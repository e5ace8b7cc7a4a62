"""Opt-in log output for the integrators.

Every module logs to a child of the ``adaptnum`` logger, which carries only a
``NullHandler`` until one of the helpers below attaches a real handler. What
gets logged:

    DEBUG    one summary line per top-level call (calls, leaves, steps)
    WARNING  a tolerance, depth or step budget ran out; the result is
             returned anyway with ``converged=False``

Quick start:
    import adaptnum

    adaptnum.enable_console_logging(level="DEBUG")       # stderr, plain text
    adaptnum.enable_file_logging("runs/adaptnum.log")    # rotating file
    adaptnum.enable_json_logging()                       # stderr, JSON lines
    adaptnum.set_module_level("ode.dopri", "WARNING")    # quieter submodule

``configure_from_env`` does the same from the environment:
``ADAPTNUM_LOGGING`` names the level, ``ADAPTNUM_LOG_FILE`` switches output
to a rotating file and ``ADAPTNUM_LOG_JSON=1`` selects JSON records.
"""

from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Literal

__all__ = [
    "configure_from_env",
    "disable_logging",
    "enable_console_logging",
    "enable_file_logging",
    "enable_json_logging",
    "set_level",
    "set_module_level",
]

DEFAULT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

DEFAULT_MAX_BYTES = 5 * 1024 * 1024
DEFAULT_BACKUP_COUNT = 3

LOGGER_NAME = "adaptnum"

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


class JsonFormatter(logging.Formatter):
    """Renders a record as a single-line JSON object.

    Keys: ``timestamp`` (UTC, ISO 8601), ``level``, ``logger``, ``message``
    and, when the record carries a traceback, ``exception``.
    """

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload = {
            "timestamp": created.isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def _level_number(level: str | int) -> int:
    # unrecognised names fall back to INFO rather than raising
    if isinstance(level, int):
        return level
    return _LEVELS.get(level.strip().upper(), logging.INFO)


def _package_logger() -> logging.Logger:
    return logging.getLogger(LOGGER_NAME)


def _attach(handler: logging.Handler, level: LogLevel | int) -> None:
    number = _level_number(level)
    handler.setLevel(number)
    package_logger = _package_logger()
    package_logger.setLevel(number)
    package_logger.addHandler(handler)


def _detach_handlers() -> None:
    package_logger = _package_logger()
    attached = [h for h in package_logger.handlers if not isinstance(h, logging.NullHandler)]
    for handler in attached:
        package_logger.removeHandler(handler)
        handler.close()


def enable_console_logging(
    level: LogLevel | int = "INFO",
    format: str = DEFAULT_FORMAT,
    date_format: str = DEFAULT_DATE_FORMAT,
) -> logging.StreamHandler:
    """Print integrator records on stderr and return the new handler."""
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(format, date_format))
    _attach(handler, level)
    return handler


def enable_file_logging(
    path: str | Path,
    level: LogLevel | int = "INFO",
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
    format: str = DEFAULT_FORMAT,
    date_format: str = DEFAULT_DATE_FORMAT,
) -> RotatingFileHandler:
    """Append integrator records to ``path``, rolling over by size.

    Missing parent directories of ``path`` are created. Once the file passes
    ``max_bytes`` it is renamed to ``path.1`` (and older copies shifted up to
    ``path.<backup_count>``) before a fresh file is started.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    handler = RotatingFileHandler(path, maxBytes=max_bytes, backupCount=backup_count)
    handler.setFormatter(logging.Formatter(format, date_format))
    _attach(handler, level)
    return handler


def enable_json_logging(level: LogLevel | int = "INFO") -> logging.StreamHandler:
    """Like :func:`enable_console_logging`, but each record is a JSON line."""
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    _attach(handler, level)
    return handler


def disable_logging() -> None:
    """Detach and close every handler the helpers attached, then mute the package."""
    _detach_handlers()
    _package_logger().setLevel(logging.CRITICAL + 1)


def configure_from_env() -> None:
    """Attach a handler according to the ``ADAPTNUM_*`` variables.

    With ``ADAPTNUM_LOG_FILE`` set, records go to that file (as JSON when
    ``ADAPTNUM_LOG_JSON=1``); otherwise ``ADAPTNUM_LOGGING`` alone sends
    them to stderr. The level defaults to INFO. Nothing happens when
    neither ``ADAPTNUM_LOGGING`` nor ``ADAPTNUM_LOG_FILE`` is set.
    """
    level = os.environ.get("ADAPTNUM_LOGGING", "").strip().upper()
    log_file = os.environ.get("ADAPTNUM_LOG_FILE", "").strip()
    as_json = os.environ.get("ADAPTNUM_LOG_JSON", "") == "1"
    if not (level or log_file):
        return

    level = level or "INFO"
    if not log_file:
        (enable_json_logging if as_json else enable_console_logging)(level=level)
        return
    handler = enable_file_logging(log_file, level=level)
    if as_json:
        handler.setFormatter(JsonFormatter())


def set_level(level: LogLevel | int) -> None:
    """Change the threshold of the whole ``adaptnum`` hierarchy."""
    _package_logger().setLevel(_level_number(level))


def set_module_level(module: str, level: LogLevel | int) -> None:
    """Change the threshold of one submodule, named relative to the package.

    Example: ``set_module_level("quadrature.romberg", "ERROR")``.
    """
    logging.getLogger(f"{LOGGER_NAME}.{module}").setLevel(_level_number(level))
