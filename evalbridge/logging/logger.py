# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Structured JSON logger for evalbridge.

Every diagnostic line the service writes goes through here, including the
readiness line the lifecycle keeper emits once at startup. Nothing in the
package calls print() for diagnostics: stdout belongs to the host console,
and the evaluated source writes into its own private buffers.

How this works:
  - Python's standard `logging` module underneath, with JsonFormatter
    serializing every record into a single JSON line.
  - One handler for stdout, one optionally for a file.
  - `get_logger` is the only factory. Modules call it once at import time.
  - `configure_package_logging` applies the configured level and log file
    to every evalbridge.* logger, including the ones created at import.

The JSON structure looks like:
  {"ts": "2026-...", "level": "INFO", "module": "evalbridge.bridge.server", "msg": "...", ...}
"""

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

_STANDARD_RECORD_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "relativeCreated",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "pathname",
        "filename",
        "module",
        "levelno",
        "levelname",
        "processName",
        "process",
        "threadName",
        "thread",
        "message",
        "msecs",
        "taskName",
    }
)


class JsonFormatter(logging.Formatter):
    """
    Formats log records as single-line JSON objects.

    Mandatory fields:
      ts    : ISO 8601 UTC timestamp
      level : log level name
      module: the logger name
      msg   : the formatted message string

    Anything passed through `extra=` is merged in as additional fields.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "ts": datetime.now(tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "module": record.name,
            "msg": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key not in _STANDARD_RECORD_ATTRS and not key.startswith("_"):
                entry[key] = value

        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _resolve_log_level(level_name: str) -> int:
    """Turn a level name string into the corresponding logging constant."""
    upper = level_name.upper()
    if upper not in _VALID_LOG_LEVELS:
        raise ValueError(
            f"Invalid log level '{level_name}'. Must be one of: {', '.join(sorted(_VALID_LOG_LEVELS))}"
        )
    return getattr(logging, upper)


_PACKAGE_ROOT = "evalbridge"

# Defaults for loggers inside the package; configure_package_logging changes them.
_package_defaults: dict[str, Any] = {"log_level": "INFO", "log_file": None}


def _in_package(name: str) -> bool:
    return name == _PACKAGE_ROOT or name.startswith(_PACKAGE_ROOT + ".")


def _file_handler(log_file: Path, level: int) -> logging.FileHandler:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(str(log_file), encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(JsonFormatter())
    return handler


def get_logger(
    name: str,
    log_level: Optional[str] = None,
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """
    Create a structured JSON logger.

    Args:
        name: Logger name, typically __name__ of the calling module.
        log_level: One of DEBUG, INFO, WARNING, ERROR, CRITICAL. Defaults to
                   the package level for evalbridge.* loggers, INFO otherwise.
        log_file: Optional path to a log file. If provided, logs go to both
                  stdout and the file. evalbridge.* loggers fall back to the
                  package log file.

    Returns:
        A configured logging.Logger that outputs structured JSON.
    """
    if _in_package(name):
        log_level = log_level or _package_defaults["log_level"]
        log_file = log_file or _package_defaults["log_file"]
    logger = logging.getLogger(name)
    level = _resolve_log_level(log_level or "INFO")
    logger.setLevel(level)

    # get_logger is called repeatedly for the same name in tests.
    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    # The handler keeps this stream object, so later redirects of sys.stdout
    # during evaluation never reach the log.
    stdout_handler = logging.StreamHandler(stream=sys.stdout)
    stdout_handler.setLevel(level)
    stdout_handler.setFormatter(JsonFormatter())
    logger.addHandler(stdout_handler)

    if log_file is not None:
        logger.addHandler(_file_handler(log_file, level))

    logger.propagate = False

    return logger


def configure_package_logging(log_level: str = "INFO", log_file: Optional[Path] = None) -> None:
    """
    Apply one level and one log file to every evalbridge logger.

    Module loggers are created at import time, before any config is read.
    This reconfigures the ones that already exist and sets the defaults
    get_logger hands to the ones created later. Passing log_file=None
    detaches any file handler a previous call added.
    """
    level = _resolve_log_level(log_level)
    _package_defaults["log_level"] = log_level
    _package_defaults["log_file"] = log_file

    for name, logger in list(logging.Logger.manager.loggerDict.items()):
        if not isinstance(logger, logging.Logger) or not _in_package(name) or not logger.handlers:
            continue
        logger.setLevel(level)
        for handler in list(logger.handlers):
            if isinstance(handler, logging.FileHandler):
                logger.removeHandler(handler)
                handler.close()
            else:
                handler.setLevel(level)
        if log_file is not None:
            logger.addHandler(_file_handler(log_file, level))
