# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Structured JSON logger for pkger.

Every line pkger emits while building a release is a single JSON object, so
CI pipelines can grep the packaging run for the artifact that failed without
parsing free-form text.

  {"ts": "2026-...", "level": "INFO", "module": "pkger.release.packaging.packager",
   "msg": "Created package", "path": "minio-release/linux-amd64/minio_..._amd64.deb"}

`get_logger` is the only way loggers are created inside the package.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

# LogRecord attributes that are plumbing, not context.
_RECORD_ATTRS: frozenset[str] = frozenset(
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

_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

# Set by configure_package_logging, applied to pkger loggers created later.
_package_level: Optional[str] = None
_package_log_file: Optional[Path] = None


class JsonFormatter(logging.Formatter):
    """
    Formats log records as single-line JSON objects.

    Mandatory keys are ts, level, module and msg. Anything passed through
    `extra=` (packager, arch, path, ...) is merged in as additional keys.
    Exception info, when present, lands under "exc".
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "ts": datetime.now(tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "module": record.name,
            "msg": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRS and not key.startswith("_"):
                entry[key] = value

        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def _resolve_log_level(level_name: str) -> int:
    """Turn a level name string into the corresponding logging constant."""
    upper = level_name.upper()
    if upper not in _VALID_LOG_LEVELS:
        raise ValueError(
            f"Invalid log level '{level_name}'. Must be one of: {', '.join(sorted(_VALID_LOG_LEVELS))}"
        )
    return getattr(logging, upper)


def get_logger(
    name: str,
    log_level: Optional[str] = None,
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """
    Create (or re-level) a structured JSON logger.

    Calling it again for the same name re-levels the existing handlers and
    attaches `log_file` if it is not attached yet.

    Args:
        name: Logger name, typically __name__ of the calling module.
        log_level: One of DEBUG, INFO, WARNING, ERROR, CRITICAL. Defaults to
                   the package-wide level, or INFO.
        log_file: Optional path to a log file. Logs then go to both stderr
                  and the file. `pkger.*` loggers default to the
                  package-wide file.

    Returns:
        A configured logging.Logger that outputs structured JSON.
    """
    if log_level is None:
        log_level = _package_level or "INFO"
    if log_file is None and name.startswith("pkger."):
        log_file = _package_log_file

    logger = logging.getLogger(name)
    level = _resolve_log_level(log_level)
    logger.setLevel(level)
    formatter = JsonFormatter()

    if not logger.handlers:
        # stdout is reserved for command output (--version), logs go to stderr.
        stream_handler = logging.StreamHandler(stream=sys.stderr)
        stream_handler.setFormatter(formatter)
        logger.addHandler(stream_handler)

    if log_file is not None and not _has_file_handler(logger, log_file):
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    for handler in logger.handlers:
        handler.setLevel(level)

    logger.propagate = False

    return logger


def _has_file_handler(logger: logging.Logger, log_file: Path) -> bool:
    target = os.path.abspath(log_file)
    return any(
        isinstance(handler, logging.FileHandler) and handler.baseFilename == target
        for handler in logger.handlers
    )


def configure_package_logging(log_level: str, log_file: Optional[Path] = None) -> None:
    """
    Apply a CLI-selected level and log file to every `pkger` logger.

    Loggers that already exist are updated in place. Modules imported later
    pick the settings up when they call get_logger.
    """
    global _package_level, _package_log_file
    _resolve_log_level(log_level)
    _package_level = log_level
    _package_log_file = log_file

    for name in list(logging.Logger.manager.loggerDict):
        if name.startswith("pkger."):
            logger = logging.getLogger(name)
            if logger.handlers:
                get_logger(name, log_level=log_level, log_file=log_file)
