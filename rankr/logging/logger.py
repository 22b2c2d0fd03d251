# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Structured JSON logger for rankr.

Every log entry is one JSON object per line with four mandatory fields:

  {"ts": "2026-...", "level": "INFO", "module": "rankr.eval.engine", "msg": "Run evaluated", ...}

Anything passed through `extra=` is merged into the object, which is how the
retrieval, fusion and evaluation code attaches numbers (query counts, metric
values, timings) to a message without formatting them into the string.

`get_logger` is the only factory. The console handler lives on the top-level
package logger (`rankr`), and module loggers propagate to it, so setting the
level, the log file or the console stream on `rankr` reaches every module
logger that has not pinned its own level. Library modules call
`get_logger(__name__)` once at import time; the CLI configures the package
logger from --log-level and the `global:` config section.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, TextIO

# Attributes every LogRecord carries. Anything else on the record came from
# the caller's `extra` dict.
_RESERVED_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", None, None)).keys()
) | {"message", "asctime", "taskName"}

_VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
_VALID_STREAMS = ("stdout", "stderr")
DEFAULT_LOG_LEVEL = "INFO"


class JsonFormatter(logging.Formatter):
    """Serialize a LogRecord to a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "ts": datetime.now(tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "module": record.name,
            "msg": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS or key.startswith("_"):
                continue
            entry[key] = value

        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class ConsoleHandler(logging.StreamHandler):  # type: ignore[type-arg]
    """
    StreamHandler that looks up sys.stdout or sys.stderr on every emit, so
    the target can be switched at runtime and replaced streams are honoured.
    """

    def __init__(self, stream_name: str = "stdout") -> None:
        logging.Handler.__init__(self)
        self.stream_name = stream_name

    @property
    def stream(self) -> TextIO:  # type: ignore[override]
        return getattr(sys, self.stream_name)


def _resolve_log_level(level_name: str) -> int:
    """Turn a level name string into the corresponding logging constant."""
    upper = level_name.upper()
    if upper not in _VALID_LOG_LEVELS:
        raise ValueError(
            f"Invalid log level '{level_name}'. Must be one of: {', '.join(sorted(_VALID_LOG_LEVELS))}"
        )
    return getattr(logging, upper)


def _console_handler(package_logger: logging.Logger) -> ConsoleHandler:
    for handler in package_logger.handlers:
        if isinstance(handler, ConsoleHandler):
            return handler

    handler = ConsoleHandler()
    handler.setFormatter(JsonFormatter())
    package_logger.addHandler(handler)
    package_logger.propagate = False
    if package_logger.level == logging.NOTSET:
        package_logger.setLevel(_resolve_log_level(DEFAULT_LOG_LEVEL))
    return handler


def _attach_file(logger: logging.Logger, log_file: Path) -> None:
    target = str(log_file.resolve())
    for handler in logger.handlers:
        if isinstance(handler, logging.FileHandler) and handler.baseFilename == target:
            return

    log_file.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setFormatter(JsonFormatter())
    logger.addHandler(file_handler)


def get_logger(
    name: str,
    log_level: Optional[str] = None,
    log_file: Optional[Path] = None,
    stream: Optional[str] = None,
) -> logging.Logger:
    """
    Create (or reconfigure) a structured JSON logger.

    Args:
        name: Logger name, typically __name__ of the calling module.
        log_level: One of DEBUG, INFO, WARNING, ERROR, CRITICAL. None leaves
                   the level alone, so a module logger follows the package
                   logger's level.
        log_file: Optional path to a log file, attached to this logger. A
                  file attached to `rankr` receives every module's entries.
        stream: "stdout" or "stderr" to retarget the console output of the
                whole package. None leaves it unchanged (stdout by default).

    Returns:
        A configured logging.Logger that outputs structured JSON.
    """
    package_name = name.split(".", 1)[0]
    console = _console_handler(logging.getLogger(package_name))

    if stream is not None:
        if stream not in _VALID_STREAMS:
            raise ValueError(f"Invalid log stream '{stream}'. Must be one of: {', '.join(_VALID_STREAMS)}")
        console.stream_name = stream

    logger = logging.getLogger(name)
    if log_level is not None:
        logger.setLevel(_resolve_log_level(log_level))

    if log_file is not None:
        _attach_file(logger, log_file)

    return logger
