"""
Logging setup for domorest.

The library itself only creates ``domorest.*`` loggers and never installs
handlers. Applications and the CLI call setup_logging() to get readable
console output or JSON lines.

Usage:
    from domorest.utils import setup_logging

    setup_logging("DEBUG")                              # console
    setup_logging("INFO", use_json=True)                # JSON lines on stderr
    setup_logging("INFO", log_file="logs/domo.log")     # plus rotating file
"""

import json
import logging
import os
import sys
import traceback
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path

DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

ROOT_LOGGER = "domorest"

# Attributes every LogRecord has; anything else was passed via ``extra``
_RECORD_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


class SmartFormatter(logging.Formatter):
    """
    Console formatter.

    Adds ``[file:line]`` after the level for warnings and errors and
    optionally colors the line by level.
    """

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
        "RESET": "\033[0m",
    }

    def __init__(
        self,
        fmt: str = DEFAULT_FORMAT,
        datefmt: str = DEFAULT_DATE_FORMAT,
        use_colors: bool = False,
        include_location: bool = True,
    ):
        super().__init__(fmt, datefmt)
        self.use_colors = use_colors and self._supports_color()
        self.include_location = include_location

    @staticmethod
    def _supports_color() -> bool:
        if os.environ.get("NO_COLOR"):
            return False
        return hasattr(sys.stderr, "isatty") and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)

        if self.include_location and record.levelno >= logging.WARNING:
            location = f" [{record.filename}:{record.lineno}]"
            parts = formatted.split(" | ", 3)
            if len(parts) >= 3:
                formatted = f"{parts[0]} | {parts[1]}{location} | {' | '.join(parts[2:])}"

        if self.use_colors:
            color = self.COLORS.get(record.levelname, "")
            formatted = f"{color}{formatted}{self.COLORS['RESET']}"

        return formatted


class JSONFormatter(logging.Formatter):
    """One JSON object per line, for log aggregation."""

    def __init__(self, app_name: str = ROOT_LOGGER):
        super().__init__()
        self.app_name = app_name

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "app": self.app_name,
            "location": {
                "file": record.filename,
                "line": record.lineno,
                "function": record.funcName,
            },
        }

        if record.exc_info and record.exc_info[0]:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": traceback.format_exception(*record.exc_info),
            }

        extra = {
            k: v
            for k, v in record.__dict__.items()
            if k not in _RECORD_ATTRS and not k.startswith("_")
        }
        if extra:
            log_data["extra"] = extra

        return json.dumps(log_data, default=str)


def setup_logging(
    log_level: int | str = logging.INFO,
    use_json: bool = False,
    log_file: str | Path | None = None,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
    stream=None,
) -> logging.Logger:
    """
    Configure the ``domorest`` logger.

    Calling it again replaces previously installed handlers.

    Args:
        log_level: Minimum level (int or name like "DEBUG")
        use_json: Emit JSON lines instead of the console format
        log_file: Also write to this file with size-based rotation
        max_bytes: Maximum size per log file before rotation
        backup_count: Number of rotated files to keep
        stream: Console stream (defaults to stderr)

    Returns:
        The configured ``domorest`` logger
    """
    if isinstance(log_level, str):
        log_level = getattr(logging, log_level.upper(), logging.INFO)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(log_level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(stream or sys.stderr)
    console.setLevel(log_level)
    if use_json:
        console.setFormatter(JSONFormatter())
    else:
        console.setFormatter(SmartFormatter(use_colors=True))
    logger.addHandler(console)

    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(JSONFormatter() if use_json else SmartFormatter())
        logger.addHandler(file_handler)

    return logger
