"""Logging setup for the sun CLI.

Records always go to stderr. Text mode renders through rich so warnings sit
alongside the CLI's own rich output; json mode emits one object per line.
"""

import json
import logging

from rich.console import Console
from rich.logging import RichHandler

# Attributes every LogRecord carries; anything else came in through ``extra=``
_STANDARD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}

_QUIET_LOGGERS = ("httpx", "httpcore", "asyncio")


class JSONFormatter(logging.Formatter):
    """One JSON object per record, including ``extra=`` fields."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(
            (key, value) for key, value in vars(record).items() if key not in _STANDARD_ATTRS
        )
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def _build_handler(format_type: str) -> logging.Handler:
    if format_type == "json":
        handler = logging.StreamHandler()
        handler.setFormatter(JSONFormatter())
        return handler

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        omit_repeated_times=False,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s", datefmt="%H:%M:%S"))
    return handler


def setup_logging(level: str = "WARNING", format_type: str = "text") -> None:
    """Replace the root handlers with a single stderr handler.

    Args:
        level: Log level name; unknown names fall back to WARNING
        format_type: "json" for structured records, "text" for rich output
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.WARNING))
    root_logger.handlers.clear()
    root_logger.addHandler(_build_handler(format_type))

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
