# src/logging/logger.py — v1
"""JSON and text formatters for the ``narragraph`` logger tree.

Both formatters tag each line with the active document/segment/stage
context, so lines from concurrently processed segments can be told apart.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from narragraph.logging.context import LogContext, get_context

ROOT_LOGGER = "narragraph"


def _timestamp(record: logging.LogRecord) -> datetime:
    return datetime.fromtimestamp(record.created, tz=timezone.utc)


class JsonFormatter(logging.Formatter):
    """One JSON object per line, with a ``context`` object when one is set."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": _timestamp(record).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = get_context().as_dict()
        if context:
            entry["context"] = context
        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Single-line development format: ``time [LEVEL] logger [segment] (stage): message``."""

    def format(self, record: logging.LogRecord) -> str:
        line = (
            f"{_timestamp(record):%Y-%m-%d %H:%M:%S} [{record.levelname:8s}] "
            f"{record.name}{_context_tag(get_context())}: {record.getMessage()}"
        )
        if record.exc_info and record.exc_info[1] is not None:
            line += "\n" + self.formatException(record.exc_info)
        return line


def _context_tag(ctx: LogContext) -> str:
    tag = ""
    if ctx.segment_id:
        tag += f" [{ctx.segment_id}]"
    if ctx.stage:
        tag += f" ({ctx.stage})"
    return tag


def setup_logging(
    level: str = "INFO",
    log_format: str = "json",
    log_file: str | None = None,
    rotation: str = "10MB",
    retention: int = 30,
) -> None:
    """Install stdout (and optional rotating file) handlers on the narragraph logger.

    Calling it again replaces the handlers instead of stacking them.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
        log_format: "json" or "text".
        log_file: Rotating log file path; stdout only when None.
        rotation: Size at which the file rotates (e.g. "10MB").
        retention: Number of rotated files to keep.
    """
    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()

    formatter = JsonFormatter() if log_format == "json" else TextFormatter()
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        from narragraph.logging.handlers import create_rotating_handler

        handlers.append(create_rotating_handler(log_file, rotation=rotation, retention=retention))

    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
