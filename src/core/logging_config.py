"""Logging setup for entry points.

Library modules only call `logging.getLogger(__name__)`; handlers are
installed once here by whoever owns the process (the CLI).
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

from rich.console import Console
from rich.logging import RichHandler


class JSONFormatter(logging.Formatter):
    """Format log records as one JSON object per line."""

    # Standard LogRecord attributes that are not copied as extra fields
    _STANDARD_ATTRS = {
        "name", "msg", "args", "created", "filename", "funcName", "levelname",
        "levelno", "lineno", "module", "msecs", "message", "pathname",
        "process", "processName", "relativeCreated", "thread", "threadName",
        "exc_info", "exc_text", "stack_info", "taskName",
    }

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # logger.info("msg", extra={"host": "..."}) lands in record.__dict__
        for key, value in record.__dict__.items():
            if key not in self._STANDARD_ATTRS and not callable(value):
                log_data[key] = value

        return json.dumps(log_data, default=str)


def setup_logging(level: str | int = "WARNING", *, json_output: bool = False) -> logging.Handler:
    """Install a single root handler and return it.

    Rich output goes to stderr so it never mixes with command output (tables,
    JSON) written to stdout.
    """

    if json_output:
        handler: logging.Handler = logging.StreamHandler()
        handler.setFormatter(JSONFormatter())
    else:
        handler = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            rich_tracebacks=True,
        )

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [handler]
    return handler
