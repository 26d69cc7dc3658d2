"""
Logging setup for the MindEase engine.

Modules log through ``logging.getLogger(__name__)``; structured fields go in
``extra={"context": {...}}`` and are rendered by ConsoleFormatter.

    from mindease.log import setup_logging
    setup_logging()   # once, at startup
"""

from __future__ import annotations

import logging
from datetime import datetime

_initialized = False


class ConsoleFormatter(logging.Formatter):
    """Human-readable single-line format with an optional context summary."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        message = record.getMessage()

        context = getattr(record, "context", None)
        if context:
            parts = [f"{k}={v}" for k, v in context.items()]
            message += f" [{', '.join(parts)}]"

        line = f"{timestamp} {record.levelname[:4]:4s} {record.name}: {message}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def setup_logging(level: int = logging.INFO) -> None:
    """Attach a console handler to the ``mindease`` logger (idempotent)."""
    global _initialized
    if _initialized:
        return

    root = logging.getLogger("mindease")
    root.setLevel(level)
    handler = logging.StreamHandler()
    handler.setFormatter(ConsoleFormatter())
    root.addHandler(handler)

    _initialized = True
    root.debug("Logging initialized", extra={"context": {"level": logging.getLevelName(level)}})
