from __future__ import annotations

import json
import logging
import os
import sys
from typing import Optional

from core.io_utils import ensure_dir

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


class ContextFormatter(logging.Formatter):
    """Appends ``extra={"context": {...}}`` to the line as compact JSON."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = getattr(record, "context", None)
        if context:
            try:
                line += " " + json.dumps(context, sort_keys=True, default=str, separators=(",", ":"))
            except ValueError:
                line += f" {context!r}"
        return line


def level_from_name(name: str) -> int:
    return _LEVELS.get((name or "").upper(), logging.INFO)


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    # stdout carries the MCP protocol, so nothing may be logged there
    formatter = ContextFormatter(LOG_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        ensure_dir(os.path.dirname(log_file) or ".")
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)

    logging.basicConfig(level=level_from_name(level), handlers=handlers, force=True)
