"""
UDR Core Logging - Console and Structured Logging

This module provides the log formatters used by the command line tools
and a timing helper for long reads.

Records emitted by the reader may carry the input position they refer to
as extra attributes (source, line_number, sentence_index). Both formatters
render that position when it is present.
"""

from __future__ import annotations
import sys
import json
import time
import logging
from datetime import datetime
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional, TextIO, Union

LOCATION_FIELDS = ("source", "line_number", "sentence_index")

_INSTALLED_MARKER = "_udr_installed"


def record_location(record: logging.LogRecord) -> Dict[str, Any]:
    """Collect the input position attached to a record"""
    return {
        name: getattr(record, name)
        for name in LOCATION_FIELDS
        if getattr(record, name, None) is not None
    }


class StructuredFormatter(logging.Formatter):
    """One JSON object per record, for log shipping"""

    def __init__(self, include_context: bool = True):
        super().__init__()
        self.include_context = include_context

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        location = record_location(record)
        if location:
            entry["location"] = location

        duration_ms = getattr(record, "duration_ms", None)
        if duration_ms is not None:
            entry["duration_ms"] = round(duration_ms, 3)

        if self.include_context and hasattr(record, "context"):
            entry["context"] = record.context

        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }

        # forms and lemmas are commonly non-ASCII
        return json.dumps(entry, ensure_ascii=False, default=str)


class ConsoleFormatter(logging.Formatter):
    """
    Human readable formatter for terminals.

    Layout: "timestamp | LEVEL | logger | message", followed by the input
    position in brackets when the record carries one. Level names are
    coloured only when the target stream is a terminal.
    """

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True, stream: Optional[TextIO] = None):
        super().__init__()
        target = stream if stream is not None else sys.stderr
        isatty = getattr(target, "isatty", None)
        self.use_colors = bool(use_colors and isatty is not None and isatty())

    def _level(self, record: logging.LogRecord) -> str:
        padded = f"{record.levelname:8}"
        if not self.use_colors:
            return padded
        return f"{self.LEVEL_COLORS.get(record.levelno, '')}{padded}{self.RESET}"

    def format(self, record: logging.LogRecord) -> str:
        stamp = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S")
        text = f"{stamp} | {self._level(record)} | {record.name} | {record.getMessage()}"

        location = record_location(record)
        if location:
            text += " [" + ", ".join(f"{k}={v}" for k, v in location.items()) + "]"

        if record.exc_info:
            text = f"{text}\n{self.formatException(record.exc_info)}"
        return text


def configure_logging(
    level: Union[int, str] = logging.WARNING,
    json_output: bool = False,
    stream: Optional[TextIO] = None
) -> logging.Handler:
    """Install a single handler on the root logger"""
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        level = resolved if isinstance(resolved, int) else logging.WARNING

    stream = stream or sys.stderr
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter() if json_output else ConsoleFormatter(stream=stream))
    setattr(handler, _INSTALLED_MARKER, True)

    reset_logging()
    root = logging.getLogger()
    root.addHandler(handler)
    root.setLevel(level)
    return handler


def reset_logging():
    """Remove handlers installed by configure_logging"""
    root = logging.getLogger()
    for handler in [h for h in root.handlers if getattr(h, _INSTALLED_MARKER, False)]:
        root.removeHandler(handler)
        handler.close()


@contextmanager
def timed(logger: logging.Logger, operation: str, level: int = logging.INFO) -> Iterator[None]:
    """Log start, completion or failure of an operation with its duration"""
    started = time.perf_counter()
    logger.log(level, f"Starting: {operation}")

    def elapsed_ms() -> float:
        return (time.perf_counter() - started) * 1000

    try:
        yield
    except Exception as e:
        logger.error(f"Failed: {operation} - {e}", extra={"duration_ms": elapsed_ms()})
        raise
    logger.log(level, f"Completed: {operation}", extra={"duration_ms": elapsed_ms()})
