"""
Shared utilities for the CLI.

Status output goes through the logging module: progress messages are
written to stdout with a success marker, problems to stderr with a
failure marker.
"""

import logging
import sys
from typing import Optional, TextIO

SUCCESS_MARKER = "✓"
WARNING_MARKER = "!"
FAILURE_MARKER = "✗"

_COLORS = {
    SUCCESS_MARKER: "\033[32m",
    WARNING_MARKER: "\033[33m",
    FAILURE_MARKER: "\033[31m",
}
_RESET = "\033[0m"

_ASCII_MARKERS = {
    SUCCESS_MARKER: "[OK]",
    FAILURE_MARKER: "[ERROR]",
}


class StatusFormatter(logging.Formatter):
    """Prefix each record with a status marker, colorized on terminals."""

    def __init__(self, fmt: str = "%(message)s", color: bool = False):
        super().__init__(fmt)
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        if record.levelno >= logging.ERROR:
            marker = FAILURE_MARKER
        elif record.levelno >= logging.WARNING:
            marker = WARNING_MARKER
        elif record.levelno >= logging.INFO:
            marker = SUCCESS_MARKER
        else:
            return message

        if self.color:
            return f"{_COLORS[marker]}{marker}{_RESET} {message}"
        return f"{marker} {message}"


class _MaxLevelFilter(logging.Filter):
    def __init__(self, max_level: int):
        super().__init__()
        self.max_level = max_level

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < self.max_level


class SafeStreamHandler(logging.StreamHandler):
    """Stream handler that degrades unicode markers on narrow encodings."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
            try:
                self.stream.write(msg + self.terminator)
            except UnicodeEncodeError:
                for marker, fallback in _ASCII_MARKERS.items():
                    msg = msg.replace(marker, fallback)
                self.stream.write(msg + self.terminator)
            self.flush()
        except Exception:
            self.handleError(record)


def _is_tty(stream: TextIO) -> bool:
    return hasattr(stream, "isatty") and stream.isatty()


def configure_logging(
    level: int = logging.INFO,
    fmt: str = "%(message)s",
    stdout: Optional[TextIO] = None,
    stderr: Optional[TextIO] = None,
) -> None:
    """
    Route log records to stdout (below WARNING) and stderr (WARNING and up).

    Args:
        level: Minimum level to emit
        fmt: Message format passed to the formatter
        stdout: Stream for progress messages (default: sys.stdout)
        stderr: Stream for diagnostics (default: sys.stderr)
    """
    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr

    out_handler = SafeStreamHandler(stdout)
    out_handler.addFilter(_MaxLevelFilter(logging.WARNING))
    out_handler.setFormatter(StatusFormatter(fmt, color=_is_tty(stdout)))

    err_handler = SafeStreamHandler(stderr)
    err_handler.setLevel(logging.WARNING)
    err_handler.setFormatter(StatusFormatter(fmt, color=_is_tty(stderr)))

    logging.basicConfig(
        level=level,
        handlers=[out_handler, err_handler],
        force=True,  # Reconfigure if already configured
    )
