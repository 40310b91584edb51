#!/usr/bin/env python3
# comet/ui/static/logging.py
from __future__ import annotations

"""
Logging for the shell.

Records go to stderr through the shared print mutex so they never tear a
line of command output or a ticker announcement. A rotating plain-text
log file can be attached for debug traces.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

from comet.ui.utils import PRINT_MUTEX, colorize, enable_windows_vt, strip_ansi

CONSOLE_FORMAT = "[%(levelname)s] %(message)s"
FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_FILE_BYTES = 2_000_000
LOG_FILE_BACKUPS = 3


class ColorizingStreamHandler(logging.StreamHandler):
    """Level-coloured console handler writing under PRINT_MUTEX."""

    level_styles = {
        "DEBUG": ("grey",),
        "WARNING": ("yellow",),
        "ERROR": ("red",),
        "CRITICAL": ("red", "bold"),
    }

    def __init__(self, stream=None) -> None:
        super().__init__(stream)
        isatty = getattr(self.stream, "isatty", None)
        self.use_color = bool(isatty and isatty()) and enable_windows_vt()

    def emit(self, record: logging.LogRecord) -> None:
        try:
            text = self.format(record)
            if self.use_color:
                text = colorize(text, *self.level_styles.get(record.levelname, ()))
            else:
                text = strip_ansi(text)
            with PRINT_MUTEX:
                self.stream.write(text + self.terminator)
                self.stream.flush()
        except Exception:
            self.handleError(record)


class PlainFormatter(logging.Formatter):
    """Formatter for log files: escape sequences removed."""

    def format(self, record: logging.LogRecord) -> str:
        return strip_ansi(super().format(record))


def _has_handler(logger: logging.Logger, kind: type) -> bool:
    return any(isinstance(handler, kind) for handler in logger.handlers)


def init_logger(
    name: str = "comet",
    level: int = logging.WARNING,
    logfile: Optional[str] = None,
) -> logging.Logger:
    """
    Configure the `name` logger tree once and return it.

    The console shows records at `level` and above. When `logfile` is
    given the logger itself opens up to DEBUG and the file receives
    everything, so traces are kept without cluttering the prompt.
    """
    logger = logging.getLogger(name)
    logger.propagate = False
    logger.setLevel(logging.DEBUG if logfile else level)

    if not _has_handler(logger, ColorizingStreamHandler):
        console = ColorizingStreamHandler(sys.stderr)
        console.setLevel(level)
        console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        logger.addHandler(console)

    if logfile and not _has_handler(logger, RotatingFileHandler):
        to_file = RotatingFileHandler(
            logfile, maxBytes=LOG_FILE_BYTES, backupCount=LOG_FILE_BACKUPS, encoding="utf-8")
        to_file.setLevel(logging.DEBUG)
        to_file.setFormatter(PlainFormatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(to_file)

    return logger
