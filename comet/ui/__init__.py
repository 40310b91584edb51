#!/usr/bin/env python3
# comet/ui/__init__.py
from __future__ import annotations
# Re-export convenient top-level API
from .utils import (
    ANSI,
    TERMINAL_CAPABILITIES,
    strip_ansi,
    enable_windows_vt,
    PRINT_MUTEX,
    print_line,
    colorize,
)
from .static import (
    format_table,
    init_logger,
    ColorizingStreamHandler,
    PlainFormatter,
)
from .animated import Ticker

__all__ = [
    "ANSI",
    "TERMINAL_CAPABILITIES",
    "strip_ansi",
    "enable_windows_vt",
    "colorize",
    "PRINT_MUTEX",
    "print_line",
    "format_table",
    "init_logger",
    "ColorizingStreamHandler",
    "PlainFormatter",
    "Ticker",
]
