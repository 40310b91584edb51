#!/usr/bin/env python3
# comet/ui/utils/__init__.py
from __future__ import annotations
from .ansi import (
    ANSI,
    TERMINAL_CAPABILITIES,
    strip_ansi,
    enable_windows_vt,
    colorize,
)
from .console import PRINT_MUTEX, print_line

__all__ = [
    "ANSI",
    "TERMINAL_CAPABILITIES",
    "strip_ansi",
    "enable_windows_vt",
    "colorize",
    "PRINT_MUTEX",
    "print_line",
]
