#!/usr/bin/env python3
# comet/ui/utils/ansi.py
from __future__ import annotations

"""
Terminal escape sequences.

SGR colours for log records and error lines, and the small set of
terminfo capabilities the shell knows how to emit without a terminfo
database (xterm/VT100 sequences).
"""

import os
import re
from typing import Optional

CSI = "\x1b["

# colour/style name -> SGR sequence
ANSI = {
    "reset": f"{CSI}0m",
    "bold": f"{CSI}1m",
    "dim": f"{CSI}2m",
    "red": f"{CSI}31m",
    "green": f"{CSI}32m",
    "yellow": f"{CSI}33m",
    "magenta": f"{CSI}35m",
    "cyan": f"{CSI}36m",
    "grey": f"{CSI}90m",
}

# terminfo capability name -> control sequence
TERMINAL_CAPABILITIES = {
    "bel": "\a",
    "bold": ANSI["bold"],
    "civis": f"{CSI}?25l",
    "clear": f"{CSI}H{CSI}2J",
    "cnorm": f"{CSI}?25h",
    "dim": ANSI["dim"],
    "ed": f"{CSI}J",
    "el": f"{CSI}K",
    "home": f"{CSI}H",
    "rev": f"{CSI}7m",
    "rmcup": f"{CSI}?1049l",
    "rmul": f"{CSI}24m",
    "sgr0": f"{CSI}m",
    "smcup": f"{CSI}?1049h",
    "smul": f"{CSI}4m",
}

_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[A-Za-z]")

_vt_state: Optional[bool] = None


def strip_ansi(text: str) -> str:
    """Drop CSI sequences, leaving the visible text."""
    return _ESCAPE_RE.sub("", text)


def enable_windows_vt() -> bool:
    """
    Make sure escape sequences are interpreted by the console.

    Only Windows consoles need switching into VT mode; everywhere else this
    is a no-op returning True. The answer is cached for the process.
    """
    global _vt_state
    if _vt_state is None:
        _vt_state = os.name != "nt" or _switch_console_to_vt()
    return _vt_state


def _switch_console_to_vt() -> bool:
    if os.environ.get("WT_SESSION"):
        return True
    import ctypes

    try:
        kernel32 = ctypes.windll.kernel32  # type: ignore[attr-defined]
        handle = kernel32.GetStdHandle(-11)  # STD_OUTPUT_HANDLE
        mode = ctypes.c_uint()
        if not kernel32.GetConsoleMode(handle, ctypes.byref(mode)):
            return False
        # ENABLE_VIRTUAL_TERMINAL_PROCESSING
        return bool(kernel32.SetConsoleMode(handle, mode.value | 0x0004))
    except (AttributeError, OSError):
        return False


def colorize(text: str, *styles: str) -> str:
    """Wrap text in the named SGR styles, resetting afterwards. Unknown names are ignored."""
    prefix = "".join(ANSI.get(style, "") for style in styles)
    if not prefix:
        return text
    return f"{prefix}{text}{ANSI['reset']}"
