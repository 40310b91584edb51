#!/usr/bin/env python3
# comet/ui/utils/console.py
from __future__ import annotations

import sys
import threading

# Single shared mutex for every write to the terminal: foreground command
# output, log records and background tickers all serialize on it.
PRINT_MUTEX = threading.Lock()


def print_line(text: str = "", *, file=None, flush: bool = False) -> None:
    """Thread-safe single-line print that cooperates with background tasks."""
    # Resolved per call so prompt_toolkit's patched stdout is honoured.
    target = file if file is not None else sys.stdout
    with PRINT_MUTEX:
        target.write(f"{text}\n")
        if flush:
            target.flush()

