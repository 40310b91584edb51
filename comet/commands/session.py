#!/usr/bin/env python3
# comet/commands/session.py
from __future__ import annotations

"""
Shared session state handed to every command.

CommandSession is the single output target of a shell: foreground commands
and background tasks write through it (or through PRINT_MUTEX directly), so
no two writers interleave partial lines.
"""

import sys
from dataclasses import dataclass, field, fields
from typing import Any, Callable, TextIO

from prompt_toolkit.history import History
from prompt_toolkit.key_binding import KeyBindings

from comet.ui import PRINT_MUTEX

AUTOSUGGESTION_MODES = ("history", "completer", "tailtip", "none")
TIP_TYPES = ("tailtip", "completer", "combined")


@dataclass(slots=True)
class ShellOptions:
    """Live line-editor options; the prompt reads them on every redraw."""
    autosuggestion: str = "tailtip"
    tip_type: str = "combined"
    tail_tip_lines: int = 5
    autopair: bool = False
    complete_while_typing: bool = True
    status_line: bool = False

    @classmethod
    def toggles(cls) -> list[str]:
        """Names of the boolean options (setopt/unsetopt targets)."""
        return [f.name for f in fields(cls) if f.type in ("bool", bool)]

    @property
    def tail_tip_enabled(self) -> bool:
        return self.autosuggestion == "tailtip" and self.tip_type in ("tailtip", "combined")

    @property
    def completion_menu_enabled(self) -> bool:
        if self.autosuggestion == "none":
            return False
        if self.autosuggestion == "tailtip":
            return self.complete_while_typing and self.tip_type in ("completer", "combined")
        return self.complete_while_typing

    def set_autosuggestion(self, mode: str, tip_type: str | None = None) -> None:
        if mode not in AUTOSUGGESTION_MODES:
            raise ValueError(f"autosuggestion must be one of {AUTOSUGGESTION_MODES}, got {mode!r}")
        if tip_type is not None and tip_type not in TIP_TYPES:
            raise ValueError(f"tip type must be one of {TIP_TYPES}, got {tip_type!r}")
        self.autosuggestion = mode
        if tip_type is not None:
            self.tip_type = tip_type


@dataclass(eq=False)
class CommandSession:
    """
    Opaque handle to the shared terminal/output target.

    Attributes:
        output: Stream written by commands (defaults to the current sys.stdout).
        options: Editor options commands may toggle.
        history: prompt_toolkit history of the running prompt, if any.
        key_bindings: Key bindings installed on the prompt, if any.
        widgets: Named editor actions (widget name -> callable).
        status: Text shown by the status line.
    """
    output: TextIO | None = None
    options: ShellOptions = field(default_factory=ShellOptions)
    history: History | None = None
    key_bindings: KeyBindings | None = None
    widgets: dict[str, Callable[..., Any]] = field(default_factory=dict)
    status: str = ""
    redraw: Callable[[], None] | None = None

    @property
    def stream(self) -> TextIO:
        return self.output if self.output is not None else sys.stdout

    def write(self, text: str) -> None:
        with PRINT_MUTEX:
            self.stream.write(text)

    def println(self, text: str = "") -> None:
        with PRINT_MUTEX:
            self.stream.write(f"{text}\n")
            self.stream.flush()

    def flush(self) -> None:
        with PRINT_MUTEX:
            self.stream.flush()

    def set_status(self, text: str) -> None:
        """Replace the status text and ask the prompt to redraw."""
        self.status = text
        if self.redraw is not None:
            self.redraw()
