#!/usr/bin/env python3
# comet/commands/__init__.py
from __future__ import annotations

"""
Package for command definitions and registries.

Provides:
- Data structures and protocols (`Command`, `CommandInput`, `CommandResult`, `CmdDesc`).
- Session state shared by commands (`CommandSession`, `ShellOptions`).
- Completer building blocks (`ArgumentCompleter`, `CommandCompleter`, `RegexCompleter`).
- The registry contract and its dictionary-backed implementation
  (`CommandRegistry`, `CommandTable`).
"""


# Re-export from submodules
from .command_types import (
    ERROR_STYLE,
    ArgDesc,
    CmdDesc,
    Command,
    CommandExecutor,
    CommandFailed,
    CommandInput,
    CommandResult,
    CompleterFactory,
    UnknownCommandError,
    default_completer,
    line_text,
    styled,
    styled_lines,
)
from .session import AUTOSUGGESTION_MODES, TIP_TYPES, CommandSession, ShellOptions
from .completers import ArgumentCompleter, CommandCompleter, RegexCompleter, candidate_texts, split_current_token
from .registry import CommandRegistry, CommandTable

__all__ = [
    "ERROR_STYLE",
    "ArgDesc",
    "CmdDesc",
    "Command",
    "CommandExecutor",
    "CommandFailed",
    "CommandInput",
    "CommandResult",
    "CompleterFactory",
    "UnknownCommandError",
    "default_completer",
    "line_text",
    "styled",
    "styled_lines",
    "AUTOSUGGESTION_MODES",
    "TIP_TYPES",
    "CommandSession",
    "ShellOptions",
    "ArgumentCompleter",
    "CommandCompleter",
    "RegexCompleter",
    "candidate_texts",
    "split_current_token",
    "CommandRegistry",
    "CommandTable",
]
