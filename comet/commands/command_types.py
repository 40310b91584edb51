#!/usr/bin/env python3
# comet/commands/command_types.py
from __future__ import annotations

"""
Command data structures and protocols.

This module defines:
- CommandExecutor / CompleterFactory: the callable protocols behind a command.
- CommandInput: the per-execution argument bundle handed to an executor.
- CommandResult: an explicit success/failure value an executor may return.
- Command: a registered command with metadata, executor and completer factory.
- CmdDesc / ArgDesc: structured help payload rendered by the tail-tip toolbar.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Iterable, Mapping, Protocol, Sequence

from prompt_toolkit.completion import Completer, DummyCompleter
from prompt_toolkit.formatted_text import FormattedText, fragment_list_to_text

if TYPE_CHECKING:  # pragma: no cover
    from comet.commands.session import CommandSession

# Style class for error lines in descriptions (see PromptToolkitCLI.style).
ERROR_STYLE = "class:tip.error"


# ---------------------------------------------------------------------------
# Styled lines
# ---------------------------------------------------------------------------

def styled(text: str, style: str = "") -> FormattedText:
    """Return one styled line as prompt_toolkit formatted text."""
    return FormattedText([(style, text)])


def styled_lines(text: str, style: str = "") -> list[FormattedText]:
    """Split text on newlines into one styled line per input line."""
    return [styled(line, style) for line in text.split("\n")]


def line_text(line: FormattedText) -> str:
    """Plain text of a styled line."""
    return fragment_list_to_text(line)


def _as_lines(value: str | FormattedText | Iterable[str | FormattedText]) -> tuple[FormattedText, ...]:
    if isinstance(value, str):
        return tuple(styled_lines(value))
    if isinstance(value, FormattedText):
        return (value,)
    return tuple(styled(v) if isinstance(v, str) else v for v in value)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class UnknownCommandError(LookupError):
    """Raised when a token names no command in the registry asked to run it."""

    def __init__(self, name: str, hint: str = "") -> None:
        super().__init__(f"Unknown command: {name}.{hint}")
        self.name = name


class CommandFailed(RuntimeError):
    """Raised by execute() for a failed CommandResult that carries no exception."""


# ---------------------------------------------------------------------------
# Protocols
# ---------------------------------------------------------------------------

class CommandExecutor(Protocol):
    """Protocol for any command implementation."""

    def __call__(self, cmd_input: "CommandInput") -> Any:  # pragma: no cover - signature only
        ...


class CompleterFactory(Protocol):
    """Produce the completer fragments for one command's arguments."""

    def __call__(self, name: str) -> list[Completer]:  # pragma: no cover - signature only
        ...


def default_completer(name: str) -> list[Completer]:
    """Commands without argument completion."""
    return [DummyCompleter()]


# ---------------------------------------------------------------------------
# Execution values
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class CommandInput:
    """
    Arguments for one execution. Created per call, discarded afterwards.

    Attributes:
        name: Canonical command name (aliases are already resolved).
        args: Argument words after the command word.
        session: Shared output/session handle.
    """
    name: str
    args: tuple[str, ...]
    session: "CommandSession"


@dataclass(slots=True)
class CommandResult:
    """
    What an executor may return instead of None.

    A result with ok=False is a failure the registry raises for the caller.

    Attributes:
        ok: False marks the execution as failed.
        message: Text printed by the read-eval loop, or the failure message.
        data: Optional machine-readable payload.
        error: The failure to surface when ok is False.
    """
    ok: bool = True
    message: str = ""
    data: Any = None
    error: BaseException | None = None

    @classmethod
    def failure(cls, error: BaseException | str) -> "CommandResult":
        if isinstance(error, BaseException):
            return cls(ok=False, message=str(error), error=error)
        return cls(ok=False, message=error)

    def __str__(self) -> str:
        if self.message:
            return self.message
        return "ok" if self.ok else "failed"


# ---------------------------------------------------------------------------
# Descriptions
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ArgDesc:
    """One argument of a command with its description lines."""
    name: str
    description: tuple[FormattedText, ...] = ()

    @classmethod
    def from_names(cls, names: Iterable[str]) -> tuple["ArgDesc", ...]:
        """Argument entries carrying only a name, e.g. ['param1', '[paramN...]']."""
        return tuple(cls(name) for name in names)


@dataclass(frozen=True, slots=True)
class CmdDesc:
    """
    Structured help payload for the tail-tip display.

    `valid=False` marks "no structured help applies" (a syntax marker), which
    is distinct from an empty but valid description. "Nothing to show" is
    represented by returning None instead of a CmdDesc.
    """
    main_description: tuple[FormattedText, ...] = ()
    arg_descriptions: tuple[ArgDesc, ...] = ()
    option_descriptions: Mapping[str, tuple[FormattedText, ...]] = field(default_factory=dict)
    valid: bool = True

    @classmethod
    def invalid(cls) -> "CmdDesc":
        return cls(valid=False)

    @classmethod
    def build(
        cls,
        main: str | Iterable[str | FormattedText] = (),
        args: Sequence[ArgDesc] | Mapping[str, str | Iterable[str]] = (),
        options: Mapping[str, str | Iterable[str]] | None = None,
    ) -> "CmdDesc":
        """Build a description from plain strings."""
        if isinstance(args, Mapping):
            arg_descs = tuple(ArgDesc(name, _as_lines(text)) for name, text in args.items())
        else:
            arg_descs = tuple(args)
        option_descs = {opt: _as_lines(text) for opt, text in (options or {}).items()}
        return cls(_as_lines(main), arg_descs, option_descs)

    def main_text(self) -> list[str]:
        return [line_text(line) for line in self.main_description]


# ---------------------------------------------------------------------------
# Command
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Command:
    """
    One entry of a command table.

    Fields:
        name: Canonical name, unique within its registry.
        short_info: One-line summary used by the help listing.
        executor: Function taking a CommandInput.
        completer_factory: Function taking the command name, returning completer fragments.
        usage: Usage lines shown by the tail tip and '<command> --help'.
        arg_descriptions: Ordered argument descriptions.
        option_descriptions: Option token -> description lines.
        module: Python module path where the command is defined.
    """

    name: str
    short_info: str
    executor: CommandExecutor
    completer_factory: CompleterFactory = default_completer
    usage: tuple[str, ...] = ()
    arg_descriptions: tuple[ArgDesc, ...] = ()
    option_descriptions: Mapping[str, tuple[FormattedText, ...]] = field(default_factory=dict)
    module: str = field(default="", repr=False)

    def describe(self) -> CmdDesc:
        """Static description; falls back to the short info line."""
        main = self.usage or ((self.short_info,) if self.short_info else ())
        return CmdDesc(
            main_description=tuple(styled(line) for line in main),
            arg_descriptions=self.arg_descriptions,
            option_descriptions=dict(self.option_descriptions),
        )

    def completers(self) -> list[Completer]:
        return list(self.completer_factory(self.name))
