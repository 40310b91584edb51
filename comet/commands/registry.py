#!/usr/bin/env python3
# comet/commands/registry.py
from __future__ import annotations

"""
Command registries.

This module provides:
- CommandRegistry: the contract every mountable set of commands satisfies.
- CommandTable: dictionary-backed registry with a `command` decorator,
  alias and rename support.
"""

import logging
from dataclasses import replace
from typing import Any, Callable, Iterable, Mapping, Protocol, Sequence, runtime_checkable

from prompt_toolkit.formatted_text import FormattedText

from comet.commands.command_types import (
    ArgDesc,
    CmdDesc,
    Command,
    CommandInput,
    CommandFailed,
    CommandResult,
    CompleterFactory,
    UnknownCommandError,
    default_completer,
    styled_lines,
)
from comet.commands.completers import CommandCompleter
from comet.commands.session import CommandSession

logger = logging.getLogger(__name__)


def _to_lines(text: str | Sequence[str]) -> tuple[FormattedText, ...]:
    return tuple(styled_lines(text if isinstance(text, str) else "\n".join(text)))


@runtime_checkable
class CommandRegistry(Protocol):
    """
    Anything the shell can mount: a named set of commands with aliases,
    completion, short info and static descriptions.
    """

    name: str

    def names(self) -> set[str]: ...

    def aliases(self) -> dict[str, str]: ...

    def has_command(self, token: str) -> bool: ...

    def short_info(self, token: str) -> str | None: ...

    def compile_completers(self) -> CommandCompleter: ...

    def execute(self, session: CommandSession, token: str, args: Sequence[str]) -> Any: ...

    def command_description(self, name: str) -> CmdDesc: ...


class CommandTable:
    """Holds one registry's command definitions and alias map."""

    def __init__(
        self,
        name: str,
        commands: Iterable[Command] = (),
        aliases: Mapping[str, str] | None = None,
    ) -> None:
        self.name = name
        # Canonical name -> Command
        self._commands: dict[str, Command] = {}
        # Alias name -> canonical name
        self._alias_to_primary: dict[str, str] = {}
        for command_obj in commands:
            self.register(command_obj)
        for alias_name, target in (aliases or {}).items():
            self.alias(alias_name, target)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r} ({len(self._commands)} commands)>"

    # ---------------- Registration ----------------

    def register(self, command_obj: Command) -> Command:
        """Register a command, ensuring no collision with names or aliases."""
        key = command_obj.name
        if not key or key.split() != [key]:
            raise ValueError(f"Invalid command name: {key!r}")
        if key in self._commands or key in self._alias_to_primary:
            raise ValueError(f"Command '{key}' already registered in {self.name}.")
        self._commands[key] = command_obj
        return command_obj

    def command(
        self,
        *,
        name: str | None = None,
        info: str | None = None,
        completer: CompleterFactory | None = None,
        usage: Sequence[str] = (),
        args: Mapping[str, str | Sequence[str]] | Sequence[str] | None = None,
        options: Mapping[str, str | Sequence[str]] | None = None,
        aliases: Sequence[str] = (),
    ) -> Callable[[Callable[[CommandInput], Any]], Callable[[CommandInput], Any]]:
        """
        Decorator to register a function as a command of this registry.

        - Function name is transformed from snake_case to kebab-case for `name` if not provided.
        - `info` defaults to the first docstring line.
        - `args` is either names only or a mapping name -> description.
        """

        def wrapper(func: Callable[[CommandInput], Any]) -> Callable[[CommandInput], Any]:
            doc_line = (func.__doc__ or "").strip().splitlines()
            if args is None:
                arg_descs: tuple[ArgDesc, ...] = ()
            elif isinstance(args, Mapping):
                arg_descs = tuple(ArgDesc(k, _to_lines(v)) for k, v in args.items())
            else:
                arg_descs = ArgDesc.from_names(args)

            command_obj = Command(
                name=(name or func.__name__).replace("_", "-"),
                short_info=(info or (doc_line[0] if doc_line else "")).strip(),
                executor=func,
                completer_factory=completer or default_completer,
                usage=tuple(usage),
                arg_descriptions=arg_descs,
                option_descriptions={
                    opt: _to_lines(text)
                    for opt, text in (options or {}).items()
                },
                module=func.__module__,
            )
            self.register(command_obj)
            for alias_name in aliases:
                self.alias(alias_name, command_obj.name)
            return func

        return wrapper

    def alias(self, alias_name: str, target: str) -> None:
        """Add or repoint an alias; the target may itself be an alias."""
        canonical = self.resolve(target)
        if canonical is None:
            raise ValueError(f"Cannot alias '{alias_name}': no command '{target}' in {self.name}.")
        if alias_name in self._commands:
            raise ValueError(f"Alias '{alias_name}' collides with a command in {self.name}.")
        self._alias_to_primary[alias_name] = canonical

    def rename(self, old_name: str, new_name: str) -> None:
        """Move a canonical command to a new name; its aliases follow."""
        if old_name not in self._commands:
            raise ValueError(f"No command '{old_name}' in {self.name}.")
        if new_name in self._commands or new_name in self._alias_to_primary:
            raise ValueError(f"Cannot rename to '{new_name}': name in use in {self.name}.")
        # Rebuild to keep insertion order stable.
        self._commands = {
            (new_name if key == old_name else key): (replace(cmd, name=new_name) if key == old_name else cmd)
            for key, cmd in self._commands.items()
        }
        for alias_name, target in self._alias_to_primary.items():
            if target == old_name:
                self._alias_to_primary[alias_name] = new_name

    # ---------------- Lookup ----------------

    def resolve(self, token: str) -> str | None:
        """Return the canonical name for a command name or alias, or None."""
        if token in self._commands:
            return token
        return self._alias_to_primary.get(token)

    def get(self, token: str) -> Command | None:
        canonical = self.resolve(token)
        return self._commands[canonical] if canonical is not None else None

    def all(self) -> list[Command]:
        """Return canonical commands only (avoid duplicates in UIs)."""
        return list(self._commands.values())

    def names(self) -> set[str]:
        return set(self._commands)

    def aliases(self) -> dict[str, str]:
        return dict(self._alias_to_primary)

    def has_command(self, token: str) -> bool:
        return token in self._commands or token in self._alias_to_primary

    def short_info(self, token: str) -> str | None:
        command_obj = self.get(token)
        return command_obj.short_info if command_obj is not None else None

    # ---------------- Completion / description ----------------

    def compile_completers(self) -> CommandCompleter:
        """Build a fresh name-dispatching completer reflecting the current aliases."""
        out = CommandCompleter()
        for name, command_obj in self._commands.items():
            out.add(name, command_obj.completers())
        out.add_aliases(self._alias_to_primary)
        return out.compile()

    def command_description(self, name: str) -> CmdDesc:
        command_obj = self.get(name)
        if command_obj is None:
            return CmdDesc.invalid()
        return command_obj.describe()

    # ---------------- Execution ----------------

    def execute(self, session: CommandSession, token: str, args: Sequence[str]) -> Any:
        """
        Run one command. A failed CommandResult is raised as its error (or
        CommandFailed); exceptions from the executor propagate unchanged.
        """
        canonical = self.resolve(token)
        if canonical is None:
            raise UnknownCommandError(token)
        command_obj = self._commands[canonical]
        logger.debug("%s: executing %s (as %r) with %d args",
                     self.name, canonical, token, len(args))

        result = command_obj.executor(
            CommandInput(name=canonical, args=tuple(args), session=session))

        if isinstance(result, CommandResult) and not result.ok:
            if result.error is not None:
                raise result.error
            raise CommandFailed(result.message or f"{canonical} failed")
        return result
