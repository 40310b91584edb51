#!/usr/bin/env python3
# comet/interface/handler.py
from __future__ import annotations

"""
Command dispatch, help formatting and tail-tip descriptions across registries.

MasterRegistry mounts several registries in a fixed order. The first
registry claiming a name owns it for dispatch; help lists every registry
under its own header without deduplication.
"""

import difflib
import logging
from typing import Any, Optional, Sequence

from prompt_toolkit.completion import Completer

from comet.commands import (
    CmdDesc,
    CommandInput,
    CommandRegistry,
    CommandSession,
    CommandTable,
    UnknownCommandError,
    line_text,
)
from comet.interface.completion import compile_completers
from comet.interface.description import (
    DEFAULT_SOURCE_LIMIT,
    NamespaceSignatureLookup,
    SignatureLookup,
    describe_method,
)
from comet.interface.parser import CmdLine, DescriptionType, LineParser
from comet.ui import format_table

logger = logging.getLogger(__name__)

# Short hint used in unknown command errors
HELP_TEXT = "Type 'help' to list commands, '<command> --help' for details."

HELP_FLAGS = ("--help", "-?")

# Help listing layout: registry header at column 2, commands at 4, info at 20.
_NAME_INDENT = 4
_INFO_COLUMN = 20


def _canonical(registry: CommandRegistry, token: str) -> str:
    return registry.aliases().get(token, token)


class MasterRegistry:
    """
    Router over an ordered, fixed list of registries.

    The shell's own commands (help, exit) are a registry too; it is mounted
    first so they cannot be shadowed.
    """

    def __init__(
        self,
        registries: Sequence[CommandRegistry],
        parser: LineParser,
        *,
        signature_lookup: Optional[SignatureLookup] = None,
        max_source_length: int = DEFAULT_SOURCE_LIMIT,
    ) -> None:
        self.parser = parser
        self.signature_lookup = signature_lookup or NamespaceSignatureLookup()
        self.max_source_length = max_source_length
        self.shell_commands = self._build_shell_commands()
        self.registries: tuple[CommandRegistry, ...] = (self.shell_commands, *registries)

    # ---------------- Shell commands ----------------

    def _build_shell_commands(self) -> CommandTable:
        table = CommandTable("Shell")

        @table.command(
            info="list available commands",
            usage=["help [command]"],
            args={"command": "show details of one command"},
            name="help",
            aliases=["?"],
        )
        def show_help(cmd_input: CommandInput) -> None:
            if cmd_input.args:
                cmd_input.session.println(self.format_command_help(cmd_input.args[0]))
            else:
                self.help(cmd_input.session)

        @table.command(name="exit", info="leave the shell", usage=["exit"], aliases=["quit"])
        def leave(cmd_input: CommandInput) -> None:
            raise SystemExit(0)

        return table

    # ---------------- Lookup ----------------

    def resolve_owner(self, token: str) -> Optional[CommandRegistry]:
        """First registry, in aggregation order, that knows the token."""
        for registry in self.registries:
            if registry.has_command(token):
                return registry
        return None

    def has_command(self, token: str) -> bool:
        return self.resolve_owner(token) is not None

    def all_names(self) -> list[str]:
        """Command names and aliases of every registry (for suggestions)."""
        names: set[str] = set()
        for registry in self.registries:
            names.update(registry.names())
            names.update(registry.aliases())
        return sorted(names)

    def _suggest_similar_names(self, name: str) -> str:
        """Return a short suggestion string for misspelled commands."""
        matches = difflib.get_close_matches(name, self.all_names(), n=3, cutoff=0.6)
        return f" Did you mean: {', '.join(matches)}?" if matches else ""

    # ---------------- Help ----------------

    def format_help(self) -> str:
        lines = ["List of available commands:"]
        for registry in self.registries:
            lines.append(f"  {registry.name}:")
            for name in sorted(registry.names()):
                lead = " " * _NAME_INDENT + name
                lead = lead.ljust(_INFO_COLUMN) if len(lead) < _INFO_COLUMN else lead + " "
                lines.append(f"{lead}{registry.short_info(name) or ''}".rstrip())
        lines.append("  Additional help:")
        lines.append("    <command> --help")
        return "\n".join(lines)

    def help(self, session: CommandSession) -> None:
        """Write the help listing to the session."""
        session.println(self.format_help())

    def format_command_help(self, token: str) -> str:
        """Render help for one command: usage, aliases, arguments, options."""
        owner = self.resolve_owner(token)
        if owner is None:
            return f"No such command: {token}.{self._suggest_similar_names(token)}"

        name = _canonical(owner, token)
        description = owner.command_description(name)
        aliases = sorted(a for a, target in owner.aliases().items() if target == name)
        lines = [
            f"{name} - {owner.short_info(name) or '(no description)'}",
            f"Registry: {owner.name}",
            f"Aliases:  {', '.join(aliases) if aliases else '(none)'}",
        ]
        usage = description.main_text()
        if usage:
            lines.append("Usage:")
            lines.extend(f"  {line}" for line in usage)
        if description.arg_descriptions:
            rows = [[arg.name, " ".join(line_text(l) for l in arg.description)]
                    for arg in description.arg_descriptions]
            lines.append("Arguments:")
            lines.append(format_table(rows, indent=2))
        if description.option_descriptions:
            rows = [[opt, " ".join(line_text(l) for l in text)]
                    for opt, text in sorted(description.option_descriptions.items())]
            lines.append("Options:")
            lines.append(format_table(rows, indent=2))
        return "\n".join(lines)

    # ---------------- Descriptions ----------------

    def describe(self, line: CmdLine) -> Optional[CmdDesc]:
        """
        Description for the tail tip. Never raises.

        Returns None when nothing should be shown, an invalid CmdDesc when the
        input is not a well-formed command or call.
        """
        try:
            if line.description_type is DescriptionType.COMMAND:
                if not line.args:
                    return None
                name = self.parser.get_command(line.args[0])
                owner = self.resolve_owner(name)
                if owner is None:
                    return CmdDesc.invalid()
                return owner.command_description(_canonical(owner, name))
            if line.description_type is DescriptionType.METHOD:
                return describe_method(
                    line, self.signature_lookup, max_source_length=self.max_source_length)
            return CmdDesc.invalid()
        except Exception:
            logger.debug("Description failed for %r", line.line, exc_info=True)
            return CmdDesc.invalid()

    # ---------------- Completion ----------------

    def compile_completer(self, external: Optional[Completer] = None) -> Completer:
        return compile_completers(self.registries, external)

    # ---------------- Dispatch ----------------

    def dispatch(self, session: CommandSession, line: str) -> Any:
        """
        Parse and execute one input line.

        Raises UnknownCommandError for names no registry owns; failures of
        the command itself propagate to the caller.
        """
        parsed = self.parser.parse(line.strip())
        if not parsed.words:
            return None

        name = self.parser.get_command(parsed.words[0])
        owner = self.resolve_owner(name)
        if owner is None:
            raise UnknownCommandError(name, f"{self._suggest_similar_names(name)} {HELP_TEXT}")

        if len(parsed.args) == 1 and parsed.args[0] in HELP_FLAGS:
            session.println(self.format_command_help(name))
            return None

        logger.debug("Dispatching %r to %s", name, owner.name)
        return owner.execute(session, name, parsed.args)

