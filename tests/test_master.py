# tests/test_master.py
from __future__ import annotations

import pytest
from prompt_toolkit.completion import WordCompleter

from comet.commands import (
    ERROR_STYLE,
    ArgumentCompleter,
    CmdDesc,
    CommandInput,
    CommandTable,
    UnknownCommandError,
)
from comet.interface import LineParser, MasterRegistry, NamespaceSignatureLookup, suggest


class _FailingLookup:
    def signatures(self, source: str) -> list[str]:
        raise ValueError("first line\nsecond line")


class _BrokenTable(CommandTable):
    def command_description(self, name: str) -> CmdDesc:
        raise RuntimeError("description exploded")


def test_resolve_owner_follows_aliases(master, registry_a, registry_b):
    assert master.resolve_owner("zle") is registry_b
    assert master.resolve_owner("widget") is registry_b
    assert master.resolve_owner("tput") is registry_a
    assert master.resolve_owner("nope") is None


def test_shell_commands_are_mounted_first(master):
    assert master.registries[0].name == "Shell"
    assert master.has_command("help")
    assert master.has_command("?")
    assert master.has_command("quit")


def test_help_lists_canonical_names_under_registry_headers(master):
    text = master.format_help()
    lines = text.splitlines()
    assert lines[0] == "List of available commands:"
    assert "  A:" in lines
    assert "  B:" in lines
    assert lines.index("  A:") < lines.index("  B:")
    assert "    tput            set terminal capability" in lines
    assert "    widget          manipulate widgets" in lines
    assert not any(line.strip().startswith("zle") for line in lines)
    assert lines[-2:] == ["  Additional help:", "    <command> --help"]


def test_first_registry_wins_but_help_lists_both(registry_a, parser, session, calls):
    other = CommandTable("C")

    @other.command(info="shadowed tput")
    def tput(cmd_input: CommandInput) -> None:
        raise AssertionError("must not run")

    master = MasterRegistry([registry_a, other], parser)
    assert master.resolve_owner("tput") is registry_a
    master.dispatch(session, "tput bold")
    assert calls[-1].args == ("bold",)

    text = master.format_help()
    assert text.count("    tput") == 2


def test_dispatch_runs_owner_with_canonical_name(master, session, calls):
    master.dispatch(session, "zle -l")
    assert calls[-1].name == "widget"
    assert calls[-1].args == ("-l",)


def test_dispatch_blank_line_is_a_no_op(master, session, calls):
    assert master.dispatch(session, "   ") is None
    assert calls == []


def test_dispatch_unknown_command_suggests_names(master, session):
    with pytest.raises(UnknownCommandError, match="Did you mean: tput"):
        master.dispatch(session, "tpt bold")


def test_dispatch_help_flag_prints_command_help(master, session, output, calls):
    master.dispatch(session, "zle --help")
    text = output.getvalue()
    assert text.startswith("widget - manipulate widgets")
    assert "Registry: B" in text
    assert "Aliases:  zle" in text
    assert calls == []


def test_help_command_writes_listing(master, session, output):
    master.dispatch(session, "?")
    assert output.getvalue().startswith("List of available commands:")


def test_help_command_with_argument(master, session, output):
    master.dispatch(session, "help tput")
    assert "Usage:" in output.getvalue()
    assert "  tput <capability>" in output.getvalue()


def test_exit_command_raises_system_exit(master, session):
    with pytest.raises(SystemExit):
        master.dispatch(session, "quit")


def test_describe_command_line(master, parser):
    described = master.describe(parser.classify("tput b"))
    assert described.valid
    assert described.main_text() == ["tput <capability>"]


def test_describe_alias_uses_canonical_description(master, parser):
    assert master.describe(parser.classify("zle ")) == master.describe(parser.classify("widget "))


def test_describe_unknown_command_is_invalid(master, parser):
    assert master.describe(parser.classify("nope x")).valid is False


def test_describe_empty_line_is_nothing(master, parser):
    assert master.describe(parser.classify("")) is None


def test_describe_syntax_error_is_invalid(master, parser):
    assert master.describe(parser.classify("tput )")).valid is False
    assert master.describe(parser.classify("x = [1, 2")).valid is False


def test_describe_control_keyword_is_nothing(master, parser):
    assert master.describe(parser.classify("if (")) is None
    assert master.describe(parser.classify("while  (")) is None


def test_describe_method_lists_signatures(parser):
    lookup = NamespaceSignatureLookup.from_modules(["json"])
    master = MasterRegistry([], parser, signature_lookup=lookup)
    described = master.describe(parser.classify("json.dumps("))
    assert described.valid
    assert described.main_text()[0].startswith("json.dumps(obj, *")
    assert described.arg_descriptions == ()
    assert dict(described.option_descriptions) == {}


def test_describe_method_size_guard_yields_error_lines(parser):
    master = MasterRegistry([], parser, max_source_length=20)
    line = "math.hypot(" + ", ".join(str(n) for n in range(40))
    described = master.describe(parser.classify(line))
    assert described.valid
    assert described.main_text() == [f"Failed to create object from source: {line}"]
    assert all(style == ERROR_STYLE for fragments in described.main_description for style, _ in fragments)


def test_describe_method_short_line_is_not_guarded(parser):
    lookup = NamespaceSignatureLookup.from_modules(["math"])
    master = MasterRegistry([], parser, signature_lookup=lookup, max_source_length=20)
    described = master.describe(parser.classify("math.dist("))
    assert described.main_text() == ["math.dist(p, q, /)"]


def test_describe_method_failure_message_one_line_per_line(parser):
    master = MasterRegistry([], parser, signature_lookup=_FailingLookup())
    described = master.describe(parser.classify("anything("))
    assert described.main_text() == ["first line", "second line"]


def test_describe_method_unknown_name_is_an_error_line(parser):
    master = MasterRegistry([], parser)
    described = master.describe(parser.classify("no_such_function("))
    assert described.main_text() == ["name 'no_such_function' is not defined"]


def test_describe_never_raises_from_registry(parser):
    broken = _BrokenTable("Broken")

    @broken.command(info="explodes")
    def kaboom(cmd_input: CommandInput) -> None:
        pass

    master = MasterRegistry([broken], parser)
    assert master.describe(parser.classify("kaboom x")).valid is False


def test_get_command_strips_assignment_and_path():
    parser = LineParser()
    assert parser.get_command("/usr/bin/tput") == "tput"
    assert parser.get_command("out=tput") == "tput"


def test_help_is_stable_and_sorted(parser):
    table = CommandTable("Unsorted")
    for name in ("zeta", "alpha", "mu", "beta"):
        table.command(name=name, info=f"{name} command")(lambda cmd_input: None)

    master = MasterRegistry([table], parser)
    first = master.format_help()
    assert master.format_help() == first

    lines = first.splitlines()
    start = lines.index("  Unsorted:") + 1
    listed = [line.split()[0] for line in lines[start:start + 4]]
    assert listed == ["alpha", "beta", "mu", "zeta"]


def test_alias_collision_goes_to_first_registry(parser, session):
    # Assumed policy: when two registries define the same alias, the
    # registry mounted first owns it for dispatch and completion.
    ran: list[str] = []
    first, second = CommandTable("First"), CommandTable("Second")

    @first.command(info="first", completer=lambda name: [ArgumentCompleter(WordCompleter(["one"], WORD=True))])
    def run_first(cmd_input: CommandInput) -> None:
        ran.append(cmd_input.name)

    @second.command(info="second", completer=lambda name: [ArgumentCompleter(WordCompleter(["two"], WORD=True))])
    def run_second(cmd_input: CommandInput) -> None:
        ran.append(cmd_input.name)

    first.alias("x", "run-first")
    second.alias("x", "run-second")
    master = MasterRegistry([first, second], parser)

    assert master.resolve_owner("x") is first
    master.dispatch(session, "x")
    assert ran == ["run-first"]
    assert suggest(master.compile_completer(), "x ") == ["one"]
