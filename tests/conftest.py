# tests/conftest.py
from __future__ import annotations

import io

import pytest
from prompt_toolkit.completion import DummyCompleter, WordCompleter

from comet.commands import ArgumentCompleter, CommandInput, CommandSession, CommandTable
from comet.interface import LineParser, MasterRegistry


@pytest.fixture
def output() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def session(output: io.StringIO) -> CommandSession:
    return CommandSession(output=output)


@pytest.fixture
def calls() -> list[CommandInput]:
    return []


@pytest.fixture
def registry_a(calls: list[CommandInput]) -> CommandTable:
    """Registry A: 'tput' without aliases."""
    table = CommandTable("A")

    @table.command(
        info="set terminal capability",
        usage=["tput <capability>"],
        completer=lambda name: [ArgumentCompleter(WordCompleter(["bold", "sgr0"], WORD=True), DummyCompleter())],
    )
    def tput(cmd_input: CommandInput) -> None:
        calls.append(cmd_input)

    return table


@pytest.fixture
def registry_b(calls: list[CommandInput]) -> CommandTable:
    """Registry B: 'widget' aliased as 'zle'."""
    table = CommandTable("B")

    @table.command(
        info="manipulate widgets",
        completer=lambda name: [ArgumentCompleter(WordCompleter(["-A", "-D", "-l"], WORD=True), DummyCompleter())],
        options={"-l": "List widgets"},
    )
    def widget(cmd_input: CommandInput) -> None:
        calls.append(cmd_input)

    table.alias("zle", "widget")
    return table


@pytest.fixture
def parser() -> LineParser:
    return LineParser()


@pytest.fixture
def master(registry_a: CommandTable, registry_b: CommandTable, parser: LineParser) -> MasterRegistry:
    return MasterRegistry([registry_a, registry_b], parser)
