# plugins/example/entrypoint.py
from __future__ import annotations

import time

from prompt_toolkit.completion import DummyCompleter, WordCompleter

from comet.commands import ArgumentCompleter, CommandInput, CommandResult, CommandTable
from comet.ui import TERMINAL_CAPABILITIES

REGISTRY = CommandTable("ExampleCommands")

# capabilities tput can emit
CAPABILITIES = TERMINAL_CAPABILITIES


def _tput_completer(name: str):
    return [ArgumentCompleter(WordCompleter(sorted(CAPABILITIES), WORD=True), DummyCompleter())]


def _autosuggestion_completer(name: str):
    return [
        ArgumentCompleter(WordCompleter(["history", "completer", "none"], WORD=True), DummyCompleter()),
        ArgumentCompleter(
            WordCompleter(["tailtip"], WORD=True),
            WordCompleter(["tailtip", "completer", "combined"], WORD=True),
            DummyCompleter(),
        ),
    ]


@REGISTRY.command(
    info="set terminal capability",
    completer=_tput_completer,
    usage=["tput <capability>"],
    args={"capability": "terminfo capability name, e.g. bold, sgr0, clear"},
)
def tput(cmd_input: CommandInput) -> None:
    session = cmd_input.session
    if len(cmd_input.args) != 1:
        session.println("Usage: tput <capability>")
        return
    sequence = CAPABILITIES.get(cmd_input.args[0])
    if sequence is None:
        session.println("Unknown capability")
        return
    session.write(sequence)
    session.flush()


@REGISTRY.command(info="clear screen")
def clear(cmd_input: CommandInput) -> None:
    cmd_input.session.write(CAPABILITIES["clear"])
    cmd_input.session.flush()


@REGISTRY.command(
    info="sleep 3 seconds",
    usage=["sleep [seconds]"],
    args={"seconds": "how long to sleep (default 3)"},
)
def sleep(cmd_input: CommandInput) -> CommandResult | None:
    try:
        seconds = float(cmd_input.args[0]) if cmd_input.args else 3.0
    except ValueError:
        return CommandResult.failure(f"sleep: invalid time interval: {cmd_input.args[0]}")
    if seconds < 0:
        return CommandResult.failure("sleep: time interval must not be negative")
    time.sleep(seconds)
    return None


@REGISTRY.command(info="toggle brackets/quotes autopair key bindings")
def autopair(cmd_input: CommandInput) -> None:
    options = cmd_input.session.options
    options.autopair = not options.autopair
    cmd_input.session.println(f"Autopair widgets are {'enabled' if options.autopair else 'disabled'}.")


_TIP_PREFIXES = {"tai": "tailtip", "comp": "completer", "comb": "combined"}


def _tip_type(word: str) -> str | None:
    for prefix, tip_type in _TIP_PREFIXES.items():
        if word.startswith(prefix):
            return tip_type
    return None


@REGISTRY.command(
    info="set autosuggestion modality: history, completer, tailtip or none",
    completer=_autosuggestion_completer,
    usage=["autosuggestion [history|completer|none]", "autosuggestion tailtip [tailtip|completer|combined]"],
    args={
        "mode": "history, completer, tailtip or none",
        "tip-type": "tailtip, completer or combined (tailtip mode only)",
    },
)
def autosuggestion(cmd_input: CommandInput) -> None:
    session = cmd_input.session
    options = session.options
    args = cmd_input.args
    if not args:
        if options.autosuggestion == "tailtip":
            session.println(f"Autosuggestion: tailtip/{options.tip_type}")
        else:
            session.println(f"Autosuggestion: {options.autosuggestion}")
        return

    # Prefixes are enough: 'his', 'tai', 'com', 'non'.
    mode = args[0].lower()
    if mode.startswith("his"):
        options.set_autosuggestion("history")
    elif mode.startswith("tai"):
        tip_type = _tip_type(args[1].lower()) if len(args) > 1 else None
        options.set_autosuggestion("tailtip", tip_type)
    elif mode.startswith("com"):
        options.set_autosuggestion("completer")
    elif mode.startswith("non"):
        options.set_autosuggestion("none")
    else:
        session.println("Usage: autosuggestion history|completer|tailtip|none")
        return
    if session.redraw is not None:
        session.redraw()
