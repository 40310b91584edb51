# plugins/builtins/entrypoint.py
from __future__ import annotations

import threading

from prompt_toolkit.completion import DummyCompleter, WordCompleter
from prompt_toolkit.keys import Keys

from comet.commands import (
    ArgumentCompleter,
    CommandInput,
    CommandResult,
    CommandTable,
    ShellOptions,
)
from comet.ui import format_table

REGISTRY = CommandTable("Builtins")


def _option_names() -> list[str]:
    return [name.replace("_", "-") for name in ShellOptions.toggles()]


def _options_completer(name: str):
    return [ArgumentCompleter(WordCompleter(_option_names, WORD=True))]


def _widget_completer(name: str):
    return [ArgumentCompleter(WordCompleter(["-N", "-D", "-A", "-l"], WORD=True), DummyCompleter())]


# ---------- history ----------
@REGISTRY.command(
    info="list the command history",
    usage=["history [count]"],
    args={"count": "number of most recent entries to show"},
)
def history(cmd_input: CommandInput) -> CommandResult | None:
    session = cmd_input.session
    if session.history is None:
        return CommandResult.failure("no history in this session")
    entries = list(session.history.get_strings())
    if cmd_input.args:
        try:
            count = int(cmd_input.args[0])
        except ValueError:
            return CommandResult.failure(f"history: not a number: {cmd_input.args[0]}")
        start = max(0, len(entries) - count)
    else:
        start = 0
    for index in range(start, len(entries)):
        session.println(f"{index + 1:5d}  {entries[index]}")
    return None


# ---------- keymap ----------
def _key_text(key) -> str:
    return key.value if isinstance(key, Keys) else str(key)


@REGISTRY.command(info="list the installed key bindings", usage=["keymap"])
def keymap(cmd_input: CommandInput) -> None:
    session = cmd_input.session
    if session.key_bindings is None or not session.key_bindings.bindings:
        session.println("No key bindings installed.")
        return
    rows = [
        [" ".join(_key_text(k) for k in binding.keys), getattr(binding.handler, "__name__", "?")]
        for binding in session.key_bindings.bindings
    ]
    session.println(format_table(rows, headers=["Keys", "Widget"]))


# ---------- widget ----------
@REGISTRY.command(
    info="manipulate widgets",
    completer=_widget_completer,
    usage=[
        "widget -N new-widget widget-name",
        "widget -D widget ...",
        "widget -A old-widget new-widget",
        "widget -l",
    ],
    args=["[pN...]"],
    options={
        "-N": "Create new widget",
        "-D": "Delete widgets",
        "-A": "Create alias to widget",
        "-l": "List widgets",
    },
)
def widget(cmd_input: CommandInput) -> CommandResult | None:
    session = cmd_input.session
    widgets = session.widgets
    args = cmd_input.args
    if not args or args[0] == "-l":
        for name in sorted(widgets):
            session.println(name)
        return None

    flag, rest = args[0], list(args[1:])
    if flag == "-D" and rest:
        missing = [name for name in rest if name not in widgets]
        if missing:
            return CommandResult.failure(f"widget: no such widget: {', '.join(missing)}")
        for name in rest:
            del widgets[name]
        return None
    if flag == "-A" and len(rest) == 2:
        old, new = rest
        if old not in widgets:
            return CommandResult.failure(f"widget: no such widget: {old}")
        widgets[new] = widgets[old]
        return None
    if flag == "-N" and len(rest) == 2:
        new, source = rest
        if source not in widgets:
            return CommandResult.failure(f"widget: no such widget: {source}")
        if new in widgets:
            return CommandResult.failure(f"widget: widget already exists: {new}")
        widgets[new] = widgets[source]
        return None
    return CommandResult.failure("Usage: widget -N new widget | -D widget ... | -A old new | -l")


# ---------- setopt / unsetopt ----------
def _set_options(cmd_input: CommandInput, value: bool) -> CommandResult | None:
    session = cmd_input.session
    known = ShellOptions.toggles()
    if not cmd_input.args:
        for name in known:
            state = "on" if getattr(session.options, name) else "off"
            session.println(f"{name.replace('_', '-'):24}{state}")
        return None
    fields = [arg.replace("-", "_").lower() for arg in cmd_input.args]
    unknown = [arg for arg, field in zip(cmd_input.args, fields) if field not in known]
    if unknown:
        return CommandResult.failure(f"{cmd_input.name}: no such option: {', '.join(unknown)}")
    for field in fields:
        setattr(session.options, field, value)
    if session.redraw is not None:
        session.redraw()
    return None


@REGISTRY.command(
    info="set editor options",
    completer=_options_completer,
    usage=["setopt [option ...]"],
    args=["[option...]"],
)
def setopt(cmd_input: CommandInput) -> CommandResult | None:
    return _set_options(cmd_input, True)


@REGISTRY.command(
    info="unset editor options",
    completer=_options_completer,
    usage=["unsetopt [option ...]"],
    args=["[option...]"],
)
def unsetopt(cmd_input: CommandInput) -> CommandResult | None:
    return _set_options(cmd_input, False)


# ---------- ttop ----------
@REGISTRY.command(info="display the threads of this process", usage=["top"])
def ttop(cmd_input: CommandInput) -> None:
    current = threading.current_thread()
    rows = [
        [
            thread.name + (" *" if thread is current else ""),
            str(thread.ident or "-"),
            "daemon" if thread.daemon else "user",
            "alive" if thread.is_alive() else "stopped",
        ]
        for thread in sorted(threading.enumerate(), key=lambda t: t.name)
    ]
    cmd_input.session.println(format_table(rows, headers=["Name", "Id", "Kind", "State"]))


REGISTRY.rename("ttop", "top")
REGISTRY.alias("zle", "widget")
REGISTRY.alias("bindkey", "keymap")
