#!/usr/bin/env python3
# comet/interface/completion.py
from __future__ import annotations

"""
Completion compiler.

Every registry compiles its own name-dispatching completer (command
fragments plus alias routing). compile_completers() merges them in
aggregation order and appends an optional external completer:

    final = merge(registry dispatcher, external)

Alias-to-command routing is fixed when compiling; a registry whose alias
table changes needs a fresh compile.

The external completers selectable with EXTRA_COMPLETER are samples of
the completer kinds the shell supports:

    simple    fixed words for the current word
    files     file names
    argument  positional words for foo11/foo12/foo13/widget
    param     Command1 with options and option parameters
    tree      the same command as a nested tree
    regexp    'C1 C11* C12+ | C2 C21* C22+' grammar
    color     words displayed with colours
"""

from typing import Iterable, Iterator, Optional

from prompt_toolkit.completion import (
    CompleteEvent,
    Completer,
    Completion,
    DummyCompleter,
    NestedCompleter,
    PathCompleter,
    WordCompleter,
    merge_completers,
)
from prompt_toolkit.document import Document
from prompt_toolkit.formatted_text import ANSI

from comet.commands import (
    ArgumentCompleter,
    CommandCompleter,
    CommandRegistry,
    RegexCompleter,
    split_current_token,
)

# External completers selectable from configuration (EXTRA_COMPLETER).
EXTRA_COMPLETERS = ("none", "simple", "files", "argument", "param", "tree", "regexp", "color")


def merge_registry_completers(registries: Iterable[CommandRegistry]) -> CommandCompleter:
    """Merge each registry's compiled completer; earlier registries win name clashes."""
    merged = CommandCompleter()
    for registry in registries:
        merged.merge(registry.compile_completers())
    return merged.compile()


def compile_completers(
    registries: Iterable[CommandRegistry],
    external: Optional[Completer] = None,
) -> Completer:
    """Final completer: registry-driven candidates first, then external ones."""
    dispatcher = merge_registry_completers(registries)
    return merge_completers([dispatcher, external or DummyCompleter()], deduplicate=True)


def make_external_completer(kind: str) -> Completer | None:
    """Build one of the configurable external completers."""
    if kind == "none":
        return None
    if kind == "simple":
        return _SimpleCompleter(WordCompleter(["foo", "bar", "baz"], WORD=True))
    if kind == "files":
        return _SimpleCompleter(PathCompleter(expanduser=True))
    if kind == "argument":
        return ArgumentCompleter(
            WordCompleter(
                ["foo11", "foo12", "foo13", "widget"],
                meta_dict={
                    "foo11": "complete cmdDesc",
                    "foo12": "cmdDesc -names only",
                    "foo13": "-",
                    "widget": "cmdDesc with short options",
                },
                WORD=True,
            ),
            WordCompleter(["foo21", "foo22", "foo23"], WORD=True),
            DummyCompleter(),
        )
    if kind == "param":
        return _ParamCompleter()
    if kind == "tree":
        return NestedCompleter.from_nested_dict({
            "Command1": {
                "Option1": {"Param1": None, "Param2": None},
                "Option2": None,
                "Option3": None,
            },
        })
    if kind == "regexp":
        return RegexCompleter("C1 C11* C12+ | C2 C21* C22+", {
            "C1": WordCompleter(["cmd1"], WORD=True),
            "C11": WordCompleter(["--opt11", "--opt12"], WORD=True),
            "C12": WordCompleter(["arg11", "arg12", "arg13"], WORD=True),
            "C2": WordCompleter(["cmd2"], WORD=True),
            "C21": WordCompleter(["--opt21", "--opt22"], WORD=True),
            "C22": WordCompleter(["arg21", "arg22", "arg23"], WORD=True),
        })
    if kind == "color":
        return _SimpleCompleter(WordCompleter(
            ["foo", "bar", "baz", "foobar"],
            display_dict={"foo": ANSI("\x1b[1mfoo\x1b[0m"), "baz": ANSI("\x1b[32mbaz\x1b[0m")},
            WORD=True,
        ))
    raise ValueError(f"EXTRA_COMPLETER must be one of {EXTRA_COMPLETERS}, got {kind!r}")


class _SimpleCompleter(Completer):
    """Feed only the current shell word to a wrapped completer."""

    def __init__(self, inner: Completer) -> None:
        self.inner = inner

    def get_completions(self, document: Document, complete_event: CompleteEvent):
        _, current_prefix = split_current_token(document.text_before_cursor)
        yield from self.inner.get_completions(
            Document(current_prefix, len(current_prefix)), complete_event)


class _ParamCompleter(Completer):
    """
    Word-position aware completion of `Command1`.

    Option1 is only offered as the first argument and takes Param1 or
    Param2; Option2 and Option3 are offered once each.
    """

    def _candidates(self, words: list[str], index: int) -> list[str]:
        if index == 0:
            return ["Command1"]
        if words[0] != "Command1":
            return []
        if words[index - 1] == "Option1":
            return ["Param1", "Param2"]
        candidates = ["Option1"] if index == 1 else []
        candidates += [option for option in ("Option2", "Option3") if option not in words[:index]]
        return candidates

    def get_completions(self, document: Document, complete_event: CompleteEvent) -> Iterator[Completion]:
        words, current_prefix = split_current_token(document.text_before_cursor.lstrip())
        words = words or [""]
        for candidate in self._candidates(words, len(words) - 1):
            if candidate.startswith(current_prefix):
                yield Completion(candidate, start_position=-len(current_prefix))


def suggest(completer: Completer, text_before_cursor: str) -> list[str]:
    """
    Candidate texts the completer offers for the buffer content.

    Used by the readline frontend and handy for checking completers.
    """
    document = Document(text_before_cursor, len(text_before_cursor))
    event = CompleteEvent(completion_requested=True)
    return [c.text for c in completer.get_completions(document, event)]
