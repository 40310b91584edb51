#!/usr/bin/env python3
# comet/commands/completers.py
from __future__ import annotations

"""
Completer building blocks used by registries.

- ArgumentCompleter: positional argument completion for one command.
- CommandCompleter: name-dispatching completer; word 0 completes command
  names, later words are routed to the owning command's fragments.
- RegexCompleter: words following a small grammar over named completers.

Both are prompt_toolkit completers and can be merged with any other one.
"""

import re
import shlex
from typing import Iterable, Iterator, Mapping

from prompt_toolkit.completion import CompleteEvent, Completer, Completion, DummyCompleter
from prompt_toolkit.document import Document

_COMMAND_WORD_RE = re.compile(r"^\s*\S+\s+")


def split_current_token(raw_input: str) -> tuple[list[str], str]:
    """
    Return (parts, current_prefix).

    Behavior:
      - Use shlex.split for shell-like parsing (POSIX).
      - If trailing whitespace exists, append an empty token to signal a new one.
      - On malformed quotes, fall back to whitespace splitting.
    """
    if not raw_input:
        return [], ""

    try:
        parts = shlex.split(raw_input, posix=True)
    except ValueError:
        parts = raw_input.split()
    if raw_input[-1].isspace():
        parts.append("")
    current_prefix = parts[-1] if parts else ""
    return parts, current_prefix


def candidate_texts(completer: Completer, text: str, event: CompleteEvent | None = None) -> list[str]:
    """Completion texts a completer offers for `text` with the cursor at its end."""
    event = event or CompleteEvent(completion_requested=True)
    return [c.text for c in completer.get_completions(Document(text, len(text)), event)]


class ArgumentCompleter(Completer):
    """
    Complete argument N with the N-th completer; the last one repeats.

    In strict mode every earlier argument must be one of the candidates its
    position offers, and a DummyCompleter position ends completion there.
    """

    def __init__(self, *completers: Completer, strict: bool = True) -> None:
        if not completers:
            raise ValueError("ArgumentCompleter needs at least one completer")
        self.completers = completers
        self.strict = strict

    def _at(self, index: int) -> Completer:
        return self.completers[min(index, len(self.completers) - 1)]

    def get_completions(self, document: Document, complete_event: CompleteEvent) -> Iterator[Completion]:
        parts, current_prefix = split_current_token(document.text_before_cursor)
        index = max(0, len(parts) - 1)

        if self.strict:
            for position, word in enumerate(parts[:index]):
                completer = self._at(position)
                if isinstance(completer, DummyCompleter):
                    return
                if word not in candidate_texts(completer, word, complete_event):
                    return

        completer = self._at(index)
        yield from completer.get_completions(
            Document(current_prefix, len(current_prefix)), complete_event)


class CommandCompleter(Completer):
    """
    Name-dispatching completer.

    Branches are keyed by command name. Aliases are recorded with `add_aliases`
    and resolved by `compile()`: each alias is pointed at its target's branch.
    Alias changes after compiling require a new compile.
    """

    def __init__(self) -> None:
        self._branches: dict[str, list[Completer]] = {}
        self._aliases: dict[str, str] = {}

    def add(self, name: str, completers: Iterable[Completer]) -> None:
        self._branches.setdefault(name, []).extend(completers)

    def add_aliases(self, aliases: Mapping[str, str]) -> None:
        self._aliases.update(aliases)

    def compile(self) -> "CommandCompleter":
        """Route every pending alias to its target branch."""
        for alias, target in self._aliases.items():
            if alias not in self._branches and target in self._branches:
                self._branches[alias] = self._branches[target]
        self._aliases.clear()
        return self

    def merge(self, other: "CommandCompleter") -> None:
        """Add another compiled completer's branches; existing names win."""
        other.compile()
        for name, completers in other._branches.items():
            self._branches.setdefault(name, completers)

    @property
    def compiled(self) -> bool:
        return not self._aliases

    def names(self) -> list[str]:
        return sorted(self._branches)

    def branch(self, name: str) -> list[Completer] | None:
        return self._branches.get(name)

    def get_completions(self, document: Document, complete_event: CompleteEvent) -> Iterator[Completion]:
        text = document.text_before_cursor
        parts, current_prefix = split_current_token(text.lstrip())

        if len(parts) <= 1:
            for name in self.names():
                if name.startswith(current_prefix):
                    yield Completion(name, start_position=-len(current_prefix))
            return

        branch = self._branches.get(parts[0])
        if not branch:
            return
        args_text = _COMMAND_WORD_RE.sub("", text, count=1)
        args_document = Document(args_text, len(args_text))
        for completer in branch:
            yield from completer.get_completions(args_document, complete_event)


class RegexCompleter(Completer):
    """
    Complete words following a grammar over named completers.

    The grammar is a space-separated sequence of completer names, each
    optionally suffixed with `*` (any number), `+` (one or more) or `?`
    (optional); `|` separates alternatives:

        RegexCompleter("C1 C11* C12+ | C2 C21* C22+", {"C1": ..., ...})

    A typed word matches a name when that name's completer offers the word
    itself. Candidates come from every name the words so far can be
    followed by.
    """

    def __init__(self, grammar: str, completers: Mapping[str, Completer]) -> None:
        self.completers = dict(completers)
        self._alternatives = [self._compile(part.split()) for part in grammar.split("|")]
        for steps in self._alternatives:
            for name, _, _ in steps:
                if name not in self.completers:
                    raise ValueError(f"no completer named {name!r} in grammar {grammar!r}")

    @staticmethod
    def _compile(tokens: list[str]) -> list[tuple[str, bool, bool]]:
        # (name, repeats, optional)
        steps: list[tuple[str, bool, bool]] = []
        for token in tokens:
            name, suffix = (token[:-1], token[-1]) if token[-1] in "*+?" else (token, "")
            if suffix == "+":
                steps += [(name, False, False), (name, True, True)]
            else:
                steps.append((name, suffix == "*", suffix in ("*", "?")))
        return steps

    def _closure(self, states: set[tuple[int, int]]) -> set[tuple[int, int]]:
        pending, seen = list(states), set(states)
        while pending:
            alternative, position = pending.pop()
            steps = self._alternatives[alternative]
            if position < len(steps) and steps[position][2] and (alternative, position + 1) not in seen:
                seen.add((alternative, position + 1))
                pending.append((alternative, position + 1))
        return seen

    def _matches(self, name: str, word: str, event: CompleteEvent) -> bool:
        return word in candidate_texts(self.completers[name], word, event)

    def get_completions(self, document: Document, complete_event: CompleteEvent) -> Iterator[Completion]:
        parts, current_prefix = split_current_token(document.text_before_cursor.lstrip())
        states = self._closure({(index, 0) for index in range(len(self._alternatives))})
        for word in parts[:-1]:
            advanced = set()
            for alternative, position in states:
                steps = self._alternatives[alternative]
                if position < len(steps) and self._matches(steps[position][0], word, complete_event):
                    repeats = steps[position][1]
                    advanced.add((alternative, position if repeats else position + 1))
            states = self._closure(advanced)

        names: list[str] = []
        for alternative, position in sorted(states):
            steps = self._alternatives[alternative]
            if position < len(steps) and steps[position][0] not in names:
                names.append(steps[position][0])
        prefix_document = Document(current_prefix, len(current_prefix))
        for name in names:
            yield from self.completers[name].get_completions(prefix_document, complete_event)
