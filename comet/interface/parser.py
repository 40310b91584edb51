#!/usr/bin/env python3
# comet/interface/parser.py
from __future__ import annotations

"""
Line parsing for the shell.

Responsibilities:
- Tokenize a command line into shell-like words (POSIX shlex).
- Resolve a head word to the command name it invokes.
- Classify the text typed so far for the tail tip (COMMAND / METHOD / SYNTAX).
- Detect input that should continue on the next line (open quotes/brackets).
"""

import enum
import os
import re
import shlex
from dataclasses import dataclass

_ASSIGNMENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*=")

BRACKETS = {"(": ")", "[": "]", "{": "}"}
_CLOSERS = {v: k for k, v in BRACKETS.items()}


def tokenize(command_line: str) -> list[str]:
    """Split a raw command line into tokens using POSIX rules."""
    return shlex.split(command_line, posix=True)


def tokenize_lenient(command_line: str) -> list[str]:
    """Like tokenize(), but falls back to whitespace splitting on bad quoting."""
    try:
        return tokenize(command_line)
    except ValueError:
        return command_line.split()


class DescriptionType(enum.Enum):
    """What the text typed so far looks like."""
    COMMAND = "command"
    METHOD = "method"
    SYNTAX = "syntax"


@dataclass(frozen=True, slots=True)
class ParsedLine:
    """Result of LineParser.parse()."""
    line: str
    words: tuple[str, ...]
    word_index: int
    word: str

    @property
    def args(self) -> tuple[str, ...]:
        return self.words[1:]


@dataclass(frozen=True, slots=True)
class CmdLine:
    """
    Line context handed to the description resolver.

    Attributes:
        line: Raw text typed so far.
        head: For METHOD lines, the text before the open parenthesis;
              otherwise the whole line.
        args: Words of the line (lenient tokenization).
        description_type: Classification of the line.
    """
    line: str
    head: str
    args: tuple[str, ...]
    description_type: DescriptionType


@dataclass(frozen=True, slots=True)
class _Scan:
    open_brackets: tuple[tuple[str, int], ...]
    in_quote: str | None
    mismatched: bool


def _scan(text: str) -> _Scan:
    """Quote-aware bracket scan."""
    stack: list[tuple[str, int]] = []
    quote: str | None = None
    escaped = False
    for index, char in enumerate(text):
        if escaped:
            escaped = False
            continue
        if char == "\\" and quote != "'":
            escaped = True
            continue
        if quote:
            if char == quote:
                quote = None
            continue
        if char in ("'", '"'):
            quote = char
        elif char in BRACKETS:
            stack.append((char, index))
        elif char in _CLOSERS:
            if not stack or stack[-1][0] != _CLOSERS[char]:
                return _Scan(tuple(stack), quote, True)
            stack.pop()
    return _Scan(tuple(stack), quote, False)


class LineParser:
    """
    Shell line parser.

    eof_on_unclosed_quote / eof_on_unclosed_bracket make is_incomplete()
    report open quotes / brackets so the editor continues on a new line.
    """

    def __init__(self, *, eof_on_unclosed_quote: bool = False, eof_on_unclosed_bracket: bool = False) -> None:
        self.eof_on_unclosed_quote = eof_on_unclosed_quote
        self.eof_on_unclosed_bracket = eof_on_unclosed_bracket

    def parse(self, line: str, cursor: int | None = None) -> ParsedLine:
        """Split `line` into words and locate the word under the cursor."""
        cursor = len(line) if cursor is None else cursor
        words = tokenize_lenient(line)
        before = tokenize_lenient(line[:cursor])
        if line[:cursor] and line[:cursor][-1].isspace():
            before.append("")
        word_index = max(0, len(before) - 1)
        word = before[-1] if before else ""
        return ParsedLine(line=line, words=tuple(words), word_index=word_index, word=word)

    def get_command(self, word: str) -> str:
        """
        Name of the command a head word invokes.

        Strips a leading 'VAR=' assignment and any path prefix:
            'tput'          -> 'tput'
            '/usr/bin/tput' -> 'tput'
            'out=tput'      -> 'tput'
        """
        head = word.strip()
        if not head:
            return ""
        head = head.split()[0]
        if _ASSIGNMENT_RE.match(head):
            head = head.split("=", 1)[1]
        if "/" in head or os.sep in head:
            head = head.replace(os.sep, "/").rstrip("/").rsplit("/", 1)[-1]
        return head

    def classify(self, text: str) -> CmdLine:
        """Classify the text typed so far."""
        scan = _scan(text)
        args = tuple(tokenize_lenient(text))
        if scan.mismatched:
            return CmdLine(text, text, args, DescriptionType.SYNTAX)
        if scan.open_brackets:
            bracket, position = scan.open_brackets[-1]
            if bracket != "(":
                return CmdLine(text, text, args, DescriptionType.SYNTAX)
            head = text[:position]
            return CmdLine(text, head, tuple(tokenize_lenient(head)), DescriptionType.METHOD)
        return CmdLine(text, text, args, DescriptionType.COMMAND)

    def is_incomplete(self, text: str) -> bool:
        """True when the editor should continue the input on another line."""
        scan = _scan(text)
        if self.eof_on_unclosed_quote and scan.in_quote:
            return True
        if self.eof_on_unclosed_bracket and scan.open_brackets and not scan.mismatched:
            return True
        return False
