#!/usr/bin/env python3
# comet/interface/description.py
from __future__ import annotations

"""
Call-signature descriptions for input that looks like a function call.

The tail tip asks for these while the user types something like
`math.hypot(` inside the shell. Discovery is best effort: describe_method()
turns any lookup failure into error-styled lines and never raises.
"""

import builtins
import importlib
import inspect
import logging
import re
from typing import Any, Iterable, Mapping, Optional, Protocol

from comet.commands import ERROR_STYLE, ArgDesc, CmdDesc, styled, styled_lines
from comet.interface.parser import CmdLine, DescriptionType

logger = logging.getLogger(__name__)

# Lines ending in one of these are mid-statement; there is no call to describe.
CONTROL_KEYWORDS = ("if", "while", "for")
_KEYWORD_TAILS = tuple(re.compile(rf"\b{kw}\s*$") for kw in CONTROL_KEYWORDS)

_CALLEE_RE = re.compile(r"([A-Za-z_]\w*(?:\s*\.\s*[A-Za-z_]\w*)*)\s*$")

DEFAULT_SOURCE_LIMIT = 80


class SignatureLookup(Protocol):
    """Return the call signatures for the callable named at the end of `source`."""

    def signatures(self, source: str) -> list[str]: ...


def _signature_line(name: str, obj: Any) -> str:
    return f"{name}{inspect.signature(obj)}"


class NamespaceSignatureLookup:
    """
    Look up call signatures by name in a namespace using `inspect`.

    Only names and attribute access are followed; nothing is evaluated.
    `functools.singledispatch` functions yield one line per registered
    implementation.
    """

    def __init__(self, namespace: Mapping[str, Any] | None = None) -> None:
        self.namespace = dict(vars(builtins)) if namespace is None else dict(namespace)

    @classmethod
    def from_modules(cls, module_names: Iterable[str]) -> "NamespaceSignatureLookup":
        """Builtins plus the named modules (unimportable names are skipped)."""
        namespace: dict[str, Any] = dict(vars(builtins))
        for module_name in module_names:
            try:
                namespace[module_name.split(".")[0]] = importlib.import_module(module_name.split(".")[0])
            except ImportError:
                logger.warning("Signature lookup: cannot import %r", module_name)
        return cls(namespace)

    def resolve(self, dotted: str) -> Any:
        first, *rest = [part.strip() for part in dotted.split(".")]
        if first not in self.namespace:
            raise NameError(f"name '{first}' is not defined")
        obj = self.namespace[first]
        for attribute in rest:
            obj = getattr(obj, attribute)
        return obj

    def signatures(self, source: str) -> list[str]:
        match = _CALLEE_RE.search(source)
        if not match:
            # A grouping parenthesis: nothing is being called.
            return []
        name = re.sub(r"\s+", "", match.group(1))
        target = self.resolve(name)
        if not callable(target):
            raise TypeError(f"'{type(target).__name__}' object is not callable")

        registry = getattr(target, "registry", None)
        if registry is not None and hasattr(target, "dispatch"):
            return [_signature_line(name, impl) for impl in dict.fromkeys(registry.values())]
        return [_signature_line(name, target)]


def is_control_keyword_tail(head: str) -> bool:
    return any(pattern.search(head) for pattern in _KEYWORD_TAILS)


def describe_method(
    line: CmdLine,
    lookup: SignatureLookup,
    *,
    max_source_length: int = DEFAULT_SOURCE_LIMIT,
) -> CmdDesc | None:
    """
    Describe the call being typed.

    Returns None (suppress the tip) when the head ends in a control keyword,
    otherwise a CmdDesc listing one signature per line, or the failure
    message as error-styled lines. Lines longer than `max_source_length`
    are not analysed at all.
    """
    if is_control_keyword_tail(line.head):
        return None
    try:
        if len(line.line) > max_source_length:
            raise ValueError(f"Failed to create object from source: {line.line}")
        main = [styled(signature) for signature in lookup.signatures(line.head)]
    except Exception as exc:
        logger.debug("Signature lookup failed for %r: %s", line.head, exc)
        main = styled_lines(str(exc), ERROR_STYLE)
    return CmdDesc(main_description=tuple(main))


class Describer(Protocol):
    def describe(self, line: CmdLine) -> Optional[CmdDesc]: ...


class StaticDescriptions:
    """
    Fixed descriptions for command names that have no registry behind them.

    Lines naming a command in `table` get its entry; everything else is
    left to `fallback` (normally the MasterRegistry).
    """

    def __init__(self, table: Mapping[str, CmdDesc], fallback: Describer, parser) -> None:
        self.table = dict(table)
        self.fallback = fallback
        self.parser = parser

    def describe(self, line: CmdLine) -> Optional[CmdDesc]:
        if line.description_type is DescriptionType.COMMAND and line.args:
            description = self.table.get(self.parser.get_command(line.args[0]))
            if description is not None:
                return description
        return self.fallback.describe(line)


def argument_mode_descriptions() -> dict[str, CmdDesc]:
    """Descriptions matching the words of the `argument` external completer."""
    return {
        "foo11": CmdDesc.build(
            ["Complete command description", "with two lines"],
            {
                "param1": [
                    "Param1 description...",
                    "line 2: This is a very long line that will be truncated to fit the terminal width",
                    "line 3",
                    "line 4",
                    "line 5",
                    "line 6",
                ],
                "param2": ["Param2 description...", "line 2"],
                "param3": [],
            },
            {
                "--optionA": "optionA description...",
                "--noitpoB": "noitpoB description...",
                "--optionC": ["optionC description...", "line2"],
            },
        ),
        "foo12": CmdDesc.build(
            "Command description only args names",
            ArgDesc.from_names(["param1", "param2", "[paramN...]"]),
        ),
        "widget": CmdDesc.build(
            [
                "widget -N new-widget widget-name",
                "widget -D widget ...",
                "widget -A old-widget new-widget",
                "widget -l",
            ],
            ArgDesc.from_names(["[pN...]"]),
            {
                "-N": "Create new widget",
                "-D": "Delete widgets",
                "-A": "Create alias to widget",
                "-l": "List user-defined widgets",
            },
        ),
    }
