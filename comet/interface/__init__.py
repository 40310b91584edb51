#!/usr/bin/env python3
# comet/interface/__init__.py
from __future__ import annotations

"""
Shell interface: line parsing, completion compiling, descriptions,
the master registry, registry discovery and the interactive frontends.
"""

from .parser import CmdLine, DescriptionType, LineParser, ParsedLine, tokenize, tokenize_lenient
from .completion import (
    EXTRA_COMPLETERS,
    compile_completers,
    make_external_completer,
    merge_registry_completers,
    suggest,
)
from .description import (
    CONTROL_KEYWORDS,
    DEFAULT_SOURCE_LIMIT,
    NamespaceSignatureLookup,
    SignatureLookup,
    StaticDescriptions,
    argument_mode_descriptions,
    describe_method,
    is_control_keyword_tail,
)
from .handler import HELP_FLAGS, HELP_TEXT, MasterRegistry
from .loader import discover_registries, load_registries, order_registries
from .cli import BaseCLI, PromptToolkitCLI, ReadlineCLI, make_cli, render_tail_tip

__all__ = [
    "CmdLine",
    "DescriptionType",
    "LineParser",
    "ParsedLine",
    "tokenize",
    "tokenize_lenient",
    "EXTRA_COMPLETERS",
    "compile_completers",
    "make_external_completer",
    "merge_registry_completers",
    "suggest",
    "CONTROL_KEYWORDS",
    "DEFAULT_SOURCE_LIMIT",
    "NamespaceSignatureLookup",
    "SignatureLookup",
    "StaticDescriptions",
    "argument_mode_descriptions",
    "describe_method",
    "is_control_keyword_tail",
    "HELP_FLAGS",
    "HELP_TEXT",
    "MasterRegistry",
    "discover_registries",
    "load_registries",
    "order_registries",
    "BaseCLI",
    "PromptToolkitCLI",
    "ReadlineCLI",
    "make_cli",
    "render_tail_tip",
]
