#!/usr/bin/env python3
# comet/boot/boot.py
from __future__ import annotations
"""
Boot sequence for the comet shell.

Goals:
- Assemble a fully wired shell in one place: config, logger, registries,
  parser, signature lookup, master registry, completer and session.
- Maintain clear status output for each boot step.

build_shell() does the wiring silently (tests, embedding); boot_sequence()
runs the same steps with [  OK  ] / [FAILED] lines.
"""

import logging
import platform
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence, TextIO

from prompt_toolkit.completion import Completer

from comet.commands import CommandRegistry, CommandSession, ShellOptions
from comet.config import AppConfig, load_config
from comet.interface import (
    LineParser,
    MasterRegistry,
    NamespaceSignatureLookup,
    StaticDescriptions,
    argument_mode_descriptions,
    load_registries,
    make_external_completer,
)
from comet.ui import colorize, enable_windows_vt, init_logger, print_line


@dataclass(slots=True)
class Shell:
    config: AppConfig
    master: MasterRegistry
    completer: Optional[Completer]
    session: CommandSession
    describer: Any = None


@dataclass(slots=True)
class BootState:
    logger: logging.Logger
    config: AppConfig
    shell: Shell
    loaded_count: int


def _step(label: str, fn: Callable[[], Any], *, quiet: bool = False) -> Any:
    """Run a boot step with status output."""
    try:
        out = fn()
    except Exception as exc:
        if not quiet:
            print_line(colorize(f"[FAILED] {label} ({type(exc).__name__}: {exc})", "red"))
        raise
    if not quiet:
        print_line(colorize(f"[  OK  ] {label}", "green"))
    return out


def options_from_config(config: AppConfig) -> ShellOptions:
    """Initial editor options; commands may change them later."""
    options = ShellOptions(
        tip_type=config.tip_type,
        tail_tip_lines=config.tail_tip_lines,
        autopair=config.autopair,
        complete_while_typing=config.enable_completion,
        status_line=config.status_line,
    )
    # TAIL_TIP=false keeps the chosen mode unless it is the tail tip itself.
    mode = config.autosuggestion
    if mode == "tailtip" and not config.tail_tip:
        mode = "none"
    options.set_autosuggestion(mode)
    return options


def build_shell(
    config: AppConfig,
    *,
    registries: Optional[Sequence[CommandRegistry]] = None,
    output: Optional[TextIO] = None,
    quiet: bool = True,
) -> Shell:
    """
    Wire a shell from configuration.

    `registries` replaces plugin discovery (tests mount their own).
    """
    parser = LineParser(
        eof_on_unclosed_quote=config.eof_on_unclosed_quote,
        eof_on_unclosed_bracket=config.eof_on_unclosed_bracket,
    )
    if registries is None:
        registries = _step(
            f"Load registries from '{config.plugin_package}'",
            lambda: load_registries(config.plugin_package, config.registry_order),
            quiet=quiet,
        )
    lookup = _step(
        f"Prepare signature lookup ({', '.join(config.method_modules) or 'builtins'})",
        lambda: NamespaceSignatureLookup.from_modules(config.method_modules),
        quiet=quiet,
    )
    master = MasterRegistry(
        registries, parser, signature_lookup=lookup, max_source_length=config.method_source_limit)

    completer: Optional[Completer] = None
    if config.enable_completion:
        completer = _step(
            f"Compile completers (extra: {config.extra_completer})",
            lambda: master.compile_completer(make_external_completer(config.extra_completer)),
            quiet=quiet,
        )

    session = CommandSession(output=output, options=options_from_config(config))
    describer = master
    if config.extra_completer == "argument":
        # Tail tips for the words the argument completer offers.
        describer = StaticDescriptions(argument_mode_descriptions(), master, parser)
    return Shell(config=config, master=master, completer=completer, session=session, describer=describer)


def boot_sequence(config: Optional[AppConfig] = None) -> BootState:
    # ---------- console + env ----------
    _step("Enable ANSI sequences", enable_windows_vt)
    _step(
        f"Detect environment: {platform.system()} {platform.release()} / Python {platform.python_version()}",
        lambda: None,
    )

    # ---------- config ----------
    if config is None:
        config = _step("Load configuration", load_config)

    # ---------- logging ----------
    logger = _step(
        "Initialize logger",
        lambda: init_logger(
            "comet",
            level=getattr(logging, config.log_level),
            logfile=str(config.log_file_path) if config.log_file_path else None,
        ),
    )

    # ---------- shell ----------
    shell = build_shell(config, quiet=False)
    loaded_count = _step(
        "Count commands",
        lambda: sum(len(r.names()) for r in shell.master.registries),
    )
    _step("Boot complete", lambda: None)

    return BootState(logger=logger, config=config, shell=shell, loaded_count=loaded_count)
