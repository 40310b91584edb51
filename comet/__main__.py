#!/usr/bin/env python3
# comet/__main__.py
from __future__ import annotations

"""
Read-eval loop of the comet shell.

Error policy:
- SystemExit (exit/quit) and EOFError (Ctrl-D) end the session.
- KeyboardInterrupt (Ctrl-C) cancels the current line.
- Any other exception is reported as one red line; the loop continues.
"""

import itertools
import logging
import sys

from comet.boot import BootState, Shell, boot_sequence
from comet.interface import HELP_TEXT, make_cli
from comet.ui import Ticker, colorize, print_line

logger = logging.getLogger("comet")


def run_line(shell: Shell, line: str) -> None:
    """Dispatch one line and report failures without raising (except SystemExit)."""
    try:
        result = shell.master.dispatch(shell.session, line)
    except (SystemExit, KeyboardInterrupt):
        raise
    except Exception as exc:
        logger.debug("Command failed: %r", line, exc_info=True)
        shell.session.println(colorize(f"[error] {type(exc).__name__}: {exc}", "red"))
        return
    if result is not None:
        shell.session.println(str(result))


def start_background_tasks(shell: Shell, *, interval: float = 1.0) -> list[Ticker]:
    """
    Status-line counter and, when TIMER is set, the recurring announcement.

    The counter always runs; it only updates while the status-line option
    is on, so `setopt status-line` takes effect without a restart.
    """
    seconds = itertools.count(1)

    def update_status() -> None:
        if shell.session.options.status_line:
            shell.session.set_status(f"Status: {next(seconds)}")

    tickers = [Ticker(update_status, interval=interval, name="status-line").start()]
    if shell.config.timer:
        tickers.append(Ticker(lambda: print_line("Hello world!"), interval=interval, name="timer").start())
    return tickers


def repl(state: BootState) -> int:
    shell = state.shell
    config = state.config
    cli = make_cli(
        shell.master,
        shell.session,
        shell.completer,
        prompt_text=config.prompt,
        history_file=config.history_file,
        describer=shell.describer,
    )
    print_line(HELP_TEXT)
    tickers = start_background_tasks(shell)
    try:
        with cli:
            while True:
                try:
                    line = cli.get_line()
                except KeyboardInterrupt:
                    continue
                except EOFError:
                    break
                if not line.strip():
                    continue
                try:
                    run_line(shell, line)
                except KeyboardInterrupt:
                    shell.session.println("^C")
                except SystemExit as exc:
                    return int(exc.code or 0)
    finally:
        for ticker in tickers:
            ticker.stop()
    return 0


def main() -> int:
    try:
        state = boot_sequence()
    except Exception as exc:
        print_line(colorize(f"[error] Boot failed: {type(exc).__name__}: {exc}", "red"), file=sys.stderr)
        return 1
    return repl(state)


if __name__ == "__main__":
    sys.exit(main())
