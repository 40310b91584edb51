#!/usr/bin/env python3
# comet/ui/animated/ticker.py
from __future__ import annotations

import logging
import threading
from typing import Callable

logger = logging.getLogger(__name__)


class Ticker:
    """
    Run an action on a daemon thread at a fixed interval.

    Tickers live until the process exits; `stop()` exists for tests and
    orderly teardown. The action is responsible for taking PRINT_MUTEX
    around any terminal write it performs.

    Usage:
        with Ticker(lambda: print_line("tick"), interval=1.0):
            ...
    """

    def __init__(self, action: Callable[[], None], *, interval: float = 1.0, name: str = "ticker") -> None:
        if interval <= 0:
            raise ValueError("interval must be > 0")
        self.action = action
        self.interval = interval
        self.name = name
        self.ticks = 0
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    def __enter__(self) -> "Ticker":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> "Ticker":
        if self.running:
            return self
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()
        return self

    def stop(self) -> None:
        """Signal the thread and wait for the current tick to finish."""
        self._stop_event.set()
        if self._thread and self._thread.is_alive() and self._thread is not threading.current_thread():
            self._thread.join()

    def _run(self) -> None:
        while not self._stop_event.wait(self.interval):
            try:
                self.action()
            except Exception:
                # A failing tick must not kill a task that runs for the whole session.
                logger.exception("Background task %r failed", self.name)
            self.ticks += 1
