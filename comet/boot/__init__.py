#!/usr/bin/env python3
# comet/boot/__init__.py
from __future__ import annotations
"""
Boot sequence package.

Exports:
- boot_sequence: Startup pipeline with Linux-style [  OK  ] / [FAILED] lines.
- build_shell: The same wiring without status output.
- BootState / Shell: Dataclasses holding the wired shell.
"""


from .boot import BootState, Shell, boot_sequence, build_shell, options_from_config

__all__ = ["boot_sequence", "build_shell", "options_from_config", "BootState", "Shell"]
