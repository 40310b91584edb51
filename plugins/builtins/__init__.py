# plugins/builtins/__init__.py
from __future__ import annotations

"""
Builtin shell commands: history, key bindings, widgets, options and threads.
"""
