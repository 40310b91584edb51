# plugins/example/__init__.py
from __future__ import annotations

"""
Example commands driving the terminal and the line editor's suggestion modes.
"""
