#!/usr/bin/env python3
# comet/__init__.py
from __future__ import annotations

"""
comet: an interactive shell that mounts several command registries into
one session with merged completion, unified help and a live tail tip.
"""

__version__ = "0.1.0"
