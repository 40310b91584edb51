#!/usr/bin/env python3
# comet/config/__init__.py
from __future__ import annotations

"""
Package for shell configuration.

Provides:
- Configuration loader with file and COMET_ environment overrides (`config`).
"""


from .config import DEFAULTS, ENV_PREFIX, AppConfig, load_config

__all__ = [
    "DEFAULTS",
    "ENV_PREFIX",
    "AppConfig",
    "load_config",
]
