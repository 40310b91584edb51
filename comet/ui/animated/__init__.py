#!/usr/bin/env python3
# comet/ui/animated/__init__.py
from __future__ import annotations
from .ticker import Ticker

__all__ = ["Ticker"]
