#!/usr/bin/env python3
# comet/interface/loader.py
from __future__ import annotations

"""
Registry loader.

Features:
- Walks the subpackages of a plugin package (default: 'plugins').
- Each subpackage with an 'entrypoint.py' exports REGISTRY (one registry)
  or REGISTRIES (an iterable of registries).
- Orders the result by an explicit name list, or by discovery order.
"""

import importlib
import logging
import pkgutil
from pathlib import Path
from types import ModuleType
from typing import Iterable, Optional, Sequence

from comet.commands import CommandRegistry

logger = logging.getLogger(__name__)


def _registries_from_entry_module(module: ModuleType) -> list[CommandRegistry]:
    """Collect REGISTRY/REGISTRIES exported by an entry module, if present."""
    found: list[CommandRegistry] = []
    if hasattr(module, "REGISTRY"):
        obj = getattr(module, "REGISTRY")
        if isinstance(obj, CommandRegistry):
            found.append(obj)
        else:
            logger.warning("%s.REGISTRY is not a command registry", module.__name__)
    if hasattr(module, "REGISTRIES"):
        objs = getattr(module, "REGISTRIES")
        if isinstance(objs, Iterable):
            for item in objs:
                if isinstance(item, CommandRegistry):
                    found.append(item)
                else:
                    logger.warning("%s.REGISTRIES holds a non-registry %r", module.__name__, item)
    return found


def discover_registries(plugin_package: str = "plugins") -> list[CommandRegistry]:
    """
    Import '<plugin_package>.<sub>.entrypoint' for every public subpackage
    and return the registries they export, in discovery (name) order.
    """
    package = importlib.import_module(plugin_package)
    package_paths = [str(p) for p in getattr(package, "__path__", [])]
    if not package_paths:
        raise RuntimeError(
            f"'{plugin_package}' must be a package (folder) with registry subpackages."
        )

    registries: list[CommandRegistry] = []
    for base_path in package_paths:
        for modinfo in sorted(pkgutil.iter_modules([base_path]), key=lambda m: m.name):
            if modinfo.name.startswith("_") or not modinfo.ispkg:
                continue
            if not (Path(base_path) / modinfo.name / "entrypoint.py").exists():
                logger.warning("Skipping %s.%s: no entrypoint.py", plugin_package, modinfo.name)
                continue
            module = importlib.import_module(f"{plugin_package}.{modinfo.name}.entrypoint")
            exported = _registries_from_entry_module(module)
            if not exported:
                logger.warning("Skipping %s.%s: exports no registry", plugin_package, modinfo.name)
            for registry in exported:
                logger.debug("Discovered registry %r in %s", registry.name, module.__name__)
            registries.extend(exported)
    return registries


def order_registries(
    registries: Sequence[CommandRegistry],
    order: Optional[Sequence[str]] = None,
) -> list[CommandRegistry]:
    """
    Registries named in `order` come first, in that order; the rest keep
    their relative order. Unknown names are reported and ignored.
    """
    if not order:
        return list(registries)
    by_name = {registry.name: registry for registry in registries}
    ordered: list[CommandRegistry] = []
    for name in order:
        registry = by_name.pop(name, None)
        if registry is None:
            logger.warning("REGISTRY_ORDER names unknown registry %r", name)
            continue
        ordered.append(registry)
    ordered.extend(r for r in registries if r.name in by_name)
    return ordered


def load_registries(plugin_package: str = "plugins", order: Optional[Sequence[str]] = None) -> list[CommandRegistry]:
    return order_registries(discover_registries(plugin_package), order)
