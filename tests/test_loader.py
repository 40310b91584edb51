# tests/test_loader.py
from __future__ import annotations

import logging
import textwrap

import pytest

from comet.commands import CommandTable
from comet.interface import discover_registries, load_registries, order_registries


def _write_plugins(root, package: str) -> None:
    base = root / package
    (base / "alpha").mkdir(parents=True)
    (base / "beta").mkdir()
    (base / "gamma").mkdir()
    (base / "__init__.py").write_text("", encoding="utf-8")
    for sub in ("alpha", "beta", "gamma"):
        (base / sub / "__init__.py").write_text("", encoding="utf-8")
    (base / "alpha" / "entrypoint.py").write_text(textwrap.dedent("""
        from comet.commands import CommandTable
        REGISTRY = CommandTable("Alpha")
    """), encoding="utf-8")
    (base / "beta" / "entrypoint.py").write_text(textwrap.dedent("""
        from comet.commands import CommandTable
        REGISTRIES = [CommandTable("Beta1"), CommandTable("Beta2")]
    """), encoding="utf-8")
    # gamma has no entrypoint and is skipped


def test_discovers_entrypoint_exports_in_name_order(tmp_path, monkeypatch, caplog):
    _write_plugins(tmp_path, "loader_pkg_one")
    monkeypatch.syspath_prepend(str(tmp_path))
    with caplog.at_level(logging.WARNING, logger="comet.interface.loader"):
        registries = discover_registries("loader_pkg_one")
    assert [r.name for r in registries] == ["Alpha", "Beta1", "Beta2"]
    assert "gamma" in caplog.text


def test_explicit_order_comes_first(tmp_path, monkeypatch):
    _write_plugins(tmp_path, "loader_pkg_two")
    monkeypatch.syspath_prepend(str(tmp_path))
    registries = load_registries("loader_pkg_two", ["Beta2", "Alpha"])
    assert [r.name for r in registries] == ["Beta2", "Alpha", "Beta1"]


def test_unknown_names_in_order_are_ignored():
    a, b = CommandTable("A"), CommandTable("B")
    assert order_registries([a, b], ["Z", "B"]) == [b, a]
    assert order_registries([a, b], None) == [a, b]


def test_plain_module_is_not_a_plugin_package(tmp_path, monkeypatch):
    (tmp_path / "loader_single_module.py").write_text("", encoding="utf-8")
    monkeypatch.syspath_prepend(str(tmp_path))
    with pytest.raises(RuntimeError):
        discover_registries("loader_single_module")


def test_shipped_plugins():
    registries = discover_registries("plugins")
    assert [r.name for r in registries] == ["Builtins", "ExampleCommands"]
