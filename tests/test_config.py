# tests/test_config.py
from __future__ import annotations

import json

import pytest

from comet.config import load_config


def test_defaults(tmp_path):
    config = load_config(cwd=tmp_path, environ={})
    assert config.plugin_package == "plugins"
    assert config.registry_order == ()
    assert config.prompt == "prompt> "
    assert config.log_level == "WARNING"
    assert config.log_file_path is None
    assert config.enable_completion is True
    assert config.extra_completer == "none"
    assert config.tip_type == "combined"
    assert config.tail_tip_lines == 5
    assert config.autosuggestion == "tailtip"
    assert config.method_modules == ("math", "os", "json")
    assert config.method_source_limit == 80
    assert config.timer is False
    assert config.history_file is not None and config.history_file.name == ".comet_history"


def test_files_then_environment(tmp_path):
    (tmp_path / ".env").write_text('PROMPT="env> "\nTIMER=yes\n# comment\n', encoding="utf-8")
    (tmp_path / "config.json").write_text(json.dumps({"tail_tip": {"lines": 3}}), encoding="utf-8")
    (tmp_path / "config.toml").write_text('registry_order = ["ExampleCommands", "Builtins"]\n', encoding="utf-8")

    config = load_config(cwd=tmp_path, environ={"COMET_TIMER": "off", "TIMER": "on"})
    assert config.prompt == "env> "
    assert config.tail_tip_lines == 3
    assert config.registry_order == ("ExampleCommands", "Builtins")
    # Only COMET_-prefixed variables override.
    assert config.timer is False


def test_unknown_keys_are_kept_as_extra(tmp_path):
    config = load_config(cwd=tmp_path, environ={"COMET_SOMETHING_ELSE": "1"})
    assert config.extra == {"SOMETHING_ELSE": "1"}


@pytest.mark.parametrize(
    "key, value",
    [
        ("COMET_TIMER", "maybe"),
        ("COMET_TAIL_TIP_LINES", "zero"),
        ("COMET_TAIL_TIP_LINES", "0"),
        ("COMET_LOG_LEVEL", "LOUD"),
        ("COMET_AUTOSUGGESTION", "sometimes"),
        ("COMET_EXTRA_COMPLETER", "magic"),
        ("COMET_PLUGIN_PACKAGE", "not a module"),
    ],
)
def test_invalid_values_raise(tmp_path, key, value):
    with pytest.raises(ValueError):
        load_config(cwd=tmp_path, environ={key: value})


def test_comma_separated_lists(tmp_path):
    config = load_config(cwd=tmp_path, environ={"COMET_METHOD_MODULES": " math , statistics ,"})
    assert config.method_modules == ("math", "statistics")
