#!/usr/bin/env python3
# comet/config/config.py
from __future__ import annotations

"""
Shell configuration.

Precedence (low → high):
  1) Built-in defaults
  2) Files in CWD: .env, config.json, config.toml
  3) Environment variables prefixed COMET_ (COMET_PROMPT, COMET_TIMER, ...)

Validation:
  - PLUGIN_PACKAGE: dotted module name
  - REGISTRY_ORDER / METHOD_MODULES: comma separated lists
  - HISTORY_FILE / LOG_FILE_PATH: None or normalized path
  - ENABLE_COMPLETION / TAIL_TIP / AUTOPAIR / EOF_ON_* / STATUS_LINE / TIMER: bool
  - LOG_LEVEL: one of {'DEBUG','INFO','WARNING','ERROR','CRITICAL'}
  - EXTRA_COMPLETER / AUTOSUGGESTION / TIP_TYPE: one of their known values
  - TAIL_TIP_LINES: int >= 1, METHOD_SOURCE_LIMIT: int >= 1
"""

import json
import os
import re
import tomllib  # stdlib in 3.11+
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

ENV_PREFIX = "COMET_"

DEFAULTS: dict[str, Any] = {
    "PLUGIN_PACKAGE": "plugins",
    "REGISTRY_ORDER": "",           # empty: discovery order
    "PROMPT": "prompt> ",
    "HISTORY_FILE": "~/.comet_history",
    "LOG_FILE_PATH": None,
    "LOG_LEVEL": "WARNING",
    "ENABLE_COMPLETION": True,
    "EXTRA_COMPLETER": "none",      # see comet.interface.completion.EXTRA_COMPLETERS
    "TAIL_TIP": True,
    "TIP_TYPE": "combined",         # 'tailtip' / 'completer' / 'combined'
    "TAIL_TIP_LINES": 5,
    "AUTOSUGGESTION": "tailtip",    # 'history' / 'completer' / 'tailtip' / 'none'
    "AUTOPAIR": False,
    "EOF_ON_UNCLOSED_QUOTE": False,
    "EOF_ON_UNCLOSED_BRACKET": False,
    "METHOD_MODULES": "math,os,json",
    "METHOD_SOURCE_LIMIT": 80,
    "STATUS_LINE": False,
    "TIMER": False,
}

CONFIG_FILES = (".env", "config.json", "config.toml")

_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})
_EXTRA_COMPLETERS = frozenset({"none", "simple", "files", "argument", "param", "tree", "regexp", "color"})
_AUTOSUGGESTION_MODES = frozenset({"history", "completer", "tailtip", "none"})
_TIP_TYPES = frozenset({"tailtip", "completer", "combined"})
_ENV_NAME = re.compile(r"[A-Z0-9_]+")
_MODULE_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$")


# ---------- data model ----------

@dataclass(frozen=True)
class AppConfig:
    plugin_package: str
    registry_order: tuple[str, ...]
    prompt: str
    history_file: Path | None
    log_file_path: Path | None
    log_level: str

    enable_completion: bool
    extra_completer: str
    tail_tip: bool
    tip_type: str
    tail_tip_lines: int
    autosuggestion: str
    autopair: bool
    eof_on_unclosed_quote: bool
    eof_on_unclosed_bracket: bool

    method_modules: tuple[str, ...]
    method_source_limit: int

    status_line: bool
    timer: bool

    # keys this version does not know, kept as read
    extra: dict[str, Any] = field(default_factory=dict)


# ---------- sources ----------

_DOTENV_LINE = re.compile(r"^(?:export\s+)?([A-Za-z_]\w*)\s*=\s*(.*)$")
_QUOTES = ("'", '"')


def _parse_dotenv(text: str) -> dict[str, str]:
    """KEY=VALUE lines; blank lines, comments and malformed lines are skipped."""
    pairs: dict[str, str] = {}
    for line in map(str.strip, text.splitlines()):
        match = _DOTENV_LINE.match(line) if line and not line.startswith("#") else None
        if match is None:
            continue
        key, value = match.group(1), match.group(2).strip()
        if len(value) > 1 and value[0] in _QUOTES and value[-1] == value[0]:
            value = value[1:-1]
        pairs[key] = value
    return pairs


def _flatten_mapping(obj: Any, prefix: str = "") -> dict[str, Any]:
    """
    Nested tables become underscore-joined keys:
    {'tail_tip': {'lines': 3}} -> {'TAIL_TIP_LINES': 3}
    """
    if not isinstance(obj, Mapping):
        return {}
    flat: dict[str, Any] = {}
    for name, value in obj.items():
        key = f"{prefix}_{name}".upper() if prefix else str(name).upper()
        if isinstance(value, Mapping):
            flat.update(_flatten_mapping(value, key))
        else:
            flat[key] = value
    return flat


def _read_config_file(path: Path) -> dict[str, Any]:
    """Keys of one config file, or {} when it does not exist."""
    if not path.is_file():
        return {}
    if path.name == ".env":
        return _parse_dotenv(path.read_text(encoding="utf-8"))
    try:
        if path.suffix == ".json":
            return _flatten_mapping(json.loads(path.read_text(encoding="utf-8")))
        with path.open("rb") as handle:
            return _flatten_mapping(tomllib.load(handle))
    except (json.JSONDecodeError, tomllib.TOMLDecodeError) as exc:
        raise ValueError(f"Cannot parse {path.name}: {exc}") from exc


def _strip_prefix(values: Mapping[str, Any]) -> dict[str, Any]:
    """Upper-case keys; inside files the COMET_ prefix is optional."""
    return {key.upper().removeprefix(ENV_PREFIX): value for key, value in values.items()}


# ---------- coercion ----------

_TRUTHY = frozenset({"1", "true", "yes", "y", "on"})
_FALSY = frozenset({"0", "false", "no", "n", "off"})


def _as_bool(key: str, val: Any) -> bool:
    if isinstance(val, bool):
        return val
    word = str(val).strip().lower()
    if word in _TRUTHY or word in _FALSY:
        return word in _TRUTHY
    raise ValueError(f"{key} expects a boolean, got {val!r}")


def _as_int(key: str, val: Any, minimum: int = 1) -> int:
    if isinstance(val, bool):
        raise ValueError(f"{key} expects an integer, got {val!r}")
    try:
        number = int(str(val).strip())
    except ValueError:
        raise ValueError(f"{key} expects an integer, got {val!r}") from None
    if number < minimum:
        raise ValueError(f"{key} must be >= {minimum}, got {number}")
    return number


def _as_opt_str(val: Any) -> str | None:
    if val is None:
        return None
    text = str(val)
    return None if text.strip().lower() in ("", "none") else text


def _as_list(val: Any) -> tuple[str, ...]:
    if val is None:
        return ()
    items = val if isinstance(val, (list, tuple)) else str(val).split(",")
    return tuple(filter(None, (str(item).strip() for item in items)))


def _as_choice(key: str, val: Any, allowed: frozenset[str], *, upper: bool = False) -> str:
    word = str(val).strip()
    word = word.upper() if upper else word.lower()
    if word not in allowed:
        raise ValueError(f"{key} must be one of {sorted(allowed)}, got {val!r}")
    return word


def _as_opt_path(val: Any) -> Path | None:
    text = _as_opt_str(val)
    if text is None:
        return None
    return Path(os.path.expandvars(text)).expanduser().resolve()


# ---------- merge & build ----------

def _merge_sources(cwd: Path, environ: Mapping[str, str]) -> dict[str, Any]:
    merged: dict[str, Any] = dict(DEFAULTS)
    for filename in CONFIG_FILES:
        merged.update(_strip_prefix(_read_config_file(cwd / filename)))
    # Only COMET_-prefixed variables take part; they override every file.
    merged.update(
        (name.removeprefix(ENV_PREFIX), value)
        for name, value in environ.items()
        if name.startswith(ENV_PREFIX) and _ENV_NAME.fullmatch(name)
    )
    return merged


def _validate_and_build(config: Mapping[str, Any]) -> AppConfig:
    def get(key: str) -> Any:
        return config.get(key, DEFAULTS[key])

    plugin_package = str(get("PLUGIN_PACKAGE")).strip()
    if not _MODULE_RE.match(plugin_package):
        raise ValueError(f"PLUGIN_PACKAGE must be a dotted module name, got {plugin_package!r}")

    return AppConfig(
        plugin_package=plugin_package,
        registry_order=_as_list(get("REGISTRY_ORDER")),
        prompt=_as_opt_str(get("PROMPT")) or DEFAULTS["PROMPT"],
        history_file=_as_opt_path(get("HISTORY_FILE")),
        log_file_path=_as_opt_path(get("LOG_FILE_PATH")),
        log_level=_as_choice("LOG_LEVEL", _as_opt_str(get("LOG_LEVEL")) or "WARNING", _LOG_LEVELS, upper=True),
        enable_completion=_as_bool("ENABLE_COMPLETION", get("ENABLE_COMPLETION")),
        extra_completer=_as_choice("EXTRA_COMPLETER", get("EXTRA_COMPLETER"), _EXTRA_COMPLETERS),
        tail_tip=_as_bool("TAIL_TIP", get("TAIL_TIP")),
        tip_type=_as_choice("TIP_TYPE", get("TIP_TYPE"), _TIP_TYPES),
        tail_tip_lines=_as_int("TAIL_TIP_LINES", get("TAIL_TIP_LINES")),
        autosuggestion=_as_choice("AUTOSUGGESTION", get("AUTOSUGGESTION"), _AUTOSUGGESTION_MODES),
        autopair=_as_bool("AUTOPAIR", get("AUTOPAIR")),
        eof_on_unclosed_quote=_as_bool("EOF_ON_UNCLOSED_QUOTE", get("EOF_ON_UNCLOSED_QUOTE")),
        eof_on_unclosed_bracket=_as_bool("EOF_ON_UNCLOSED_BRACKET", get("EOF_ON_UNCLOSED_BRACKET")),
        method_modules=_as_list(get("METHOD_MODULES")),
        method_source_limit=_as_int("METHOD_SOURCE_LIMIT", get("METHOD_SOURCE_LIMIT")),
        status_line=_as_bool("STATUS_LINE", get("STATUS_LINE")),
        timer=_as_bool("TIMER", get("TIMER")),
        extra={key: value for key, value in config.items() if key not in DEFAULTS},
    )


# ---------- public API ----------

def load_config(*, cwd: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None) -> AppConfig:
    """
    Merge defaults, config files in `cwd` and COMET_ environment variables.

    Reads only; invalid values raise ValueError naming the key.
    """
    raw = _merge_sources(cwd or Path.cwd(), os.environ if environ is None else environ)
    return _validate_and_build(raw)
