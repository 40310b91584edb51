# tests/test_shell.py
from __future__ import annotations

import io
import logging
import threading
import time

from prompt_toolkit.formatted_text import fragment_list_to_text

from comet.__main__ import run_line, start_background_tasks
from comet.boot import build_shell, options_from_config
from comet.commands import ArgDesc, CmdDesc, CommandSession
from comet.config import load_config
from comet.interface import StaticDescriptions, render_tail_tip
from comet.ui import Ticker, colorize, init_logger, print_line, strip_ansi


def _config(tmp_path, **env):
    return load_config(cwd=tmp_path, environ={f"COMET_{k}": v for k, v in env.items()})


# ---------- tail tip rendering ----------

def test_no_description_renders_nothing():
    assert render_tail_tip(None) is None


def test_invalid_description_renders_syntax_marker():
    tip = render_tail_tip(CmdDesc.invalid())
    assert fragment_list_to_text(tip) == "<syntax error>"
    assert tip[0][0] == "class:tip.error"


def test_main_description_is_capped_at_max_lines():
    described = CmdDesc.build(main=[f"line {i}" for i in range(8)])
    tip = render_tail_tip(described, max_lines=5)
    assert fragment_list_to_text(tip).splitlines() == [f"line {i}" for i in range(5)]


def test_argument_description_replaces_main_lines():
    described = CmdDesc.build(main="usage", args={"count": "how many"})
    assert fragment_list_to_text(render_tail_tip(described, arg_index=1)) == "count\nhow many"
    assert fragment_list_to_text(render_tail_tip(described, arg_index=0)) == "usage"


def test_option_descriptions_for_dash_words():
    described = CmdDesc.build(main="usage", options={"-l": "List widgets", "-D": "Delete widgets"})
    assert fragment_list_to_text(render_tail_tip(described, 1, 5, "-l")) == "-l  List widgets"


def test_names_only_arguments_show_their_name():
    described = CmdDesc(arg_descriptions=ArgDesc.from_names(["param1", "[paramN...]"]))
    assert fragment_list_to_text(render_tail_tip(described, arg_index=2)) == "[paramN...]"


# ---------- boot wiring ----------

def test_build_shell_mounts_shipped_registries(tmp_path):
    shell = build_shell(_config(tmp_path), output=io.StringIO())
    names = [registry.name for registry in shell.master.registries]
    assert names == ["Shell", "Builtins", "ExampleCommands"]
    assert shell.completer is not None


def test_build_shell_honours_registry_order_and_completion_switch(tmp_path):
    config = _config(tmp_path, REGISTRY_ORDER="ExampleCommands", ENABLE_COMPLETION="false")
    shell = build_shell(config)
    assert [r.name for r in shell.master.registries][1:] == ["ExampleCommands", "Builtins"]
    assert shell.completer is None


def test_argument_completer_brings_static_tail_tips(tmp_path):
    shell = build_shell(_config(tmp_path, EXTRA_COMPLETER="argument"))
    assert isinstance(shell.describer, StaticDescriptions)
    description = shell.describer.describe(shell.master.parser.classify("foo12 "))
    assert description.main_text() == ["Command description only args names"]
    plain = build_shell(_config(tmp_path))
    assert plain.describer is plain.master


def test_options_from_config(tmp_path):
    options = options_from_config(_config(tmp_path, AUTOPAIR="on", TIP_TYPE="tailtip", TAIL_TIP="false"))
    assert options.autopair is True
    assert options.tip_type == "tailtip"
    assert options.autosuggestion == "none"


def test_method_size_limit_from_config(tmp_path):
    shell = build_shell(_config(tmp_path, METHOD_SOURCE_LIMIT="5"))
    parser = shell.master.parser
    described = shell.master.describe(parser.classify("json.dumps("))
    assert described.main_text() == ["Failed to create object from source: json.dumps("]


# ---------- read-eval loop ----------

def test_run_line_reports_errors_and_continues(tmp_path):
    output = io.StringIO()
    shell = build_shell(_config(tmp_path), output=output)
    run_line(shell, "nosuchcommand")
    run_line(shell, "tput")
    lines = strip_ansi(output.getvalue()).splitlines()
    assert lines[0].startswith("[error] UnknownCommandError: Unknown command: nosuchcommand.")
    assert lines[1] == "Usage: tput <capability>"


def test_run_line_reports_command_failures(tmp_path):
    output = io.StringIO()
    shell = build_shell(_config(tmp_path), output=output)
    run_line(shell, "widget -D nothing")
    assert strip_ansi(output.getvalue()).startswith("[error] CommandFailed: widget: no such widget: nothing")


# ---------- background tasks ----------

def test_ticker_runs_until_stopped():
    fired = threading.Event()
    with Ticker(fired.set, interval=0.01, name="test-ticker") as ticker:
        assert fired.wait(2.0)
        assert ticker.running
    assert not ticker.running
    assert ticker.ticks >= 1


def test_ticker_survives_failing_actions():
    calls = []

    def action():
        calls.append(1)
        if len(calls) == 1:
            raise RuntimeError("first tick fails")

    ticker = Ticker(action, interval=0.01).start()
    try:
        for _ in range(200):
            if len(calls) >= 2:
                break
            time.sleep(0.01)
    finally:
        ticker.stop()
    assert len(calls) >= 2


def test_session_status_triggers_redraw():
    redraws = []
    session = CommandSession(output=io.StringIO(), redraw=lambda: redraws.append(1))
    session.set_status("Status: 1")
    assert session.status == "Status: 1"
    assert redraws == [1]


# ---------- logging ----------

def test_file_log_is_plain_text(tmp_path):
    logfile = tmp_path / "comet.log"
    log = init_logger("comet-test-file-log", level=logging.ERROR, logfile=str(logfile))
    log.info(colorize("loaded", "green"))
    text = logfile.read_text(encoding="utf-8")
    assert "[INFO] comet-test-file-log: loaded" in text
    assert "\x1b[" not in text


def test_status_line_follows_runtime_option(tmp_path):
    shell = build_shell(_config(tmp_path), output=io.StringIO())
    tickers = start_background_tasks(shell, interval=0.01)
    try:
        time.sleep(0.05)
        assert shell.session.status == ""
        run_line(shell, "setopt status-line")
        for _ in range(200):
            if shell.session.status:
                break
            time.sleep(0.01)
        assert shell.session.status.startswith("Status: ")
    finally:
        for ticker in tickers:
            ticker.stop()
    assert [ticker.name for ticker in tickers] == ["status-line"]


def test_concurrent_writers_never_split_lines():
    output = io.StringIO()
    session = CommandSession(output=output)
    lines_per_writer = 200

    def session_writer(tag: str) -> None:
        for index in range(lines_per_writer):
            session.println(f"{tag}-{index}-" + tag * 40)

    def console_writer(tag: str) -> None:
        for index in range(lines_per_writer):
            print_line(f"{tag}-{index}-" + tag * 40, file=output)

    threads = [threading.Thread(target=session_writer, args=(tag,)) for tag in "abcd"]
    threads += [threading.Thread(target=console_writer, args=(tag,)) for tag in "wxyz"]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    lines = output.getvalue().splitlines()
    assert len(lines) == 8 * lines_per_writer
    for line in lines:
        tag, index, body = line.split("-")
        assert body == tag * 40
        assert 0 <= int(index) < lines_per_writer
