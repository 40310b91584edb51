# tests/test_completion.py
from __future__ import annotations

import pytest
from prompt_toolkit.completion import CompleteEvent, DummyCompleter, WordCompleter
from prompt_toolkit.document import Document

from comet.commands import (
    ArgumentCompleter,
    CommandCompleter,
    CommandInput,
    CommandTable,
    RegexCompleter,
    candidate_texts,
)
from comet.interface import (
    EXTRA_COMPLETERS,
    StaticDescriptions,
    argument_mode_descriptions,
    compile_completers,
    make_external_completer,
    suggest,
)


def test_alias_offers_same_candidates_as_command(master):
    completer = master.compile_completer()
    assert suggest(completer, "zle ") == suggest(completer, "widget ")
    assert suggest(completer, "zle ") == ["-A", "-D", "-l"]


def test_first_word_completes_names_and_aliases(master):
    completer = master.compile_completer()
    assert suggest(completer, "") == ["?", "exit", "help", "quit", "tput", "widget", "zle"]
    assert suggest(completer, "w") == ["widget"]


def test_argument_positions(master):
    completer = master.compile_completer()
    assert suggest(completer, "tput ") == ["bold", "sgr0"]
    assert suggest(completer, "tput b") == ["bold"]
    # Past the last real position the null completer stops completion.
    assert suggest(completer, "tput bold ") == []


def test_strict_argument_completer_checks_earlier_words():
    completer = ArgumentCompleter(
        WordCompleter(["tailtip"], WORD=True),
        WordCompleter(["tailtip", "completer", "combined"], WORD=True),
    )
    assert candidate_texts(completer, "tailtip c") == ["completer", "combined"]
    assert candidate_texts(completer, "history c") == []


def test_lenient_argument_completer_ignores_earlier_words():
    completer = ArgumentCompleter(
        WordCompleter(["a"], WORD=True),
        WordCompleter(["b"], WORD=True),
        strict=False,
    )
    assert candidate_texts(completer, "zzz ") == ["b"]


def test_argument_completer_needs_a_completer():
    with pytest.raises(ValueError):
        ArgumentCompleter()


def test_compile_routes_aliases_once():
    compiled = CommandCompleter()
    compiled.add("widget", [DummyCompleter()])
    compiled.add_aliases({"zle": "widget"})
    assert not compiled.compiled
    compiled.compile()
    assert compiled.compiled
    assert compiled.branch("zle") is compiled.branch("widget")


def test_alias_added_after_compile_needs_a_new_compile(registry_b):
    before = registry_b.compile_completers()
    registry_b.alias("wd", "widget")
    assert before.branch("wd") is None
    assert registry_b.compile_completers().branch("wd") is not None


def test_first_registry_branch_wins_for_shared_names():
    first, second = CommandTable("first"), CommandTable("second")

    @first.command(completer=lambda name: [ArgumentCompleter(WordCompleter(["one"], WORD=True))])
    def run(cmd_input: CommandInput) -> None:
        pass

    @second.command(name="run", completer=lambda name: [ArgumentCompleter(WordCompleter(["two"], WORD=True))])
    def run_again(cmd_input: CommandInput) -> None:
        pass

    assert suggest(compile_completers([first, second]), "run ") == ["one"]


def test_external_completer_follows_registry_candidates(master):
    completer = master.compile_completer(make_external_completer("simple"))
    assert suggest(completer, "tput ") == ["bold", "sgr0", "foo", "bar", "baz"]
    assert suggest(completer, "ba") == ["bar", "baz"]


def test_external_completer_choices():
    assert make_external_completer("none") is None
    for kind in EXTRA_COMPLETERS[1:]:
        assert make_external_completer(kind) is not None, kind
    with pytest.raises(ValueError):
        make_external_completer("bogus")


# ---------- external completer kinds ----------

def test_tree_completer_walks_nested_words():
    completer = make_external_completer("tree")
    assert suggest(completer, "") == ["Command1"]
    assert suggest(completer, "Command1 ") == ["Option1", "Option2", "Option3"]
    assert suggest(completer, "Command1 Option1 ") == ["Param1", "Param2"]
    assert suggest(completer, "Command1 Option2 ") == []


def test_param_completer_tracks_used_options():
    completer = make_external_completer("param")
    assert suggest(completer, "") == ["Command1"]
    assert suggest(completer, "Command1 ") == ["Option1", "Option2", "Option3"]
    assert suggest(completer, "Command1 Option1 ") == ["Param1", "Param2"]
    assert suggest(completer, "Command1 Option1 Param1 ") == ["Option2", "Option3"]
    assert suggest(completer, "Command1 Option2 ") == ["Option3"]
    assert suggest(completer, "Command1 Option2") == ["Option2"]
    assert suggest(completer, "Other ") == []


def test_regexp_completer_follows_the_grammar():
    completer = make_external_completer("regexp")
    assert suggest(completer, "") == ["cmd1", "cmd2"]
    assert suggest(completer, "cmd1 ") == ["--opt11", "--opt12", "arg11", "arg12", "arg13"]
    assert suggest(completer, "cmd1 --opt11 ") == ["--opt11", "--opt12", "arg11", "arg12", "arg13"]
    assert suggest(completer, "cmd1 arg11 ") == ["arg11", "arg12", "arg13"]
    assert suggest(completer, "cmd2 --opt21 ") == ["--opt21", "--opt22", "arg21", "arg22", "arg23"]
    # Options may not follow arguments.
    assert suggest(completer, "cmd1 arg11 --opt11 ") == []


def test_regexp_grammar_needs_known_names():
    with pytest.raises(ValueError):
        RegexCompleter("C1 C2+", {"C1": WordCompleter(["a"])})


def test_color_completer_styles_display_only():
    completer = make_external_completer("color")
    completions = list(completer.get_completions(Document("fo", 2), CompleteEvent()))
    assert [c.text for c in completions] == ["foo", "foobar"]
    assert any("bold" in style for style, _ in completions[0].display)
    assert [c.display_text for c in completions] == ["foo", "foobar"]
    assert suggest(completer, "ba") == ["bar", "baz"]


def test_argument_completer_positions():
    completer = make_external_completer("argument")
    assert suggest(completer, "") == ["foo11", "foo12", "foo13", "widget"]
    assert suggest(completer, "foo11 ") == ["foo21", "foo22", "foo23"]
    assert suggest(completer, "foo11 foo21 ") == []
    assert suggest(completer, "bar ") == []


def test_static_descriptions_cover_argument_words(master):
    describer = StaticDescriptions(argument_mode_descriptions(), master, master.parser)

    foo11 = describer.describe(master.parser.classify("foo11 "))
    assert [arg.name for arg in foo11.arg_descriptions] == ["param1", "param2", "param3"]
    assert len(foo11.arg_descriptions[0].description) == 6
    assert list(foo11.option_descriptions) == ["--optionA", "--noitpoB", "--optionC"]

    foo12 = describer.describe(master.parser.classify("foo12 a"))
    assert [arg.name for arg in foo12.arg_descriptions] == ["param1", "param2", "[paramN...]"]
    assert all(not arg.description for arg in foo12.arg_descriptions)

    # Anything else goes to the registries.
    tput = master.parser.classify("tput ")
    assert describer.describe(tput) == master.describe(tput)
    assert describer.describe(master.parser.classify("foo13 ")) == master.describe(master.parser.classify("foo13 "))
