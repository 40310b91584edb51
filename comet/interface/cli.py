#!/usr/bin/env python3
# comet/interface/cli.py
from __future__ import annotations

"""
Line editors the read-eval loop reads from.

make_cli() picks the richest one that works here:
    1) prompt_toolkit: live completion, tail tip, auto-suggestion, widgets
    2) readline: tab completion over the same completer, history file
    3) input(): no editing at all
"""

import logging
from pathlib import Path
from typing import Optional

from prompt_toolkit.auto_suggest import AutoSuggest, Suggestion
from prompt_toolkit.completion import CompleteEvent, Completer
from prompt_toolkit.formatted_text import FormattedText

from comet.commands import CmdDesc, CommandSession, line_text
from comet.interface.completion import suggest
from comet.interface.handler import MasterRegistry

logger = logging.getLogger(__name__)

AUTOPAIRS = {"(": ")", "[": "]", "{": "}", '"': '"', "'": "'"}

# Shown in place of a description when the input is not well formed.
SYNTAX_MARKER = "<syntax error>"


def render_tail_tip(
    description: Optional[CmdDesc],
    arg_index: int = 0,
    max_lines: int = 5,
    current_word: str = "",
) -> Optional[FormattedText]:
    """
    Render a description for the bottom toolbar.

    None suppresses the tip. An invalid description renders the syntax
    marker. While an argument is being typed its description replaces the
    main one; option descriptions are shown for words starting with '-'.
    """
    if description is None:
        return None
    if not description.valid:
        return FormattedText([("class:tip.error", SYNTAX_MARKER)])

    lines: list[FormattedText] = []
    if current_word.startswith("-") and description.option_descriptions:
        for option, text in sorted(description.option_descriptions.items()):
            if option.startswith(current_word):
                summary = " ".join(line_text(line) for line in text)
                lines.append(FormattedText([("class:tip.option", option), ("", f"  {summary}")]))
    elif 0 < arg_index <= len(description.arg_descriptions):
        arg = description.arg_descriptions[arg_index - 1]
        lines.append(FormattedText([("class:tip.arg", arg.name)]))
        lines.extend(arg.description)
    if not lines:
        lines = list(description.main_description)
    if not lines:
        return None

    fragments: list[tuple[str, str]] = []
    for index, line in enumerate(lines[:max_lines]):
        if index:
            fragments.append(("", "\n"))
        fragments.extend(line)
    return FormattedText(fragments)


class BaseCLI:
    """
    Plain input() frontend and the shape every editor follows.

    Use it as a context manager: setup() on entry, teardown() on exit even
    when the loop dies with an exception. get_line() raises EOFError at end
    of input and KeyboardInterrupt on Ctrl-C, like input().
    """

    def __init__(self, prompt_text: str = "prompt> ") -> None:
        self.prompt_text = prompt_text

    def setup(self) -> None:
        pass

    def get_line(self) -> str:
        return input(self.prompt_text)

    def teardown(self) -> None:
        pass

    def __enter__(self) -> "BaseCLI":
        self.setup()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            self.teardown()
        except Exception:
            logger.debug("Frontend teardown failed", exc_info=True)


# ===== Preferred: prompt_toolkit =====
class PromptToolkitCLI(BaseCLI):
    """Rich line editor with history, live completion and a tail tip."""

    def __init__(
        self,
        master: MasterRegistry,
        session: CommandSession,
        completer: Optional[Completer],
        *,
        prompt_text: str = "prompt> ",
        history_file: Optional[Path] = None,
        describer=None,
    ) -> None:
        from prompt_toolkit import PromptSession
        from prompt_toolkit.auto_suggest import AutoSuggestFromHistory, DynamicAutoSuggest
        from prompt_toolkit.filters import Condition
        from prompt_toolkit.history import FileHistory, InMemoryHistory
        from prompt_toolkit.styles import Style

        super().__init__(prompt_text)
        self.master = master
        self.describer = describer or master
        self.session = session
        self.completer = completer
        self.history_file = history_file
        self._patch = None

        options = session.options
        history = FileHistory(str(history_file)) if history_file else InMemoryHistory()
        session.history = history
        session.key_bindings = self._build_key_bindings()
        session.redraw = self._invalidate

        from_history = AutoSuggestFromHistory()
        from_completer = CompleterAutoSuggest(completer) if completer else None

        def _auto_suggest():
            if options.autosuggestion == "history":
                return from_history
            if options.autosuggestion == "completer":
                return from_completer
            return None

        self.style = Style.from_dict({
            "bottom-toolbar": "noreverse",
            "tip.error": "ansired",
            "tip.arg": "bold",
            "tip.option": "ansicyan",
            "status": "reverse",
        })
        self._prompt = PromptSession(
            history=history,
            completer=completer,
            complete_while_typing=Condition(lambda: options.completion_menu_enabled),
            auto_suggest=DynamicAutoSuggest(_auto_suggest),
            key_bindings=session.key_bindings,
            bottom_toolbar=self._bottom_toolbar,
            style=self.style,
        )

    # ---------------- Toolbar ----------------

    def _bottom_toolbar(self):
        from prompt_toolkit.application.current import get_app

        fragments: list[tuple[str, str]] = []
        options = self.session.options
        if options.tail_tip_enabled:
            text = get_app().current_buffer.document.text_before_cursor
            tip = self.tail_tip(text)
            if tip:
                fragments.extend(tip)
        if options.status_line and self.session.status:
            if fragments:
                fragments.append(("", "\n"))
            fragments.append(("class:status", self.session.status))
        return FormattedText(fragments) if fragments else None

    def tail_tip(self, text: str) -> Optional[FormattedText]:
        if not text.strip():
            return None
        parser = self.master.parser
        parsed = parser.parse(text)
        description = self.describer.describe(parser.classify(text))
        return render_tail_tip(
            description,
            parsed.word_index,
            self.session.options.tail_tip_lines,
            parsed.word,
        )

    def _invalidate(self) -> None:
        app = self._prompt.app
        if app.is_running:
            app.invalidate()

    # ---------------- Key bindings ----------------

    def _build_key_bindings(self):
        from prompt_toolkit.filters import Condition
        from prompt_toolkit.key_binding import KeyBindings

        options = self.session.options
        parser = self.master.parser
        autopair = Condition(lambda: options.autopair)
        completing = Condition(lambda: options.completion_menu_enabled)
        kb = KeyBindings()

        def _incomplete() -> bool:
            from prompt_toolkit.application.current import get_app
            return parser.is_incomplete(get_app().current_buffer.text)

        @kb.add("enter", filter=Condition(_incomplete))
        def continue_line(event):
            event.current_buffer.insert_text("\n")

        # Show fresh suggestions after deleting characters.
        @kb.add("backspace", filter=~autopair & completing)
        def backward_delete_char(event):
            b = event.current_buffer
            if b.read_only():
                return
            if b.selection_state:
                b.cut_selection()
            else:
                b.delete_before_cursor(1)
            b.start_completion(select_first=False)

        @kb.add("delete", filter=completing)
        def delete_char(event):
            b = event.current_buffer
            if b.selection_state:
                b.cut_selection()
            else:
                b.delete(1)
            b.start_completion(select_first=False)

        def _pair_opener(opener: str, closer: str):
            def insert_pair(event):
                b = event.current_buffer
                if opener == closer and b.document.current_char == closer:
                    b.cursor_right()
                    return
                b.insert_text(opener + closer)
                b.cursor_left()
            return insert_pair

        def _pair_closer(closer: str):
            def skip_closer(event):
                b = event.current_buffer
                if b.document.current_char == closer:
                    b.cursor_right()
                else:
                    b.insert_text(closer)
            return skip_closer

        for opener, closer in AUTOPAIRS.items():
            kb.add(opener, filter=autopair)(_pair_opener(opener, closer))
            if opener != closer:
                kb.add(closer, filter=autopair)(_pair_closer(closer))

        @kb.add("backspace", filter=autopair)
        def autopair_delete(event):
            b = event.current_buffer
            before, after = b.document.char_before_cursor, b.document.current_char
            if before and AUTOPAIRS.get(before) == after:
                b.delete(1)
            b.delete_before_cursor(1)

        @kb.add("c-l")
        def clear_screen(event):
            event.app.renderer.clear()

        self.session.widgets.update({
            "accept-line": lambda event: event.current_buffer.validate_and_handle(),
            "continue-line": continue_line,
            "backward-delete-char": backward_delete_char,
            "delete-char": delete_char,
            "autopair-delete": autopair_delete,
            "clear-screen": clear_screen,
        })
        return kb

    # ---------------- Lifecycle ----------------

    def setup(self) -> None:
        from prompt_toolkit.patch_stdout import patch_stdout

        if self.history_file:
            self.history_file.touch(exist_ok=True)
        # Background writers print above the prompt instead of through it.
        self._patch = patch_stdout(raw=True)
        self._patch.__enter__()

    def get_line(self) -> str:
        return self._prompt.prompt(self.prompt_text)

    def teardown(self) -> None:
        self.session.redraw = None
        if self._patch is not None:
            patch, self._patch = self._patch, None
            patch.__exit__(None, None, None)


class CompleterAutoSuggest(AutoSuggest):
    """Suggest the rest of the first completion candidate as grey inline text."""

    def __init__(self, completer: Completer) -> None:
        self.completer = completer

    def get_suggestion(self, buffer, document) -> Optional[Suggestion]:
        if not document.text.strip() or not document.is_cursor_at_the_end:
            return None
        event = CompleteEvent(text_inserted=True)
        for completion in self.completer.get_completions(document, event):
            typed = document.text_before_cursor[len(document.text_before_cursor) + completion.start_position:]
            if completion.text.startswith(typed) and completion.text != typed:
                return Suggestion(completion.text[len(typed):])
            return None
        return None


# ===== Fallback: readline =====
class ReadlineCLI(BaseCLI):
    """Fallback editor with basic completion and history."""

    def __init__(self, completer: Optional[Completer], *, prompt_text: str = "prompt> ", history_file: Optional[Path] = None) -> None:
        import readline  # type: ignore[attr-defined]

        super().__init__(prompt_text)
        self.readline = readline
        self.completer = completer
        self.history_file = history_file

    def setup(self) -> None:
        if self.history_file:
            self.history_file.touch(exist_ok=True)
            try:
                self.readline.read_history_file(str(self.history_file))
            except OSError:
                pass

        # whole shell words, including key=value and paths
        self.readline.set_completer_delims(" \t\n")

        def _complete(text_fragment: str, state_index: int) -> Optional[str]:
            if self.completer is None:
                return None
            buffer_text = self.readline.get_line_buffer()[: self.readline.get_endidx()]
            matches = [w for w in suggest(self.completer, buffer_text) if w.startswith(text_fragment)]
            return matches[state_index] if state_index < len(matches) else None

        self.readline.set_completer(_complete)
        self.readline.parse_and_bind("tab: complete")

    def teardown(self) -> None:
        if self.history_file:
            try:
                self.readline.write_history_file(str(self.history_file))
            except OSError:
                pass


def make_cli(
    master: MasterRegistry,
    session: CommandSession,
    completer: Optional[Completer],
    *,
    prompt_text: str = "prompt> ",
    history_file: Optional[Path] = None,
    describer=None,
) -> BaseCLI:
    """Return the richest frontend usable on this terminal."""
    try:
        return PromptToolkitCLI(
            master, session, completer,
            prompt_text=prompt_text, history_file=history_file, describer=describer)
    except Exception:
        # No usable terminal for prompt_toolkit (e.g. not a console).
        logger.debug("prompt_toolkit frontend unavailable", exc_info=True)
    try:
        return ReadlineCLI(completer, prompt_text=prompt_text, history_file=history_file)
    except ImportError:
        return BaseCLI(prompt_text)
