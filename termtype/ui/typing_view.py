"""Full-screen typing test driven by the session engine."""

from __future__ import annotations

import logging
import time
from typing import Callable, List, Optional

from prompt_toolkit.application import Application
from prompt_toolkit.formatted_text import FormattedText
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.keys import Keys
from prompt_toolkit.layout import HSplit, Layout, Window, WindowAlign
from prompt_toolkit.layout.controls import FormattedTextControl
from prompt_toolkit.widgets import Frame

from termtype.core.config import Settings
from termtype.core.errors import InvalidTransition, WordSourceExhausted
from termtype.core.results import ResultStore
from termtype.core.session import GameMode, Phase, Result, Snapshot, TypingSession, WordSource
from termtype.ui import render
from termtype.ui.colors import build_style

logger = logging.getLogger(__name__)

# Time mode shows the last few typed words and a window of upcoming ones.
HISTORY_WORDS = 10
WINDOW_WORDS = 60
REFRESH_INTERVAL = 0.1
DEFAULT_WIDTH = 80


class TypingApp:
    """Forwards key events into a :class:`TypingSession` and draws its snapshots.

    The ``on_*`` handlers hold all behaviour so they can be exercised without
    a terminal; the prompt_toolkit key bindings only call them.
    """

    def __init__(
        self,
        settings: Settings,
        word_source: WordSource,
        result_store: ResultStore,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._settings = settings
        self._store = result_store
        self._session = TypingSession(settings.session_config(), word_source, clock)
        self._last_result: Optional[Result] = None
        self._message: Optional[str] = None
        self._app: Optional[Application] = None

    @property
    def session(self) -> TypingSession:
        return self._session

    @property
    def last_result(self) -> Optional[Result]:
        return self._last_result

    @property
    def message(self) -> Optional[str]:
        return self._message

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def on_char(self, ch: str) -> None:
        self._dispatch(self._session.handle_char, ch)

    def on_space(self) -> None:
        self._dispatch(self._session.advance_word)

    def on_backspace(self) -> None:
        self._dispatch(self._session.backspace)

    def on_tab(self) -> None:
        """Restart mid-test when allowed; always start a new test from the results screen."""
        if self._session.is_over or self._settings.restart_button:
            self._restart()

    def on_escape(self) -> bool:
        """Cancel a test in progress.  Returns True when the app should exit."""
        if self._session.is_over:
            return True
        self._dispatch(self._session.cancel)
        return False

    def on_tick(self) -> None:
        session = self._session
        if session.config.mode is GameMode.TIME and session.phase is Phase.RUNNING:
            self._dispatch(session.tick)

    def _dispatch(self, operation: Callable[..., Snapshot], *args: str) -> None:
        try:
            operation(*args)
        except InvalidTransition as e:
            logger.debug("Ignoring key: %s", e)
        except WordSourceExhausted as e:
            logger.error("Typing test stopped: %s", e)
            self._message = "Ran out of words, the test was cancelled."
        self._collect_result()

    def _collect_result(self) -> None:
        result = self._session.take_result()
        if result is None:
            return
        self._last_result = result
        self._store.save(result)

    def _restart(self) -> None:
        try:
            self._session = self._session.restart()
        except WordSourceExhausted as e:
            logger.error("Could not restart typing test: %s", e)
            self._message = "Not enough words to start a new test."
            return
        self._last_result = None
        self._message = None

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def snapshot(self) -> Snapshot:
        session = self._session
        if session.config.mode is GameMode.WORDS:
            return session.snapshot(window=len(session.words), history=session.word_index)
        return session.snapshot(window=WINDOW_WORDS, history=min(session.word_index, HISTORY_WORDS))

    def _header(self) -> FormattedText:
        return FormattedText([("class:header", render.header_text(self.snapshot()))])

    def _body(self) -> FormattedText:
        if self._session.is_over:
            lines: List[str] = render.results_lines(self._last_result)
            if self._message:
                lines.insert(1, self._message)
            return FormattedText([("", "\n".join(lines))])
        return render.text_fragments(self.snapshot(), self._text_width())

    def _text_width(self) -> int:
        if self._app is None:
            return DEFAULT_WIDTH
        columns = self._app.output.get_size().columns
        margin = 6 if self._settings.layout_theme == "boxes" else 4
        return max(10, columns - margin)

    def _build_layout(self) -> Layout:
        header = Window(FormattedTextControl(self._header), height=1, align=WindowAlign.CENTER)
        body = Window(FormattedTextControl(self._body), wrap_lines=False)
        if self._settings.layout_theme == "boxes":
            return Layout(HSplit([Frame(header), Frame(body)]))
        return Layout(HSplit([Window(height=1), header, Window(height=1), body]))

    def _build_key_bindings(self) -> KeyBindings:
        kb = KeyBindings()

        @kb.add("c-c")
        def _quit(event) -> None:
            event.app.exit()

        @kb.add("escape", eager=True)
        def _escape(event) -> None:
            if self.on_escape():
                event.app.exit()

        @kb.add("tab")
        def _tab(event) -> None:
            self.on_tab()

        @kb.add("space")
        def _space(event) -> None:
            self.on_space()

        @kb.add("backspace")
        def _backspace(event) -> None:
            self.on_backspace()

        @kb.add(Keys.Any)
        def _char(event) -> None:
            if len(event.data) == 1:
                self.on_char(event.data)

        return kb

    def run(self) -> Optional[Result]:
        """Run until the user quits; returns the last finished result, if any."""
        self._app = Application(
            layout=self._build_layout(),
            key_bindings=self._build_key_bindings(),
            style=build_style(self._settings.colors),
            full_screen=True,
            refresh_interval=REFRESH_INTERVAL,
            before_render=lambda _app: self.on_tick(),
        )
        self._app.run()
        return self._last_result
