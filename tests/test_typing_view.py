"""Tests for termtype.ui.typing_view – key handling around the engine."""

from __future__ import annotations

from typing import List

import pytest

from conftest import BatchSource, ListSource
from termtype.core.config import Settings
from termtype.core.errors import WordSourceExhausted
from termtype.core.session import Phase, Result
from termtype.ui.typing_view import TypingApp


class RecordingStore:
    def __init__(self) -> None:
        self.saved: List[Result] = []

    def save(self, result: Result) -> None:
        self.saved.append(result)


@pytest.fixture()
def store() -> RecordingStore:
    return RecordingStore()


def make_app(store, clock, words=("cat", "dog"), **settings) -> TypingApp:
    s = Settings(test_length=len(words), **settings)
    return TypingApp(s, ListSource(words, cycle=s.game_mode == "time"), store, clock)


def type_text(app: TypingApp, text: str) -> None:
    for ch in text:
        if ch == " ":
            app.on_space()
        else:
            app.on_char(ch)


# ---------------------------------------------------------------------------
# Words mode
# ---------------------------------------------------------------------------

class TestWordsMode:
    def test_finished_result_saved_once(self, store, clock):
        app = make_app(store, clock)
        type_text(app, "cat dog ")
        app.on_space()  # ignored, test already over
        assert app.session.phase is Phase.FINISHED
        assert len(store.saved) == 1
        assert app.last_result is store.saved[0]
        assert store.saved[0].accuracy == 100.0

    def test_space_before_typing_is_ignored(self, store, clock):
        app = make_app(store, clock)
        app.on_space()
        assert app.session.phase is Phase.NOT_STARTED
        assert app.session.word_index == 0

    def test_backspace(self, store, clock):
        app = make_app(store, clock)
        type_text(app, "cx")
        app.on_backspace()
        assert app.session.char_index == 1
        assert app.session.incorrect == 0

    def test_keys_after_finish_are_ignored(self, store, clock):
        app = make_app(store, clock)
        type_text(app, "cat dog ")
        app.on_char("z")
        app.on_backspace()
        assert app.session.keystrokes == 6


# ---------------------------------------------------------------------------
# Escape / Tab
# ---------------------------------------------------------------------------

class TestEscapeAndTab:
    def test_escape_cancels_without_saving(self, store, clock):
        app = make_app(store, clock)
        type_text(app, "ca")
        assert app.on_escape() is False
        assert app.session.phase is Phase.CANCELLED
        assert store.saved == []

    def test_escape_on_results_screen_exits(self, store, clock):
        app = make_app(store, clock)
        app.on_escape()
        assert app.on_escape() is True

    def test_tab_restarts_mid_test(self, store, clock):
        app = make_app(store, clock)
        type_text(app, "ca")
        app.on_tab()
        assert app.session.phase is Phase.NOT_STARTED
        assert app.session.keystrokes == 0

    def test_tab_ignored_when_restart_disabled(self, store, clock):
        app = make_app(store, clock, restart_button=False)
        type_text(app, "ca")
        app.on_tab()
        assert app.session.keystrokes == 2

    def test_tab_on_results_screen_always_restarts(self, store, clock):
        app = make_app(store, clock, restart_button=False)
        type_text(app, "cat dog ")
        app.on_tab()
        assert app.session.phase is Phase.NOT_STARTED
        assert app.last_result is None
        assert len(store.saved) == 1


# ---------------------------------------------------------------------------
# Time mode
# ---------------------------------------------------------------------------

class TestTimeMode:
    def test_tick_finishes_and_saves(self, store, clock):
        app = make_app(store, clock, game_mode="time", time_limit=30)
        type_text(app, "cat")
        clock.advance(30)
        app.on_tick()
        assert app.session.phase is Phase.FINISHED
        assert store.saved[0].elapsed == 30

    def test_late_keystroke_finishes_and_saves(self, store, clock):
        app = make_app(store, clock, game_mode="time", time_limit=30)
        type_text(app, "c")
        clock.advance(40)
        type_text(app, "at")
        assert app.session.phase is Phase.FINISHED
        assert len(store.saved) == 1
        assert store.saved[0].correct == 1

    def test_tick_before_start_is_noop(self, store, clock):
        app = make_app(store, clock, game_mode="time", time_limit=30)
        clock.advance(100)
        app.on_tick()
        assert app.session.phase is Phase.NOT_STARTED

    def test_tick_in_words_mode_is_noop(self, store, clock):
        app = make_app(store, clock)
        type_text(app, "c")
        clock.advance(1000)
        app.on_tick()
        assert app.session.phase is Phase.RUNNING

    def test_starved_source_reports_message(self, store, clock):
        settings = Settings(game_mode="time", time_limit=30)
        app = TypingApp(settings, BatchSource(["a"]), store, clock)
        type_text(app, "a ")
        assert app.session.phase is Phase.CANCELLED
        assert app.message is not None
        assert store.saved == []


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

class TestRendering:
    def test_words_snapshot_covers_all_words(self, store, clock):
        app = make_app(store, clock, words=("a", "b", "c"))
        type_text(app, "a ")
        snap = app.snapshot()
        assert [v.target for v in snap.words] == ["a", "b", "c"]

    def test_body_shows_results_when_finished(self, store, clock):
        app = make_app(store, clock)
        type_text(app, "cat dog ")
        text = "".join(t for _, t in app._body())
        assert "Typing test complete!" in text

    def test_body_shows_words_while_typing(self, store, clock):
        app = make_app(store, clock)
        text = "".join(t for _, t in app._body())
        assert text.startswith("cat dog")

    def test_short_word_list_raises_on_construction(self, store, clock):
        with pytest.raises(WordSourceExhausted):
            TypingApp(Settings(test_length=5), ListSource(["a"]), store, clock)
