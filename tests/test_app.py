"""Tests for termtype.app – command line parsing and dispatch."""

from __future__ import annotations

import pytest

from termtype import app
from termtype.core.config import Settings
from termtype.core.session import GameMode


# ---------------------------------------------------------------------------
# parse_args / apply_overrides
# ---------------------------------------------------------------------------

class TestParseArgs:
    def test_defaults(self):
        args = app.parse_args([])
        assert not args.menu
        assert not args.stats
        assert args.mode is None

    def test_short_flags(self):
        args = app.parse_args(["-m", "-s"])
        assert args.menu and args.stats

    def test_rejects_unknown_difficulty(self):
        with pytest.raises(SystemExit):
            app.parse_args(["--difficulty", "nightmare"])


class TestOverrides:
    def test_mode_and_time(self):
        s = app.apply_overrides(Settings(), app.parse_args(["--mode", "time", "--time", "15"]))
        assert s.mode is GameMode.TIME
        assert s.time_limit == 15

    def test_length_and_difficulty(self):
        s = app.apply_overrides(Settings(), app.parse_args(["--length", "7", "--difficulty", "hard"]))
        assert (s.test_length, s.difficulty) == (7, "hard")

    def test_nonpositive_length(self):
        with pytest.raises(ValueError):
            app.apply_overrides(Settings(), app.parse_args(["--length", "0"]))

    def test_no_overrides_keep_settings(self):
        s = Settings(test_length=35)
        assert app.apply_overrides(s, app.parse_args([])).test_length == 35


# ---------------------------------------------------------------------------
# main
# ---------------------------------------------------------------------------

class TestMain:
    def test_menu(self, home, monkeypatch: pytest.MonkeyPatch):
        calls = []
        monkeypatch.setattr(app.SettingsMenu, "run", lambda self: calls.append("menu"))
        assert app.main(["--menu"]) == 0
        assert calls == ["menu"]

    def test_stats(self, home, monkeypatch: pytest.MonkeyPatch):
        calls = []
        monkeypatch.setattr(app.StatsViewer, "run", lambda self: calls.append("stats"))
        assert app.main(["-s"]) == 0
        assert calls == ["stats"]

    def test_runs_typing_test(self, home, monkeypatch: pytest.MonkeyPatch):
        started = []
        monkeypatch.setattr(app.TypingApp, "run", lambda self: started.append(self.session.config))
        assert app.main(["--mode", "words", "--length", "10"]) == 0
        assert started[0].word_count == 10
        assert (home / "config.json").exists()

    def test_bad_override(self, home, capsys):
        assert app.main(["--time", "0"]) == 2
        assert "--time must be positive" in capsys.readouterr().err

    def test_too_many_words(self, home, monkeypatch: pytest.MonkeyPatch, capsys):
        monkeypatch.setattr(app.TypingApp, "run", lambda self: None)
        assert app.main(["--length", "100000"]) == 1
        assert "fewer than the 100000 requested" in capsys.readouterr().err
