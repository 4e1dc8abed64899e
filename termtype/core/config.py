from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from termtype.core.session import GameMode, SessionConfig

logger = logging.getLogger(__name__)

DIFFICULTIES = ("easy", "medium", "hard")
LAYOUT_THEMES = ("default", "boxes")

LENGTH_STEP = 5
MIN_TEST_LENGTH = 5
TIME_STEP = 5
MIN_TIME_LIMIT = 10

HEX_COLOR = re.compile(r"#[0-9a-fA-F]{6}")


def app_dir() -> Path:
    """Directory holding settings, results, logs and user word packs.

    Defaults to ``~/.termtype``; ``TERMTYPE_HOME`` overrides it.
    """
    override = os.environ.get("TERMTYPE_HOME")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".termtype"


@dataclass
class ColorTheme:
    correct: str = "#00ff00"
    incorrect: str = "#ff0000"
    pending: str = "#ffffff"


@dataclass
class Settings:
    game_mode: str = GameMode.WORDS.value
    test_length: int = 20
    time_limit: int = 60
    difficulty: str = "easy"
    restart_button: bool = True
    layout_theme: str = "default"
    language: str = "english"
    colors: ColorTheme = field(default_factory=ColorTheme)

    @property
    def mode(self) -> GameMode:
        return GameMode(self.game_mode)

    def session_config(self) -> SessionConfig:
        return SessionConfig(
            mode=self.mode,
            word_count=self.test_length,
            duration=self.time_limit,
            difficulty=self.difficulty,
        )

    # Adjustments used by the settings menu.  ``direction`` is +1 or -1.

    def toggle_mode(self) -> None:
        self.game_mode = GameMode.TIME.value if self.mode is GameMode.WORDS else GameMode.WORDS.value

    def step_length(self, direction: int) -> None:
        self.test_length = max(MIN_TEST_LENGTH, self.test_length + direction * LENGTH_STEP)

    def step_time(self, direction: int) -> None:
        self.time_limit = max(MIN_TIME_LIMIT, self.time_limit + direction * TIME_STEP)

    def toggle_layout(self) -> None:
        self.layout_theme = "boxes" if self.layout_theme == "default" else "default"

    def cycle_difficulty(self, direction: int) -> None:
        self.difficulty = _cycle(DIFFICULTIES, self.difficulty, direction)

    def cycle_language(self, languages: Sequence[str], direction: int) -> None:
        if languages:
            self.language = _cycle(languages, self.language, direction)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> Settings:
        """Build settings from a JSON payload, ignoring unknown keys."""
        defaults = cls()
        known = {f.name for f in fields(cls)}
        values = {key: value for key, value in payload.items() if key in known}
        colors = values.pop("colors", None)
        settings = cls(**values)
        if isinstance(colors, dict):
            settings.colors = ColorTheme(
                **{
                    f.name: _color(f.name, colors.get(f.name), getattr(defaults.colors, f.name))
                    for f in fields(ColorTheme)
                }
            )
        settings.game_mode = GameMode(settings.game_mode).value
        settings.test_length = max(MIN_TEST_LENGTH, int(settings.test_length))
        settings.time_limit = max(MIN_TIME_LIMIT, int(settings.time_limit))
        settings.restart_button = bool(settings.restart_button)
        if settings.difficulty not in DIFFICULTIES:
            raise ValueError(f"unknown difficulty {settings.difficulty!r}")
        if settings.layout_theme not in LAYOUT_THEMES:
            raise ValueError(f"unknown layout theme {settings.layout_theme!r}")
        return settings


def _color(name: str, value: Any, default: str) -> str:
    if value is None:
        return default
    if not isinstance(value, str) or not HEX_COLOR.fullmatch(value):
        logger.warning("Invalid %s color %r, using %s", name, value, default)
        return default
    return value


def _cycle(options: Sequence[str], current: str, direction: int) -> str:
    try:
        index = list(options).index(current)
    except ValueError:
        index = 0
    return options[(index + direction) % len(options)]


class SettingsStore:
    """Loads and saves :class:`Settings` as JSON (``config.json`` in :func:`app_dir`).

    A missing or unreadable file yields defaults, which are written back so the
    user has a file to edit.
    """

    def __init__(self, file_path: Optional[Path] = None) -> None:
        self._file_path = file_path or app_dir() / "config.json"

    @property
    def path(self) -> Path:
        return self._file_path

    def load(self, languages: Sequence[str] = ()) -> Settings:
        settings = self._read()
        if settings is None:
            settings = Settings()
            if languages:
                settings.language = languages[0]
            try:
                self.save(settings)
            except OSError as e:
                logger.warning("Could not write default settings to %s: %s", self._file_path, e)
        if languages and settings.language not in languages:
            logger.warning("Unknown language %r, falling back to %r", settings.language, languages[0])
            settings.language = languages[0]
        return settings

    def save(self, settings: Settings) -> None:
        """Write settings to disk.  Raises OSError so the caller can report it."""
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        self._file_path.write_text(json.dumps(settings.to_dict(), indent=2), encoding="utf-8")

    def _read(self) -> Optional[Settings]:
        if not self._file_path.exists():
            return None
        try:
            payload = json.loads(self._file_path.read_text(encoding="utf-8"))
            if not isinstance(payload, dict):
                raise ValueError("expected a JSON object")
            return Settings.from_dict(payload)
        except (OSError, ValueError, TypeError) as e:
            logger.warning("Could not load settings from %s: %s", self._file_path, e)
            return None
