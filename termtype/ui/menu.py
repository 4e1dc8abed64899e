"""Interactive settings menu."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from prompt_toolkit.application import Application
from prompt_toolkit.formatted_text import FormattedText
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.layout import Layout, Window
from prompt_toolkit.layout.controls import FormattedTextControl

from termtype.core.config import Settings, SettingsStore
from termtype.ui.colors import build_style

logger = logging.getLogger(__name__)

MENU_ITEMS = (
    "Game Mode",
    "Test Length (Words)",
    "Time Limit (Seconds)",
    "Difficulty",
    "Layout Theme",
    "Language",
    "Restart With Tab",
)

INSTRUCTIONS = "Use ↑/↓ to navigate, ←/→ to change values, 'enter' to save, 'q' to quit."


class SettingsMenu:
    def __init__(
        self,
        store: SettingsStore,
        languages: Sequence[str],
        settings: Optional[Settings] = None,
    ) -> None:
        self._store = store
        self._languages = list(languages)
        self._settings = settings if settings is not None else store.load(self._languages)
        self._selected = 0
        self._status = ""

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def selected(self) -> int:
        return self._selected

    @property
    def status(self) -> str:
        return self._status

    def move(self, delta: int) -> None:
        self._selected = max(0, min(len(MENU_ITEMS) - 1, self._selected + delta))

    def change(self, direction: int) -> None:
        """Change the selected value; *direction* is +1 (right) or -1 (left)."""
        s = self._settings
        item = self._selected
        if item == 0:
            s.toggle_mode()
        elif item == 1:
            s.step_length(direction)
        elif item == 2:
            s.step_time(direction)
        elif item == 3:
            s.cycle_difficulty(direction)
        elif item == 4:
            s.toggle_layout()
        elif item == 5:
            s.cycle_language(self._languages, direction)
        elif item == 6:
            s.restart_button = not s.restart_button

    def save(self) -> None:
        try:
            self._store.save(self._settings)
        except OSError as e:
            logger.warning("Could not save settings to %s: %s", self._store.path, e)
            self._status = f"Error saving config: {e}"
            return
        logger.info("Settings saved to %s", self._store.path)
        self._status = "Config saved successfully!"

    def value_text(self, index: int) -> str:
        s = self._settings
        values = (
            s.mode.value.capitalize(),
            f"{s.test_length} words",
            f"{s.time_limit} seconds",
            s.difficulty.capitalize(),
            s.layout_theme.capitalize(),
            s.language,
            "On" if s.restart_button else "Off",
        )
        return values[index]

    def fragments(self) -> FormattedText:
        out: List[tuple] = [("class:title", "Settings Menu"), ("", "\n\n")]
        for i, item in enumerate(MENU_ITEMS):
            line = f"{item:<25}: {self.value_text(i)}"
            out.append(("class:selected" if i == self._selected else "", line))
            out.append(("", "\n\n"))
        out.append(("class:status", self._status))
        out.append(("", "\n\n"))
        out.append(("class:hint", INSTRUCTIONS))
        return FormattedText(out)

    def run(self) -> Settings:
        kb = KeyBindings()

        @kb.add("q")
        @kb.add("c-c")
        def _quit(event) -> None:
            event.app.exit()

        @kb.add("up")
        def _up(event) -> None:
            self.move(-1)

        @kb.add("down")
        def _down(event) -> None:
            self.move(1)

        @kb.add("left")
        def _left(event) -> None:
            self.change(-1)

        @kb.add("right")
        def _right(event) -> None:
            self.change(1)

        @kb.add("enter")
        def _enter(event) -> None:
            self.save()

        app = Application(
            layout=Layout(Window(FormattedTextControl(self.fragments))),
            key_bindings=kb,
            style=build_style(self._settings.colors),
            full_screen=True,
        )
        app.run()
        return self._settings
