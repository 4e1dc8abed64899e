"""Saved stats viewer: last results as a table or a WPM graph."""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from prompt_toolkit.application import Application
from prompt_toolkit.formatted_text import FormattedText
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.layout import Layout, Window
from prompt_toolkit.layout.controls import FormattedTextControl

from termtype.core.config import ColorTheme
from termtype.core.results import ResultRecord, ResultStore
from termtype.ui.colors import build_style

TABLE_ROWS = 5
GRAPH_HEIGHT = 10
DEFAULT_WIDTH = 80

INSTRUCTIONS = "Use ↑/↓ to select mode, 't' for table, 'g' for graph, 'q' to quit."


def display_key(key: str) -> str:
    """``words_20_easy`` -> ``WORDS 20 EASY``."""
    return key.replace("_", " ").upper()


def table_lines(records: Sequence[ResultRecord]) -> List[str]:
    lines = [f"{'Timestamp':<25} | {'WPM':<10} | {'Accuracy':<10}"]
    for r in records[:TABLE_ROWS]:
        lines.append(f"{r.timestamp:<25} | {r.wpm:<10.2f} | {r.accuracy:<9.2f}%")
    return lines


def best_line(record: Optional[ResultRecord]) -> str:
    if record is None:
        return ""
    return f"Best: {record.wpm:.2f} WPM at {record.accuracy:.2f}% ({record.timestamp})"


def graph_lines(records: Sequence[ResultRecord], width: int, height: int = GRAPH_HEIGHT) -> List[str]:
    """Plot WPM of the most recent results, oldest on the left.

    Returns ``height + 1`` rows; the top row is labelled with the best WPM
    shown and the bottom row with 0.
    """
    if not records or width < 1:
        return []
    shown = list(records)[-width:]
    max_wpm = max(r.wpm for r in shown)
    rows = [[" "] * len(shown) for _ in range(height + 1)]
    for x, r in enumerate(shown):
        level = int(r.wpm / max_wpm * height) if max_wpm > 0 else 0
        rows[height - level][x] = "*"

    lines = []
    for y, row in enumerate(rows):
        if y == 0:
            label = f"{max_wpm:.0f}"
        elif y == height:
            label = "0"
        else:
            label = ""
        lines.append(f"{label:>6} |{''.join(row)}")
    return lines


class StatsViewer:
    def __init__(self, store: ResultStore, colors: Optional[ColorTheme] = None) -> None:
        self._store = store
        self._colors = colors or ColorTheme()
        self._selected = 0
        self._view = "table"

    @property
    def selected(self) -> int:
        return self._selected

    @property
    def view(self) -> str:
        return self._view

    def move(self, delta: int) -> None:
        keys = self._store.keys()
        if not keys:
            return
        self._selected = max(0, min(len(keys) - 1, self._selected + delta))

    def set_view(self, view: str) -> None:
        if view not in ("table", "graph"):
            raise ValueError(f"unknown stats view {view!r}")
        self._view = view

    def fragments(self, width: int = DEFAULT_WIDTH) -> FormattedText:
        out: List[Tuple[str, str]] = [("class:title", "Saved Stats"), ("", "\n\n")]
        if self._store.is_empty():
            out.append(("", "No stats saved yet.\n"))
            out.append(("class:hint", INSTRUCTIONS))
            return FormattedText(out)
        for i, key in enumerate(self._store.keys()):
            if i != self._selected:
                out.append(("", f"{display_key(key)}\n\n"))
                continue
            out.append(("class:selected", display_key(key)))
            out.append(("", "\n\n"))
            if self._view == "table":
                body = table_lines(self._store.latest(key, TABLE_ROWS))
                out.append(("class:header", body[0] + "\n"))
                out.extend(("", line + "\n") for line in body[1:])
                out.append(("class:status", best_line(self._store.best(key)) + "\n"))
            else:
                for line in graph_lines(self._store.history(key), max(1, width - 10)):
                    label, _, plot = line.partition("|")
                    out.append(("class:graph.axis", label + "|"))
                    out.append(("class:graph.point", plot + "\n"))
            out.append(("", "\n"))
        out.append(("", "\n"))
        out.append(("class:hint", INSTRUCTIONS))
        return FormattedText(out)

    def run(self) -> None:
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

        @kb.add("t")
        def _table(event) -> None:
            self.set_view("table")

        @kb.add("g")
        def _graph(event) -> None:
            self.set_view("graph")

        app: Application = Application(
            key_bindings=kb,
            style=build_style(self._colors),
            full_screen=True,
        )
        app.layout = Layout(
            Window(FormattedTextControl(lambda: self.fragments(app.output.get_size().columns)))
        )
        app.run()
