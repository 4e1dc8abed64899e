"""Pure functions turning engine snapshots into prompt_toolkit formatted text."""

from __future__ import annotations

import math
from typing import List, Optional, Tuple

from prompt_toolkit.formatted_text import FormattedText

from termtype.core.session import CharStatus, GameMode, Result, Snapshot, WordView

Fragment = Tuple[str, str]

_STATUS_STYLES = {
    CharStatus.CORRECT: "class:char.correct",
    CharStatus.INCORRECT: "class:char.incorrect",
}


def header_text(snapshot: Snapshot) -> str:
    """Top bar: live WPM and CPM, plus seconds left in Time mode."""
    text = f"WPM: {snapshot.live_wpm:.2f} | CPM: {snapshot.live_cpm:.0f}"
    if snapshot.mode is GameMode.TIME and snapshot.remaining is not None:
        text += f" | Time: {math.ceil(snapshot.remaining)}"
    return text


def word_fragments(view: WordView, current: bool, char_index: int = 0) -> List[Fragment]:
    """Color each character of *view* by its status; overflow is shown after the word."""
    fragments: List[Fragment] = []
    for i, (ch, status) in enumerate(zip(view.target, view.statuses)):
        if status is CharStatus.PENDING:
            style = "class:char.pending" if current else "class:char.untyped"
        else:
            style = _STATUS_STYLES[status]
        if current and i == char_index and not view.overflow:
            style += " class:cursor"
        fragments.append((style, ch))
    if view.overflow:
        fragments.append(("class:char.overflow", view.overflow))
    if current and char_index >= len(view.target):
        fragments.append(("class:cursor", " "))
    return fragments


def _width(fragments: List[Fragment]) -> int:
    return sum(len(text) for _, text in fragments)


def wrap_words(snapshot: Snapshot, width: int) -> List[List[Fragment]]:
    """Lay the snapshot's words out in lines no wider than *width* where possible."""
    width = max(width, 1)
    lines: List[List[Fragment]] = [[]]
    used = 0
    for view in snapshot.words:
        current = view.index == snapshot.word_index
        fragments = word_fragments(view, current, snapshot.char_index if current else 0)
        size = _width(fragments)
        if used and used + 1 + size > width:
            lines.append([])
            used = 0
        if used:
            lines[-1].append(("", " "))
            used += 1
        lines[-1].extend(fragments)
        used += size
    return lines


def text_fragments(snapshot: Snapshot, width: int) -> FormattedText:
    out: List[Fragment] = []
    for i, line in enumerate(wrap_words(snapshot, width)):
        if i:
            out.append(("", "\n"))
        out.extend(line)
    return FormattedText(out)


def results_lines(result: Optional[Result]) -> List[str]:
    """Lines of the end-of-test screen; a cancelled test has no result."""
    if result is None:
        lines = ["Typing test cancelled."]
    else:
        lines = [
            "Typing test complete!",
            f"WPM: {result.wpm:.2f}",
            f"Accuracy: {result.accuracy:.2f}%",
        ]
    return lines + ["", "Press 'Tab' to restart or 'Esc' to exit."]
