"""Terminal styles built from the user's color theme."""

from __future__ import annotations

from prompt_toolkit.styles import Style

from termtype.core.config import ColorTheme

UNTYPED = "#808080"
MUTED = "#888888"
GRAPH = "#ff0000"


def build_style(colors: ColorTheme) -> Style:
    """prompt_toolkit style for the typing test, menu and stats screens."""
    return Style.from_dict(
        {
            "char.correct": colors.correct,
            "char.incorrect": colors.incorrect,
            "char.pending": colors.pending,
            "char.untyped": UNTYPED,
            "char.overflow": f"{colors.incorrect} underline",
            "cursor": "reverse",
            "header": "bold",
            "title": "bold",
            "selected": "reverse",
            "hint": MUTED,
            "status": "italic",
            "frame.border": MUTED,
            "graph.point": GRAPH,
            "graph.axis": MUTED,
        }
    )
