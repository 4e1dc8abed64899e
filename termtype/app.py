"""Application entry point and setup for the termtype typing trainer."""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from termtype.core.config import DIFFICULTIES, Settings, SettingsStore, app_dir
from termtype.core.errors import WordSourceExhausted
from termtype.core.results import ResultStore
from termtype.core.session import GameMode
from termtype.core.words import WordRepository
from termtype.ui.menu import SettingsMenu
from termtype.ui.stats_view import StatsViewer
from termtype.ui.typing_view import TypingApp

EPILOG = """examples:
  termtype                 Start a typing test with the saved settings.
  termtype -m              Open the settings menu.
  termtype --mode time --time 30
                           One 30 second test without changing saved settings.
"""


def configure_logging(verbose: bool = False, log_file: Optional[Path] = None) -> None:
    """Log to a file; the terminal belongs to the full-screen UI."""
    log_file = log_file or app_dir() / "termtype.log"
    log_file.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        filename=str(log_file),
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="termtype",
        description="A terminal-based typing test application.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument("-m", "--menu", action="store_true", help="Open the interactive settings menu")
    p.add_argument("-s", "--stats", action="store_true", help="Show your saved stats")
    p.add_argument("--mode", choices=[m.value for m in GameMode], help="Game mode for this run")
    p.add_argument("--length", type=int, help="Number of words (words mode)")
    p.add_argument("--time", type=int, help="Time limit in seconds (time mode)")
    p.add_argument("--difficulty", choices=DIFFICULTIES, help="Word list difficulty")
    p.add_argument("--language", help="Word pack to draw words from")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return p.parse_args(argv)


def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """Apply one-off command line overrides; saved settings are not touched."""
    if args.mode:
        settings.game_mode = args.mode
    if args.length is not None:
        if args.length < 1:
            raise ValueError("--length must be positive")
        settings.test_length = args.length
    if args.time is not None:
        if args.time < 1:
            raise ValueError("--time must be positive")
        settings.time_limit = args.time
    if args.difficulty:
        settings.difficulty = args.difficulty
    if args.language:
        settings.language = args.language
    return settings


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(args.verbose)

    words = WordRepository()
    settings_store = SettingsStore()
    results = ResultStore()

    if args.menu:
        SettingsMenu(settings_store, words.languages()).run()
        return 0

    settings = settings_store.load(words.languages())
    if args.stats:
        StatsViewer(results, settings.colors).run()
        return 0

    try:
        settings = apply_overrides(settings, args)
    except ValueError as e:
        print(f"termtype: {e}", file=sys.stderr)
        return 2
    words.select(settings.language)

    try:
        app = TypingApp(settings, words, results)
    except WordSourceExhausted as e:
        logging.error("Cannot start typing test: %s", e)
        print(
            f"termtype: the '{settings.difficulty}' {words.language} word list has only "
            f"{e.received} words, fewer than the {e.requested} requested.",
            file=sys.stderr,
        )
        return 1
    app.run()
    return 0


def run() -> None:
    sys.exit(main())
