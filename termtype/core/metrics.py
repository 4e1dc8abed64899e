"""Speed and accuracy formulas.

Follows the usual typing-test convention:
  * **WPM** – (correct characters / 5) / elapsed minutes.  Only correct input
    counts towards speed.
  * **Accuracy** – correct / (correct + incorrect) as a percentage.

Both values are computed at full precision and then rounded to two decimal
places with :func:`round`, so identical counters always give identical results.
"""

from __future__ import annotations

from typing import Tuple

CHARS_PER_WORD = 5
PRECISION = 2


def accuracy(correct: int, incorrect: int) -> float:
    """Percentage of correct characters; 0 when nothing was typed."""
    total = correct + incorrect
    if total <= 0:
        return 0.0
    return round(correct / total * 100.0, PRECISION)


def wpm(correct: int, elapsed_seconds: float) -> float:
    """Words per minute on correct characters; 0 when no time has elapsed."""
    if elapsed_seconds <= 0:
        return 0.0
    return round((correct / CHARS_PER_WORD) / (elapsed_seconds / 60.0), PRECISION)


def cpm(correct: int, elapsed_seconds: float) -> float:
    """Correct characters per minute."""
    if elapsed_seconds <= 0:
        return 0.0
    return round(correct / (elapsed_seconds / 60.0), PRECISION)


def compute(correct: int, incorrect: int, elapsed_seconds: float) -> Tuple[float, float]:
    """Return ``(wpm, accuracy)`` for the given counters."""
    return wpm(correct, elapsed_seconds), accuracy(correct, incorrect)
