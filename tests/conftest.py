"""Shared fakes for engine and UI tests."""

from __future__ import annotations

from typing import List, Optional, Sequence

import pytest


class FakeClock:
    """Manually advanced clock, in seconds."""

    def __init__(self, now: float = 100.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ListSource:
    """Word source handing out *words*; cycles through them when ``cycle`` is set."""

    def __init__(self, words: Sequence[str], cycle: bool = False) -> None:
        self.words = list(words)
        self.cycle = cycle
        self.calls: List[tuple] = []
        self._offset = 0

    def next_batch(self, difficulty: str, count: int) -> List[str]:
        self.calls.append((difficulty, count))
        if not self.cycle:
            return self.words[:count]
        batch = [self.words[(self._offset + i) % len(self.words)] for i in range(count)]
        self._offset += count
        return batch


class BatchSource:
    """Returns the prepared batches in order, then empty batches."""

    def __init__(self, *batches: Sequence[str]) -> None:
        self.batches = [list(b) for b in batches]
        self.calls: List[tuple] = []

    def next_batch(self, difficulty: str, count: int) -> List[str]:
        self.calls.append((difficulty, count))
        if not self.batches:
            return []
        return self.batches.pop(0)[:count]


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def home(tmp_path, monkeypatch: pytest.MonkeyPatch):
    """Point TERMTYPE_HOME at a temp dir so tests never touch ~/.termtype."""
    monkeypatch.setenv("TERMTYPE_HOME", str(tmp_path / "home"))
    return tmp_path / "home"


def type_word(session, text: Optional[str]) -> None:
    for ch in text or "":
        session.handle_char(ch)
