from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, List, Optional, Protocol, Sequence, Tuple

from termtype.core import metrics
from termtype.core.errors import InvalidTransition, WordSourceExhausted

logger = logging.getLogger(__name__)

# Time mode keeps a rolling buffer of words: an initial pull, then a refill
# whenever fewer than REFILL_THRESHOLD untyped words remain.
INITIAL_TIME_BATCH = 50
REFILL_THRESHOLD = 10
REFILL_BATCH = 20

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class GameMode(str, Enum):
    WORDS = "words"
    TIME = "time"


class Phase(str, Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    FINISHED = "finished"
    CANCELLED = "cancelled"


class CharStatus(str, Enum):
    PENDING = "pending"
    CORRECT = "correct"
    INCORRECT = "incorrect"


class WordSource(Protocol):
    def next_batch(self, difficulty: str, count: int) -> Sequence[str]:
        ...


@dataclass(frozen=True)
class SessionConfig:
    """Settings that stay fixed for the lifetime of a session."""

    mode: GameMode = GameMode.WORDS
    word_count: int = 20
    duration: int = 60
    difficulty: str = "easy"

    def __post_init__(self) -> None:
        if self.mode is GameMode.WORDS and self.word_count < 1:
            raise ValueError(f"word_count must be positive, got {self.word_count}")
        if self.mode is GameMode.TIME and self.duration < 1:
            raise ValueError(f"duration must be positive, got {self.duration}")

    @property
    def length(self) -> int:
        """Word count in Words mode, duration in seconds in Time mode."""
        return self.word_count if self.mode is GameMode.WORDS else self.duration

    @property
    def key(self) -> str:
        """Key results are stored under, e.g. ``words_20_easy``."""
        return f"{self.mode.value}_{self.length}_{self.difficulty}"


@dataclass
class Word:
    """A target word plus what the user has typed against it so far."""

    target: str
    statuses: List[CharStatus] = field(default_factory=list)
    overflow: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.statuses:
            self.statuses = [CharStatus.PENDING] * len(self.target)


@dataclass(frozen=True)
class WordView:
    index: int
    target: str
    statuses: Tuple[CharStatus, ...]
    overflow: str = ""


@dataclass(frozen=True)
class Snapshot:
    """Read-only view of a session, built fresh for every render."""

    phase: Phase
    mode: GameMode
    word_index: int
    char_index: int
    words: Tuple[WordView, ...]
    correct: int
    incorrect: int
    keystrokes: int
    live_wpm: float
    live_cpm: float = 0.0
    elapsed: Optional[float] = None
    remaining: Optional[float] = None

    @property
    def current(self) -> Optional[WordView]:
        for view in self.words:
            if view.index == self.word_index:
                return view
        return None


@dataclass(frozen=True)
class Result:
    """Final metrics of a finished session."""

    config: SessionConfig
    elapsed: float
    wpm: float
    accuracy: float
    correct: int
    incorrect: int
    timestamp: str


class TypingSession:
    """Drives a single typing test, one keystroke at a time.

    The session never blocks, never renders and never persists anything:
      * keys arrive through :meth:`handle_char`, :meth:`advance_word` and
        :meth:`backspace`;
      * Time mode is finished cooperatively by calling :meth:`tick` from the
        caller's event loop;
      * the finished :class:`Result` is handed out by :meth:`take_result`.

    The clock starts on the first typed character, not on construction, so
    idle time before typing does not count.  ``clock`` must return seconds and
    is also the time base for the ``now`` argument of :meth:`tick`.
    """

    def __init__(
        self,
        config: SessionConfig,
        word_source: WordSource,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._config = config
        self._source = word_source
        self._clock = clock
        self._word_index = 0
        self._char_index = 0
        self._start_time: Optional[float] = None
        self._correct = 0
        self._incorrect = 0
        self._keystrokes = 0
        self._corrections = 0
        self._phase = Phase.NOT_STARTED
        self._result: Optional[Result] = None
        self._result_taken = False
        self._words = self._initial_words()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def config(self) -> SessionConfig:
        return self._config

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def word_index(self) -> int:
        return self._word_index

    @property
    def char_index(self) -> int:
        return self._char_index

    @property
    def correct(self) -> int:
        return self._correct

    @property
    def incorrect(self) -> int:
        """Incorrect characters, overflow included."""
        return self._incorrect

    @property
    def keystrokes(self) -> int:
        return self._keystrokes

    @property
    def corrections(self) -> int:
        """Keystrokes reverted with backspace."""
        return self._corrections

    @property
    def start_time(self) -> Optional[float]:
        return self._start_time

    @property
    def words(self) -> Tuple[str, ...]:
        return tuple(word.target for word in self._words)

    @property
    def result(self) -> Optional[Result]:
        return self._result

    @property
    def is_over(self) -> bool:
        return self._phase in (Phase.FINISHED, Phase.CANCELLED)

    def elapsed(self) -> Optional[float]:
        """Seconds since the first keystroke while running, else None."""
        if self._phase is not Phase.RUNNING or self._start_time is None:
            return None
        return max(0.0, self._clock() - self._start_time)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def handle_char(self, ch: str) -> Snapshot:
        """Compare *ch* against the next target character of the current word."""
        self._require("type", Phase.NOT_STARTED, Phase.RUNNING)
        self._check_deadline("type")
        if self._phase is Phase.NOT_STARTED:
            self._start_time = self._clock()
            self._phase = Phase.RUNNING
            logger.info("Session %s started", self._config.key)

        word = self._words[self._word_index]
        if self._char_index < len(word.target):
            if ch == word.target[self._char_index]:
                word.statuses[self._char_index] = CharStatus.CORRECT
                self._correct += 1
            else:
                word.statuses[self._char_index] = CharStatus.INCORRECT
                self._incorrect += 1
            self._char_index += 1
        else:
            word.overflow.append(ch)
            self._incorrect += 1
        self._keystrokes += 1
        return self.snapshot()

    def backspace(self) -> Snapshot:
        """Undo the last keystroke of the current word.

        Overflow goes first, then typed characters.  The keystroke count is
        history and is left alone; the reverted keystroke is counted in
        :attr:`corrections` instead.
        """
        self._require("backspace", Phase.RUNNING)
        self._check_deadline("backspace")
        word = self._words[self._word_index]
        if word.overflow:
            word.overflow.pop()
            self._incorrect -= 1
            self._corrections += 1
        elif self._char_index > 0:
            self._char_index -= 1
            if word.statuses[self._char_index] is CharStatus.CORRECT:
                self._correct -= 1
            else:
                self._incorrect -= 1
            word.statuses[self._char_index] = CharStatus.PENDING
            self._corrections += 1
        return self.snapshot()

    def advance_word(self) -> Snapshot:
        """Move to the next word; finishes a Words-mode test after the last one."""
        self._require("advance", Phase.RUNNING)
        self._check_deadline("advance")
        self._word_index += 1
        self._char_index = 0

        if self._config.mode is GameMode.WORDS:
            if self._word_index >= len(self._words):
                self._finish(self._clock() - self._start_time)
            return self.snapshot()

        self._refill()
        if self._word_index >= len(self._words):
            self._phase = Phase.CANCELLED
            logger.error("Session %s cancelled: word source ran dry", self._config.key)
            raise WordSourceExhausted(REFILL_BATCH, 0)
        return self.snapshot()

    def tick(self, now: Optional[float] = None) -> Snapshot:
        """Finish a Time-mode test once its duration has passed."""
        if self._config.mode is not GameMode.TIME:
            raise InvalidTransition("tick a words-mode session", self._phase.value)
        self._require("tick", Phase.RUNNING)
        if now is None:
            now = self._clock()
        if now - self._start_time >= self._config.duration:
            # Clamp to the configured limit so WPM is measured against it.
            self._finish(float(self._config.duration))
        return self.snapshot()

    def cancel(self) -> Snapshot:
        """Abandon the test.  Cancelling twice is a no-op."""
        if self._phase is Phase.CANCELLED:
            return self.snapshot()
        self._require("cancel", Phase.NOT_STARTED, Phase.RUNNING)
        self._phase = Phase.CANCELLED
        logger.info("Session %s cancelled after %d keystrokes", self._config.key, self._keystrokes)
        return self.snapshot()

    def restart(self) -> TypingSession:
        """Return a brand-new session with the same config and a fresh word pull."""
        logger.info("Session %s restarted from %s", self._config.key, self._phase.value)
        return TypingSession(self._config, self._source, self._clock)

    def take_result(self) -> Optional[Result]:
        """Hand out the finished result once; None before finishing or afterwards."""
        if self._result is None or self._result_taken:
            return None
        self._result_taken = True
        return self._result

    def snapshot(self, window: int = 2, history: int = 0) -> Snapshot:
        """Build a render view of *history* past words, the current word and what follows.

        ``window`` counts the current word, so the default shows the current
        and the next word.
        """
        first = max(0, self._word_index - history)
        last = min(len(self._words), self._word_index + max(window, 1))
        views = tuple(
            WordView(
                index=i,
                target=self._words[i].target,
                statuses=tuple(self._words[i].statuses),
                overflow="".join(self._words[i].overflow),
            )
            for i in range(first, last)
        )

        elapsed = self.elapsed()
        remaining: Optional[float] = None
        if self._config.mode is GameMode.TIME:
            if elapsed is not None:
                remaining = max(0.0, self._config.duration - elapsed)
            elif self._phase is Phase.NOT_STARTED:
                remaining = float(self._config.duration)
            else:
                remaining = 0.0

        if self._result is not None:
            live_wpm = self._result.wpm
            live_cpm = metrics.cpm(self._result.correct, self._result.elapsed)
        else:
            live_wpm = metrics.wpm(self._correct, elapsed or 0.0)
            live_cpm = metrics.cpm(self._correct, elapsed or 0.0)

        return Snapshot(
            phase=self._phase,
            mode=self._config.mode,
            word_index=self._word_index,
            char_index=self._char_index,
            words=views,
            correct=self._correct,
            incorrect=self._incorrect,
            keystrokes=self._keystrokes,
            live_wpm=live_wpm,
            live_cpm=live_cpm,
            elapsed=elapsed,
            remaining=remaining,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _require(self, operation: str, *allowed: Phase) -> None:
        if self._phase not in allowed:
            logger.debug("Rejected %s in phase %s", operation, self._phase.value)
            raise InvalidTransition(operation, self._phase.value)

    def _check_deadline(self, operation: str) -> None:
        """Finish a Time-mode test whose limit passed before this key arrived."""
        if self._config.mode is not GameMode.TIME or self._phase is not Phase.RUNNING:
            return
        if self._clock() - self._start_time >= self._config.duration:
            self._finish(float(self._config.duration))
            raise InvalidTransition(operation, self._phase.value)

    def _pull(self, count: int) -> List[str]:
        return list(self._source.next_batch(self._config.difficulty, count))

    def _initial_words(self) -> List[Word]:
        if self._config.mode is GameMode.WORDS:
            wanted = self._config.word_count
            batch = self._pull(wanted)
            if len(batch) < wanted:
                raise WordSourceExhausted(wanted, len(batch))
            return [Word(target) for target in batch[:wanted]]

        batch = self._pull(INITIAL_TIME_BATCH)
        if not batch:
            raise WordSourceExhausted(INITIAL_TIME_BATCH, 0)
        return [Word(target) for target in batch]

    def _refill(self) -> None:
        if len(self._words) - self._word_index >= REFILL_THRESHOLD:
            return
        batch = self._pull(REFILL_BATCH)
        if len(batch) < REFILL_BATCH:
            logger.warning(
                "Word source returned %d of %d words for %s",
                len(batch),
                REFILL_BATCH,
                self._config.difficulty,
            )
        self._words.extend(Word(target) for target in batch)

    def _finish(self, elapsed: float) -> None:
        wpm, accuracy = metrics.compute(self._correct, self._incorrect, elapsed)
        self._result = Result(
            config=self._config,
            elapsed=elapsed,
            wpm=wpm,
            accuracy=accuracy,
            correct=self._correct,
            incorrect=self._incorrect,
            timestamp=datetime.now().strftime(TIMESTAMP_FORMAT),
        )
        self._phase = Phase.FINISHED
        logger.info(
            "Session %s finished: %.2f wpm, %.2f%% accuracy",
            self._config.key,
            wpm,
            accuracy,
        )
